import numpy as np
import onnxruntime as ort
from loguru import logger
from printer_lens.core.errors import InferenceFailure, ModelLoadFailure
from printer_lens.vision.base import BaseModelRunner, to_batch


class OnnxModelRunner(BaseModelRunner):
    def __init__(self, model_path: str, device: str = "cpu"):
        # 1. Load Model with Provider Priority
        if device.upper() in ("CUDA", "GPU"):
            providers = ['CUDAExecutionProvider', 'CPUExecutionProvider']
        else:
            providers = ['CPUExecutionProvider']

        logger.info(f"📦 Loading ONNX model from {model_path} on {providers[0]}...")
        try:
            self.session = ort.InferenceSession(model_path, providers=providers)
        except Exception as e:
            raise ModelLoadFailure(f"Could not load ONNX model {model_path}: {e}") from e

        # 2. Cache Input/Output Names
        model_input = self.session.get_inputs()[0]
        self.input_name = model_input.name
        self.output_names = [o.name for o in self.session.get_outputs()]

        # 3. Channel layout: NCHW exports put the 3 channels on axis 1
        shape = model_input.shape
        self.channels_first = len(shape) == 4 and shape[1] == 3
        logger.debug(f"Model input {self.input_name} shape={shape} channels_first={self.channels_first}")

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        batch = to_batch(tensor, self.channels_first)
        try:
            outputs = self.session.run(self.output_names[:1], {self.input_name: batch})
        except Exception as e:
            raise InferenceFailure(f"ONNX inference failed: {e}") from e
        return np.asarray(outputs[0], dtype=np.float32)
