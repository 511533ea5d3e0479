import numpy as np
from loguru import logger
from openvino import Core
from printer_lens.core.errors import InferenceFailure, ModelLoadFailure
from printer_lens.vision.base import BaseModelRunner, to_batch


class OpenVinoModelRunner(BaseModelRunner):
    def __init__(self, model_path: str, device: str = "CPU"):
        # OpenVINO device names are upper case: CPU, GPU, NPU
        device_name = "GPU" if device.upper() in ("CUDA", "GPU") else "CPU"
        logger.info(f"📦 Loading OpenVINO model from {model_path} on {device_name}...")

        try:
            core = Core()
            model = core.read_model(model=model_path)
            self.model = core.compile_model(model=model, device_name=device_name)
        except Exception as e:
            raise ModelLoadFailure(f"Could not load OpenVINO model {model_path}: {e}") from e

        self.input_layer = self.model.input(0)
        self.output_layer = self.model.output(0)

        shape = self.input_layer.partial_shape
        self.channels_first = shape.rank.get_length() == 4 and shape[1].is_static and shape[1].get_length() == 3

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        batch = to_batch(tensor, self.channels_first)
        try:
            results = self.model([batch])[self.output_layer]
        except Exception as e:
            raise InferenceFailure(f"OpenVINO inference failed: {e}") from e
        return np.asarray(results, dtype=np.float32)
