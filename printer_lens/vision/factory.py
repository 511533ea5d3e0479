import os
from loguru import logger
from printer_lens.core.config import settings, Settings, ModelBackend
from printer_lens.core.errors import ModelLoadFailure
from printer_lens.vision.base import BaseModelRunner


def get_runner(config: Settings = settings) -> BaseModelRunner:
    """
    Factory: Returns the loaded model runner for the configured backend.

    Raises ModelLoadFailure when the artifact is missing or the backend
    refuses it. The caller treats that as fatal.
    """
    backend = config.MODEL_BACKEND
    path = config.absolute_model_path
    device = config.DEVICE.value

    logger.info(f"🏭 Factory Request: Backend={backend.value}, Device={device}")
    logger.debug(f"📂 Loading Model from: {path}")

    if not os.path.exists(path):
        raise ModelLoadFailure(f"Model artifact not found: {path}")

    # Backend libraries are imported lazily so only the selected one must be installed
    if backend == ModelBackend.ONNX:
        from printer_lens.vision.models.onnx import OnnxModelRunner
        return OnnxModelRunner(model_path=path, device=device)

    if backend == ModelBackend.OPENVINO:
        from printer_lens.vision.models.openvino import OpenVinoModelRunner
        return OpenVinoModelRunner(model_path=path, device=device)

    raise ModelLoadFailure(f"Unknown model backend: {backend}")
