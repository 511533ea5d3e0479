import os
from enum import Enum
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 1. Enums
class ModelBackend(str, Enum):
    ONNX = "onnx"
    OPENVINO = "openvino"

class Device(str, Enum):
    CPU = "cpu"
    CUDA = "cuda"
    GPU = "gpu"

# 2. The Settings Class
class Settings(BaseSettings):
    # --- APP INFO ---
    PROJECT_NAME: str = "Printer Lens"

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    # Empty string disables the file sink
    LOG_FILE: str = "logs/app.log"

    # --- INPUT ---
    # "0" (webcam index), a file path or "rtsp://..."
    CAMERA_SOURCE: str = "0"
    # Clockwise degrees that make the camera image upright
    CAMERA_ROTATION: int = 0

    # --- MODEL CONFIG ---
    MODEL_BACKEND: ModelBackend = ModelBackend.ONNX
    MODEL_PATH: str = "models/best_float32.onnx"
    INPUT_SIZE: int = 640
    CLASS_LABEL: str = "Printer"

    # --- HARDWARE ---
    DEVICE: Device = Device.CPU

    # --- THRESHOLDS ---
    CONF_THRESHOLD: float = 0.5
    IOU_THRESHOLD: float = 0.45

    # --- SERVER ---
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    STREAM_JPEG_QUALITY: int = 80

    # --- COMPUTED PROPERTIES ---
    BASE_DIR: str = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

    @field_validator("CONF_THRESHOLD", "IOU_THRESHOLD")
    @classmethod
    def _unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {value}")
        return value

    @field_validator("CAMERA_ROTATION")
    @classmethod
    def _right_angle(cls, value: int) -> int:
        if value % 90 != 0:
            raise ValueError(f"rotation must be a multiple of 90 degrees, got {value}")
        return value % 360

    @field_validator("INPUT_SIZE")
    @classmethod
    def _positive_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"INPUT_SIZE must be positive, got {value}")
        return value

    @property
    def absolute_model_path(self) -> str:
        if os.path.isabs(self.MODEL_PATH):
            return self.MODEL_PATH
        return os.path.join(self.BASE_DIR, self.MODEL_PATH)

    @property
    def camera_device(self) -> int | str:
        # cv2.VideoCapture wants an int for local webcams
        if self.CAMERA_SOURCE.isdigit():
            return int(self.CAMERA_SOURCE)
        return self.CAMERA_SOURCE

    # 3. Config Rules
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

settings = Settings()
