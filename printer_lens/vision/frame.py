from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np
from loguru import logger


class PixelFormat(str, Enum):
    NV21 = "nv21"  # Y plane + interleaved VU (mobile camera default)
    I420 = "i420"  # Y plane + U plane + V plane
    BGR = "bgr"    # OpenCV captures
    RGB = "rgb"


# cv2 code that turns each native layout into RGB
_TO_RGB = {
    PixelFormat.NV21: cv2.COLOR_YUV2RGB_NV21,
    PixelFormat.I420: cv2.COLOR_YUV2RGB_I420,
    PixelFormat.BGR: cv2.COLOR_BGR2RGB,
}

ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


@dataclass(frozen=True)
class Frame:
    """
    A single camera frame as handed over by the capture layer.

    Attributes:
        data: Raw pixel buffer (bytes or numpy array) in ``pixel_format``.
        width: Sensor width in pixels, before rotation.
        height: Sensor height in pixels, before rotation.
        rotation: Clockwise degrees that make the image upright (0/90/180/270).
        pixel_format: Native encoding of ``data``.
    """
    data: bytes | np.ndarray
    width: int
    height: int
    rotation: int = 0
    pixel_format: PixelFormat = PixelFormat.NV21

    @classmethod
    def from_bgr(cls, image: np.ndarray, rotation: int = 0) -> "Frame":
        """Wrap an OpenCV BGR image."""
        h, w = image.shape[:2]
        return cls(data=image, width=w, height=h, rotation=rotation, pixel_format=PixelFormat.BGR)

    @property
    def upright_size(self) -> tuple[int, int]:
        """(width, height) once the rotation has been applied."""
        if self.rotation % 180 == 90:
            return self.height, self.width
        return self.width, self.height


def _expected_size(frame: Frame) -> int:
    if frame.pixel_format in (PixelFormat.NV21, PixelFormat.I420):
        return frame.width * frame.height * 3 // 2
    return frame.width * frame.height * 3


def to_rgb(frame: Frame) -> np.ndarray | None:
    """Decode the native buffer into an ``HxWx3`` uint8 RGB raster."""
    if frame.width <= 0 or frame.height <= 0:
        logger.warning(f"⚠️ Frame has invalid size {frame.width}x{frame.height}")
        return None

    try:
        buffer = np.frombuffer(frame.data, dtype=np.uint8) if isinstance(frame.data, (bytes, bytearray)) \
            else np.asarray(frame.data, dtype=np.uint8)
    except (TypeError, ValueError) as e:
        logger.warning(f"⚠️ Frame buffer is not raw pixel data: {e}")
        return None

    if buffer.size == 0 or buffer.size != _expected_size(frame):
        logger.warning(
            f"⚠️ Frame buffer holds {buffer.size} bytes, "
            f"expected {_expected_size(frame)} for {frame.pixel_format.value} {frame.width}x{frame.height}"
        )
        return None

    if frame.pixel_format in (PixelFormat.NV21, PixelFormat.I420):
        # 4:2:0 chroma needs even dimensions
        if frame.width % 2 or frame.height % 2:
            logger.warning(f"⚠️ YUV frame has odd size {frame.width}x{frame.height}")
            return None
        packed = buffer.reshape(frame.height * 3 // 2, frame.width)
    else:
        packed = buffer.reshape(frame.height, frame.width, 3)

    if frame.pixel_format == PixelFormat.RGB:
        return packed.copy()

    try:
        return cv2.cvtColor(packed, _TO_RGB[frame.pixel_format])
    except cv2.error as e:
        logger.warning(f"⚠️ Color conversion failed: {e}")
        return None


def encode_frame(frame: Frame, target_size: int) -> np.ndarray | None:
    """
    Turns a camera frame into model input.

    Output is a float32 ``[target_size, target_size, 3]`` array in RGB order
    with values in [0, 1]. Returns None when the frame cannot be decoded; the
    caller skips that frame.
    """
    rotation = frame.rotation % 360
    if rotation % 90 != 0:
        logger.warning(f"⚠️ Unsupported frame rotation: {frame.rotation}")
        return None

    rgb = to_rgb(frame)
    if rgb is None:
        return None

    # 1. Upright
    if rotation:
        rgb = cv2.rotate(rgb, ROTATIONS[rotation])

    # 2. Square resize with bilinear smoothing (no letterbox)
    resized = cv2.resize(rgb, (target_size, target_size), interpolation=cv2.INTER_LINEAR)

    # 3. Normalize to [0, 1]
    tensor = resized.astype(np.float32) / np.float32(255.0)
    return np.ascontiguousarray(tensor)
