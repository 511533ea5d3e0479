import numpy as np
import supervision as sv


def rescale_detections(
    detections: sv.Detections,
    from_width: float,
    from_height: float,
    to_width: float,
    to_height: float,
) -> sv.Detections:
    """
    Maps boxes from one pixel space (usually the model input square) to another
    (usually the display surface). X and Y scale independently.

    A target with zero width or height has not been measured yet; the
    detections are returned as they are.
    """
    if to_width == 0 or to_height == 0:
        return detections
    if from_width <= 0 or from_height <= 0:
        raise ValueError(f"Source size must be positive, got {from_width}x{from_height}")

    scale_x = to_width / from_width
    scale_y = to_height / from_height
    factors = np.array([scale_x, scale_y, scale_x, scale_y], dtype=np.float32)

    return sv.Detections(
        xyxy=(detections.xyxy * factors).astype(np.float32),
        confidence=None if detections.confidence is None else detections.confidence.copy(),
        class_id=None if detections.class_id is None else detections.class_id.copy(),
        data={key: np.array(value, copy=True) for key, value in detections.data.items()},
    )
