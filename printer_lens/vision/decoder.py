import numpy as np
import supervision as sv

# cx, cy, w, h, confidence
NUM_FEATURES = 5
CLASS_ID = 0


def make_detections(xyxy: np.ndarray, confidence: np.ndarray, class_name: str) -> sv.Detections:
    """Builds a single-class DetectionSet; every box carries the same label."""
    if len(xyxy) == 0:
        return sv.Detections.empty()
    count = len(xyxy)
    return sv.Detections(
        xyxy=np.asarray(xyxy, dtype=np.float32).reshape(-1, 4),
        confidence=np.asarray(confidence, dtype=np.float32),
        class_id=np.full(count, CLASS_ID, dtype=int),
        data={"class_name": np.array([class_name] * count)},
    )


def _as_features(output: np.ndarray) -> np.ndarray:
    """Returns the ``[5, N]`` feature matrix of a raw ``[1, 5, N]`` output."""
    output = np.asarray(output, dtype=np.float32)
    if output.ndim != 3 or output.shape[0] != 1:
        raise ValueError(f"Expected raw output of shape [1, 5, N], got {list(output.shape)}")

    features = output[0]
    if features.shape[0] != NUM_FEATURES:
        # Some exports emit [1, N, 5]
        if features.shape[1] == NUM_FEATURES:
            return features.T
        raise ValueError(f"Expected {NUM_FEATURES} feature rows, got {list(output.shape)}")
    return features


def decode_predictions(
    output: np.ndarray,
    input_size: int,
    confidence_threshold: float = 0.5,
    class_name: str = "Printer",
) -> sv.Detections:
    """
    Decodes raw model output into candidate detections (no overlap filtering).

    Boxes come out in ``input_size x input_size`` pixel space, in the model's
    candidate order. Candidates at or below ``confidence_threshold`` and boxes
    that collapse after clamping are dropped.
    """
    cx, cy, w, h, conf = _as_features(output)

    # 1. Strict confidence filter
    mask = conf > confidence_threshold
    if not np.any(mask):
        return sv.Detections.empty()

    cx, cy, w, h, conf = cx[mask], cy[mask], w[mask], h[mask], conf[mask]

    # 2. CXCYWH (normalized) -> XYXY (model input pixels)
    boxes = np.stack(
        [
            (cx - w / 2) * input_size,
            (cy - h / 2) * input_size,
            (cx + w / 2) * input_size,
            (cy + h / 2) * input_size,
        ],
        axis=1,
    )

    # 3. Clamp to the input square
    boxes = np.clip(boxes, 0, input_size)

    # 4. Drop degenerate boxes
    valid = (boxes[:, 2] > boxes[:, 0]) & (boxes[:, 3] > boxes[:, 1])
    return make_detections(boxes[valid], conf[valid], class_name)
