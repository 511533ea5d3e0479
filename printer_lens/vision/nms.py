from typing import Sequence

import numpy as np
import supervision as sv


def box_iou(box_a: Sequence[float], box_b: Sequence[float]) -> float:
    """Intersection over union of two ``(left, top, right, bottom)`` boxes."""
    return float(box_iou_many(box_a, np.asarray([box_b], dtype=np.float64))[0])


def box_iou_many(box: Sequence[float], boxes: np.ndarray) -> np.ndarray:
    """IoU of one box against every row of an ``[K, 4]`` xyxy array."""
    left, top, right, bottom = (float(v) for v in box)
    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)

    inter_w = np.maximum(0.0, np.minimum(right, boxes[:, 2]) - np.maximum(left, boxes[:, 0]))
    inter_h = np.maximum(0.0, np.minimum(bottom, boxes[:, 3]) - np.maximum(top, boxes[:, 1]))
    intersection = inter_w * inter_h

    area = (right - left) * (bottom - top)
    areas = (boxes[:, 2] - boxes[:, 0]) * (boxes[:, 3] - boxes[:, 1])
    union = area + areas - intersection

    iou = np.zeros(len(boxes), dtype=np.float64)
    np.divide(intersection, union, out=iou, where=union > 0)
    return iou


def non_max_suppression(detections: sv.Detections, iou_threshold: float = 0.45) -> sv.Detections:
    """
    Greedy single-class NMS.

    Candidates are visited by confidence, highest first; equal scores keep
    their incoming order. A candidate survives unless it overlaps an already
    kept box by more than ``iou_threshold``. Survivors are returned in the
    order they were kept. Class labels are ignored.
    """
    if len(detections) == 0:
        return detections

    # Stable sort on the negated score keeps ties in decode order
    order = np.argsort(-detections.confidence, kind="stable")
    xyxy = detections.xyxy

    keep: list[int] = []
    for idx in order:
        if keep and np.any(box_iou_many(xyxy[idx], xyxy[keep]) > iou_threshold):
            continue
        keep.append(int(idx))

    return detections[np.asarray(keep, dtype=int)]
