"""
Shared fixtures: raw model outputs, fake runners and synthetic frames.
"""

import numpy as np
import pytest

from printer_lens.core.errors import InferenceFailure
from printer_lens.vision.base import BaseModelRunner


def raw_output(*candidates, num_boxes: int = None) -> np.ndarray:
    """
    Builds a [1, 5, N] output from (cx, cy, w, h, conf) tuples.
    Remaining slots (when num_boxes > len(candidates)) have zero confidence.
    """
    n = num_boxes or max(len(candidates), 1)
    out = np.zeros((1, 5, n), dtype=np.float32)
    for i, cand in enumerate(candidates):
        out[0, :, i] = cand
    return out


class FakeRunner(BaseModelRunner):
    """Returns a canned output and records what it was fed."""

    def __init__(self, output: np.ndarray):
        self.output = output
        self.calls = []

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        self.calls.append(tensor)
        return self.output


class FailingRunner(BaseModelRunner):
    def __init__(self, error: Exception = None):
        self.error = error or InferenceFailure("interpreter crashed")
        self.calls = 0

    def infer(self, tensor: np.ndarray) -> np.ndarray:
        self.calls += 1
        raise self.error


@pytest.fixture
def make_output():
    return raw_output


@pytest.fixture
def bgr_frame():
    """480x640 mid-grey BGR image."""
    return np.full((480, 640, 3), 128, dtype=np.uint8)


@pytest.fixture
def nv21_buffer():
    """Builds a flat NV21 buffer with uniform luma and neutral chroma."""
    def _build(width: int, height: int, luma: int = 128) -> bytes:
        y = np.full(width * height, luma, dtype=np.uint8)
        vu = np.full(width * height // 2, 128, dtype=np.uint8)
        return np.concatenate([y, vu]).tobytes()
    return _build
