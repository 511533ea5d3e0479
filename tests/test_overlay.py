"""
Tests for overlay rendering and the MJPEG stream wiring.
"""

import numpy as np

from conftest import FakeRunner, raw_output
from printer_lens.engine.overlay import OverlayRenderer, format_labels
from printer_lens.engine.pipeline import DetectionPipeline
from printer_lens.engine.stream import VisionStream
from printer_lens.vision.decoder import make_detections
from printer_lens.vision.frame import Frame


class TestFormatLabels:
    def test_label_and_percentage(self):
        dets = make_detections(np.array([[0, 0, 10, 10]]), np.array([0.913]), "Printer")
        assert format_labels(dets) == ["Printer: 91.3%"]

    def test_empty(self):
        dets = make_detections(np.zeros((0, 4)), np.zeros(0), "Printer")
        assert format_labels(dets) == []


class TestOverlayRenderer:
    def test_draws_without_touching_input(self):
        image = np.zeros((120, 160, 3), dtype=np.uint8)
        dets = make_detections(np.array([[20, 30, 100, 90]]), np.array([0.8]), "Printer")

        out = OverlayRenderer(show_fps=False).render(image, dets)

        assert out.shape == image.shape
        assert out.any()
        assert not image.any()

    def test_no_detections_no_fps_is_a_copy(self):
        image = np.full((50, 50, 3), 7, dtype=np.uint8)
        empty = make_detections(np.zeros((0, 4)), np.zeros(0), "Printer")
        out = OverlayRenderer(show_fps=False).render(image, empty)
        np.testing.assert_array_equal(out, image)


class TestVisionStream:
    def test_annotate_draws_in_upright_display_space(self):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.4, 0.4, 0.9)))
        stream = VisionStream(DetectionPipeline(runner), source=None, renderer=OverlayRenderer(show_fps=False))

        # 200 wide, 100 tall sensor image rotated to 100 x 200
        image = np.zeros((100, 200, 3), dtype=np.uint8)
        out = stream.annotate(Frame.from_bgr(image, rotation=90))

        assert out.shape == (200, 100, 3)
        assert out.any()
