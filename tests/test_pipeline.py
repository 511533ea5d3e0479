"""
Tests for the per-frame detection pipeline.
"""

import numpy as np
import pytest

from conftest import FailingRunner, FakeRunner, raw_output
from printer_lens.core.config import Settings
from printer_lens.engine.pipeline import DetectionPipeline, FrameResult, FrameStatus
from printer_lens.vision.frame import Frame


@pytest.fixture
def frame(bgr_frame):
    return Frame.from_bgr(bgr_frame)


class TestProcessFrame:
    def test_full_pass(self, frame):
        runner = FakeRunner(raw_output(
            (0.5, 0.5, 0.2, 0.2, 0.9),
            (0.51, 0.5, 0.2, 0.2, 0.6),   # duplicate of the first box
            (0.1, 0.1, 0.1, 0.1, 0.7),
            (0.8, 0.8, 0.1, 0.1, 0.3),    # below threshold
        ))
        pipeline = DetectionPipeline(runner, input_size=640)

        result = pipeline.process_frame(frame, 1280, 720)

        assert result.ok
        assert result.status == FrameStatus.OK
        np.testing.assert_allclose(result.detections.confidence, [0.9, 0.7], rtol=1e-6)
        # 640 -> 1280 horizontally, 640 -> 720 vertically
        np.testing.assert_allclose(result.detections.xyxy[0], [512, 288, 768, 432], atol=1e-2)

    def test_runner_receives_model_tensor(self, frame):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.2, 0.2, 0.1)))
        DetectionPipeline(runner, input_size=320).process_frame(frame)

        (tensor,) = runner.calls
        assert tensor.shape == (320, 320, 3)
        assert tensor.dtype == np.float32

    def test_unmeasured_display_keeps_model_space(self, frame):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.2, 0.2, 0.9)))
        result = DetectionPipeline(runner).process_frame(frame, 0, 0)
        np.testing.assert_allclose(result.detections.xyxy[0], [256, 256, 384, 384], atol=1e-3)

    def test_no_candidates(self, frame):
        runner = FakeRunner(raw_output(num_boxes=8400))
        result = DetectionPipeline(runner).process_frame(frame, 640, 480)
        assert result.ok
        assert len(result.detections) == 0

    def test_frames_are_independent(self, frame):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.2, 0.2, 0.9)))
        pipeline = DetectionPipeline(runner)

        first = pipeline.process_frame(frame, 1280, 720)
        second = pipeline.process_frame(frame, 640, 640)

        np.testing.assert_allclose(second.detections.xyxy[0], [256, 256, 384, 384], atol=1e-3)
        np.testing.assert_allclose(first.detections.xyxy[0], [512, 288, 768, 432], atol=1e-2)


class TestProcessFrameFailures:
    def test_decode_failure_skips_inference(self):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.2, 0.2, 0.9)))
        result = DetectionPipeline(runner).process_frame(Frame(b"", width=640, height=480), 640, 480)

        assert result.status == FrameStatus.DECODE_FAILURE
        assert not result.ok
        assert len(result.detections) == 0
        assert runner.calls == []

    def test_unconvertible_buffer_is_a_decode_failure(self):
        runner = FakeRunner(raw_output((0.5, 0.5, 0.2, 0.2, 0.9)))
        result = DetectionPipeline(runner).process_frame(Frame("notbytes", width=4, height=4))

        assert result.status == FrameStatus.DECODE_FAILURE
        assert runner.calls == []

    def test_inference_failure_is_contained(self, frame):
        runner = FailingRunner()
        pipeline = DetectionPipeline(runner)

        result = pipeline.process_frame(frame, 640, 480)

        assert result.status == FrameStatus.INFERENCE_FAILURE
        assert len(result.detections) == 0
        # Next frame is attempted again, no retry of the failed one
        pipeline.process_frame(frame, 640, 480)
        assert runner.calls == 2

    def test_unexpected_runner_error_is_contained(self, frame):
        result = DetectionPipeline(FailingRunner(RuntimeError("boom"))).process_frame(frame)
        assert result.status == FrameStatus.INFERENCE_FAILURE

    def test_malformed_output_is_an_inference_failure(self, frame):
        runner = FakeRunner(np.zeros((1, 3, 10), dtype=np.float32))
        result = DetectionPipeline(runner).process_frame(frame)
        assert result.status == FrameStatus.INFERENCE_FAILURE


class TestFromSettings:
    def test_thresholds_and_label_come_from_settings(self):
        config = Settings(
            _env_file=None, INPUT_SIZE=320, CONF_THRESHOLD=0.3, IOU_THRESHOLD=0.6, CLASS_LABEL="Plotter"
        )
        pipeline = DetectionPipeline.from_settings(FakeRunner(raw_output()), config)

        assert pipeline.input_size == 320
        assert pipeline.confidence_threshold == 0.3
        assert pipeline.iou_threshold == 0.6
        assert pipeline.class_name == "Plotter"


def test_frame_result_default_is_empty():
    result = FrameResult(FrameStatus.DECODE_FAILURE)
    assert len(result.detections) == 0
