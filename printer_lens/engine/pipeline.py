from dataclasses import dataclass, field
from enum import Enum

import supervision as sv
from loguru import logger

from printer_lens.core.config import settings, Settings
from printer_lens.core.errors import InferenceFailure
from printer_lens.vision.base import BaseModelRunner
from printer_lens.vision.decoder import decode_predictions
from printer_lens.vision.frame import Frame, encode_frame
from printer_lens.vision.geometry import rescale_detections
from printer_lens.vision.nms import non_max_suppression


class FrameStatus(str, Enum):
    OK = "ok"
    DECODE_FAILURE = "decode_failure"
    INFERENCE_FAILURE = "inference_failure"


@dataclass(frozen=True)
class FrameResult:
    status: FrameStatus
    detections: sv.Detections = field(default_factory=sv.Detections.empty)

    @property
    def ok(self) -> bool:
        return self.status == FrameStatus.OK


class DetectionPipeline:
    """
    Encode -> infer -> decode -> NMS -> rescale for one frame at a time.

    Holds only the model runner and fixed thresholds, so nothing leaks from
    one frame into the next. Per-frame failures come back as a FrameResult
    status and never raise.
    """

    def __init__(
        self,
        runner: BaseModelRunner,
        input_size: int = 640,
        confidence_threshold: float = 0.5,
        iou_threshold: float = 0.45,
        class_name: str = "Printer",
    ):
        self.runner = runner
        self.input_size = input_size
        self.confidence_threshold = confidence_threshold
        self.iou_threshold = iou_threshold
        self.class_name = class_name

    @classmethod
    def from_settings(cls, runner: BaseModelRunner, config: Settings = settings) -> "DetectionPipeline":
        return cls(
            runner,
            input_size=config.INPUT_SIZE,
            confidence_threshold=config.CONF_THRESHOLD,
            iou_threshold=config.IOU_THRESHOLD,
            class_name=config.CLASS_LABEL,
        )

    def process_frame(self, frame: Frame, display_width: float = 0, display_height: float = 0) -> FrameResult:
        # 1. Preprocess
        tensor = encode_frame(frame, self.input_size)
        if tensor is None:
            logger.warning("⚠️ Skipping frame: could not decode pixel buffer")
            return FrameResult(FrameStatus.DECODE_FAILURE)

        # 2. Inference
        try:
            raw = self.runner.infer(tensor)
            candidates = decode_predictions(raw, self.input_size, self.confidence_threshold, self.class_name)
        except (InferenceFailure, ValueError) as e:
            logger.error(f"❌ Inference failed, no detections for this frame: {e}")
            return FrameResult(FrameStatus.INFERENCE_FAILURE)
        except Exception as e:
            # Runner broke its contract; still only this frame is lost
            logger.opt(exception=e).error("❌ Unexpected error from model runner")
            return FrameResult(FrameStatus.INFERENCE_FAILURE)

        # 3. Postprocess
        detections = non_max_suppression(candidates, self.iou_threshold)
        detections = rescale_detections(
            detections, self.input_size, self.input_size, display_width, display_height
        )
        logger.trace(f"{len(candidates)} candidates -> {len(detections)} detections")

        return FrameResult(FrameStatus.OK, detections)
