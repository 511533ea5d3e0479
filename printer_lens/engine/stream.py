import cv2
import numpy as np
from loguru import logger

from printer_lens.engine.camera import LatestFrameSource
from printer_lens.engine.overlay import OverlayRenderer
from printer_lens.engine.pipeline import DetectionPipeline
from printer_lens.vision.frame import Frame, ROTATIONS


class VisionStream:
    """Camera -> detection pipeline -> overlay -> MJPEG parts."""

    def __init__(
        self,
        pipeline: DetectionPipeline,
        source: LatestFrameSource,
        renderer: OverlayRenderer | None = None,
        jpeg_quality: int = 80,
    ):
        self.pipeline = pipeline
        self.source = source
        self.renderer = renderer or OverlayRenderer()
        self.jpeg_quality = jpeg_quality
        self.processed = 0

    def annotate(self, frame: Frame) -> np.ndarray:
        # Detections are drawn on the upright image, so that is the display space
        image = np.asarray(frame.data)
        rotation = frame.rotation % 360
        if rotation:
            image = cv2.rotate(image, ROTATIONS[rotation])
        width, height = frame.upright_size

        result = self.pipeline.process_frame(frame, width, height)
        return self.renderer.render(image, result.detections)

    def generate_frames(self):
        while True:
            frame = self.source.read(timeout=1.0)
            if frame is None:
                continue

            output_frame = self.annotate(frame)

            ok, buffer = cv2.imencode('.jpg', output_frame, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality])
            if not ok:
                logger.warning("⚠️ JPEG encoding failed, frame dropped")
                continue
            yield (b'--frame\r\n'
                   b'Content-Type: image/jpeg\r\n\r\n' + buffer.tobytes() + b'\r\n')

            # Heartbeat every 1000 frames
            self.processed += 1
            if self.processed % 1000 == 0:
                logger.info(f"💓 System Alive. Processed {self.processed} frames.")
