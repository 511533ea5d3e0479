import numpy as np
import supervision as sv


def format_labels(detections: sv.Detections) -> list[str]:
    """ "Printer: 91.3%" captions, one per box."""
    names = detections.data.get("class_name")
    if names is None:
        names = ["Object"] * len(detections)
    scores = detections.confidence if detections.confidence is not None else np.zeros(len(detections))
    return [f"{name}: {score * 100:.1f}%" for name, score in zip(names, scores)]


class OverlayRenderer:
    """Draws display-space detections and an FPS counter onto a BGR image."""

    def __init__(self, show_fps: bool = True):
        self.show_fps = show_fps
        self.fps_monitor = sv.FPSMonitor()
        color = sv.Color.GREEN
        self.box_annotator = sv.BoxAnnotator(color=color, thickness=4)
        self.label_annotator = sv.LabelAnnotator(color=color, text_color=sv.Color.WHITE)

    def render(self, image: np.ndarray, detections: sv.Detections) -> np.ndarray:
        annotated = image.copy()
        if len(detections):
            annotated = self.box_annotator.annotate(annotated, detections)
            annotated = self.label_annotator.annotate(annotated, detections, format_labels(detections))

        if self.show_fps:
            self.fps_monitor.tick()
            annotated = sv.draw_text(
                scene=annotated,
                text=f"FPS: {self.fps_monitor.fps:.1f}",
                text_anchor=sv.Point(40, 30),
                background_color=sv.Color.RED,
                text_color=sv.Color.WHITE,
            )
        return annotated
