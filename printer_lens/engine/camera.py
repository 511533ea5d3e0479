import threading
import time
from typing import Callable

import cv2
from loguru import logger

from printer_lens.vision.frame import Frame


class LatestFrameSource:
    """
    Reads a cv2.VideoCapture on a background thread and keeps only the newest
    frame. Frames that arrive while the consumer is busy overwrite the slot,
    so at most one frame is ever waiting.

    Example:
        with LatestFrameSource(0, rotation=90) as source:
            frame = source.read()
    """

    def __init__(
        self,
        device: int | str,
        rotation: int = 0,
        capture_factory: Callable[[int | str], cv2.VideoCapture] = cv2.VideoCapture,
        idle_sleep: float = 0.01,
        close_timeout: float = 2.0,
    ):
        self.device = device
        self.rotation = rotation
        self._capture_factory = capture_factory
        self._idle_sleep = idle_sleep
        self._close_timeout = close_timeout

        self._cap: cv2.VideoCapture | None = None
        self._latest: Frame | None = None
        self._lock = threading.Lock()
        self._new_frame = threading.Condition(self._lock)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.dropped = 0

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> None:
        if self._thread is not None:
            return

        logger.info(f"🔌 Connecting to Video Source: {self.device}")
        self._cap = self._capture_factory(self.device)
        if not self._cap.isOpened():
            logger.error(f"❌ COULD NOT OPEN VIDEO SOURCE: {self.device}")
            self._cap.release()
            self._cap = None
            raise RuntimeError(f"Could not open video source {self.device}")
        logger.info("✅ Video Source Connected.")

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._reader, args=(self._cap,), name="frame-reader", daemon=True
        )
        self._thread.start()

    def _reader(self, cap: cv2.VideoCapture) -> None:
        # Own reference: close() may drop self._cap while a read is still blocking
        while not self._stop.is_set():
            success, image = cap.read()
            if not success:
                # Files rewind, live sources simply retry
                cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                time.sleep(self._idle_sleep)
                continue

            frame = Frame.from_bgr(image, rotation=self.rotation)
            with self._new_frame:
                if self._latest is not None:
                    self.dropped += 1
                self._latest = frame
                self._new_frame.notify()

    def read(self, timeout: float | None = 0.0) -> Frame | None:
        """
        Takes the newest frame, waiting up to ``timeout`` seconds for one
        (``0`` polls, ``None`` waits until a frame arrives or the source closes).
        Each frame is returned once; None means nothing new arrived.
        """
        with self._new_frame:
            if timeout is None or timeout > 0:
                self._new_frame.wait_for(lambda: self._latest is not None or self._stop.is_set(), timeout)
            frame, self._latest = self._latest, None
        return frame

    def close(self) -> None:
        self._stop.set()
        with self._new_frame:
            self._new_frame.notify_all()
        if self._thread is not None:
            self._thread.join(timeout=self._close_timeout)
            self._thread = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        logger.info(f"🛑 Video Source closed ({self.dropped} stale frames dropped)")

    def __enter__(self) -> "LatestFrameSource":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()
