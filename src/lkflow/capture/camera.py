from __future__ import annotations

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class CaptureError(RuntimeError):
    pass


def parse_source(source) -> int | str:
    """Device index for "0", "1", ...; anything else is kept as a path/URL."""
    if isinstance(source, int):
        return source
    s = str(source).strip()
    return int(s) if s.isdigit() else s


class CameraSource:
    """
    cv2.VideoCapture wrapper for a camera device or a video file.

    Use as a context manager so the handle is released on every exit path:

        with CameraSource(0, width=640, height=480) as cam:
            frame = cam.read()
    """

    def __init__(self, source=0, *, width: int = 640, height: int = 480):
        self.source = parse_source(source)
        self.width = int(width)
        self.height = int(height)
        self.cap = None

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    def open(self) -> "CameraSource":
        cap = cv2.VideoCapture(self.source)
        if not cap.isOpened():
            cap.release()
            raise CaptureError(f"Failed to open capture source: {self.source!r}")
        if isinstance(self.source, int):
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self.cap = cap
        logger.info(
            "Opened capture %r at %dx%d",
            self.source,
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        return self

    def read(self) -> np.ndarray | None:
        """Next BGR frame, or None when no new frame is available."""
        if not self.is_open:
            return None
        ok, frame = self.cap.read()
        if not ok or frame is None:
            return None
        return frame

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self) -> "CameraSource":
        if self.cap is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
