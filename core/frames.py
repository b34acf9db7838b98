"""
Frame sources: camera frames as encoded stills.

A frame source is duck-typed; the scheduler needs:
    open()        -> None, may raise CameraAccessError
    dimensions()  -> (width, height); (0, 0) until the device delivers frames
    capture()     -> data URL of the current frame
    close()       -> None
"""
from __future__ import annotations
import base64
import logging
import os
import sys
import threading
from typing import Optional, Tuple

import cv2
import numpy as np

from core.errors import CameraAccessError

logger = logging.getLogger(__name__)


def encode_data_url(frame: np.ndarray, quality: int = 80) -> str:
    """BGR frame -> "data:image/jpeg;base64,..."."""
    ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise RuntimeError("JPEG encoding failed")
    return "data:image/jpeg;base64," + base64.b64encode(buf.tobytes()).decode("ascii")


def image_file_to_data_url(path: str, quality: int = 80) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")
    frame = cv2.imread(path, cv2.IMREAD_COLOR)
    if frame is None:
        raise RuntimeError(f"Could not decode image: {path}")
    return encode_data_url(frame, quality)


def classify_open_failure(camera_index: int) -> CameraAccessError:
    """Best-effort reason for a failed VideoCapture open (only V4L2 exposes one)."""
    if sys.platform.startswith("linux"):
        dev = f"/dev/video{camera_index}"
        if not os.path.exists(dev):
            return CameraAccessError(CameraAccessError.NOT_FOUND, dev)
        if not os.access(dev, os.R_OK | os.W_OK):
            return CameraAccessError(CameraAccessError.PERMISSION_DENIED, dev)
        return CameraAccessError(CameraAccessError.DEVICE_BUSY, dev)
    return CameraAccessError(CameraAccessError.UNKNOWN, f"could not open camera index {camera_index}")


class CameraFrameSource:
    """cv2.VideoCapture-backed frame source; device access is serialized so capture() can run in a worker thread."""

    def __init__(self, camera_index: int = 0, width: int = 640, height: int = 480, jpeg_quality: int = 80):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self._cap = None
        self._latest: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    def open(self) -> None:
        if self._cap is not None:
            return
        logger.debug(f"[frames] opening camera index={self.camera_index} size={self.width}x{self.height}")
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            cap.release()
            err = classify_open_failure(self.camera_index)
            logger.error(f"[frames] camera open failed: {err.kind}")
            raise err
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap

    def dimensions(self) -> Tuple[int, int]:
        if self._latest is not None:
            h, w = self._latest.shape[:2]
            return w, h
        if self._cap is None:
            return 0, 0
        return int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0), int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

    def read(self) -> Optional[np.ndarray]:
        """Grab the next frame and remember it; None when the device gives nothing."""
        with self._lock:
            if self._cap is None:
                return None
            ok, frame = self._cap.read()
            if not ok or frame is None:
                return None
            self._latest = frame
            return frame

    def latest(self) -> Optional[np.ndarray]:
        return self._latest

    def capture(self) -> str:
        frame = self.read()
        if frame is None:
            frame = self._latest
        if frame is None:
            raise RuntimeError("Failed to read frame from camera")
        return encode_data_url(frame, self.jpeg_quality)

    def close(self) -> None:
        with self._lock:
            if self._cap is not None:
                self._cap.release()
            self._cap = None
            self._latest = None
