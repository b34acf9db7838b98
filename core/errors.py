"""
Error kinds raised across the capture → infer → normalize path.
"""
from __future__ import annotations
from typing import Optional


class CameraAccessError(RuntimeError):
    """Camera could not be opened. Fatal to starting a capture session."""

    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    DEVICE_BUSY = "device_busy"
    UNKNOWN = "unknown"

    _MESSAGES = {
        PERMISSION_DENIED: "Camera permission denied. Please allow camera access and try again.",
        NOT_FOUND: "No camera found. Please connect a camera.",
        DEVICE_BUSY: "Camera is busy or unavailable. Please close other apps using the camera.",
    }

    def __init__(self, kind: str, detail: str = ""):
        self.kind = kind if kind in self._MESSAGES else self.UNKNOWN
        self.detail = detail
        if self.kind == self.UNKNOWN:
            message = f"Camera error: {detail or 'could not open camera'}"
        else:
            message = self._MESSAGES[self.kind]
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self)


class UpstreamError(RuntimeError):
    """The vision model call failed or returned no text."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedReplyError(ValueError):
    """Reply present but not usable as a structured record. Never leaves the normalizer."""
