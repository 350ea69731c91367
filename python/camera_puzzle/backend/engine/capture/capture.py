"""Video-source boundary and the classification of capture failures."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol


class CaptureFailure(StrEnum):
    NOT_FOUND = "not-found"
    PERMISSION_DENIED = "permission-denied"
    DEVICE_BUSY = "device-busy"
    UNKNOWN = "unknown"


CAPTURE_MESSAGES: dict[CaptureFailure, str] = {
    CaptureFailure.NOT_FOUND: (
        "No camera found. Please connect a camera and try again."
    ),
    CaptureFailure.PERMISSION_DENIED: (
        "Camera access was denied. Please allow camera permissions and try again."
    ),
    CaptureFailure.DEVICE_BUSY: (
        "Your camera is already in use by another application."
    ),
    CaptureFailure.UNKNOWN: (
        "Could not access the camera. Please ensure permissions are granted."
    ),
}


class CaptureError(Exception):
    """Raised by a video source that cannot deliver frames."""

    def __init__(self, reason: CaptureFailure, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(detail or reason.value)

    @property
    def message(self) -> str:
        return CAPTURE_MESSAGES[self.reason]


def classify(detail: str) -> CaptureFailure:
    """Best-effort mapping of a driver error string to a failure reason."""
    text = detail.lower()
    if "permission" in text or "denied" in text or "not allowed" in text:
        return CaptureFailure.PERMISSION_DENIED
    if "busy" in text or "in use" in text or "not readable" in text:
        return CaptureFailure.DEVICE_BUSY
    if "not found" in text or "no such" in text or "no camera" in text:
        return CaptureFailure.NOT_FOUND
    return CaptureFailure.UNKNOWN


class VideoStream(Protocol):
    def stop(self) -> None: ...


class VideoSource(Protocol):
    def acquire(self, width: int, height: int) -> VideoStream:
        """Open the device or raise :class:`CaptureError`."""
        ...
