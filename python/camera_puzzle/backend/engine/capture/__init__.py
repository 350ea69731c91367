from camera_puzzle.backend.engine.capture.capture import (
    CAPTURE_MESSAGES,
    CaptureError,
    CaptureFailure,
    VideoSource,
    VideoStream,
    classify,
)

__all__ = [
    "CAPTURE_MESSAGES",
    "CaptureError",
    "CaptureFailure",
    "VideoSource",
    "VideoStream",
    "classify",
]
