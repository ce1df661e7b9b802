"""
Frame Errors
============

Error taxonomy for frame-level failures.

Every error here is terminal for the frame that raised it. The pipeline
never retries; the caller decides whether to capture again.

Each error carries the pipeline stage that failed so that a single,
specific message can be shown to the user.

Detection failures are NOT part of this taxonomy. They are absorbed by
the brightness fallback (see moodcam.mood.classifier).
"""

from typing import Optional


class FrameError(Exception):
    """Base class for errors that end processing of a single frame."""
    
    stage: str = "frame"
    
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
    
    def describe(self) -> str:
        """Human-readable message naming the failed stage."""
        return f"{self.stage} failed: {self.message}"


class FormatError(FrameError):
    """Raised when plane data is missing or malformed."""
    
    stage = "plane_reassembly"


class UnsupportedFormatError(FrameError):
    """Raised when the frame uses a pixel layout we cannot decode."""
    
    stage = "format_check"
    
    def __init__(self, message: str, detected_format: Optional[str] = None) -> None:
        super().__init__(message)
        self.detected_format = detected_format


class DecodeError(FrameError):
    """Raised when the colour reconstruction round trip fails."""
    
    stage = "decode"
    
    def __init__(self, message: str, byte_count: int = 0) -> None:
        super().__init__(message)
        self.byte_count = byte_count


class EmptyImageError(FrameError):
    """Raised when a zero-area image reaches the brightness estimator."""
    
    stage = "brightness"
