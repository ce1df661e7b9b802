"""
Output Models
=============

Response contract of the HTTP service.

Success (200):
    {
        "frame_id": 7,
        "mood": "Happy",
        "basis": "SMILE",
        "signal": 0.52,
        "fallback_reason": null,
        "suggestions": ["Ice-cream", "Pasta", "Fresh fruit"],
        "width": 480,
        "height": 640,
        "image": "<base64 JPEG>"
    }

Failure (422):
    {
        "frame_id": 7,
        "error": "FormatError",
        "stage": "plane_reassembly",
        "message": "Unexpected plane sizes: y=0 u=10 v=10"
    }
"""

import base64
from typing import List, Optional

import cv2
from pydantic import BaseModel, Field

from moodcam.errors import FrameError
from moodcam.models.mood import FallbackReason, MoodBasis, MoodCategory
from moodcam.pipeline.result import MoodResult


class MoodResponse(BaseModel):
    """
    Mood, suggestions and the upright image for one frame.

    Attributes:
        frame_id: Echo of the submitted frame id
        mood: Classified mood
        basis: Signal the mood was read from
        signal: Smiling probability or brightness
        fallback_reason: Why brightness was used, if it was
        suggestions: Ordered suggestions
        width: Upright image width
        height: Upright image height
        image: Base64 JPEG of the upright image (when enabled)
    """

    frame_id: int
    mood: MoodCategory
    basis: MoodBasis
    signal: float
    fallback_reason: Optional[FallbackReason] = None
    suggestions: List[str] = Field(..., min_length=1)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    image: Optional[str] = Field(default=None, description="Base64-encoded JPEG")

    @classmethod
    def from_result(
        cls,
        result: MoodResult,
        include_image: bool = False,
        jpeg_quality: int = 90,
    ) -> "MoodResponse":
        image_b64 = None
        if include_image:
            ok, encoded = cv2.imencode(
                ".jpg", result.image.to_bgr(), [cv2.IMWRITE_JPEG_QUALITY, jpeg_quality]
            )
            if ok:
                image_b64 = base64.b64encode(encoded.tobytes()).decode("ascii")

        return cls(
            frame_id=result.frame_id,
            mood=result.mood,
            basis=result.assessment.basis,
            signal=round(result.assessment.signal, 4),
            fallback_reason=result.assessment.fallback_reason,
            suggestions=list(result.suggestions),
            width=result.image.width,
            height=result.image.height,
            image=image_b64,
        )


class ErrorResponse(BaseModel):
    """Frame-level failure naming the stage that failed."""

    frame_id: int
    error: str
    stage: str
    message: str

    @classmethod
    def from_error(cls, frame_id: int, error: FrameError) -> "ErrorResponse":
        return cls(
            frame_id=frame_id,
            error=type(error).__name__,
            stage=error.stage,
            message=error.describe(),
        )
