"""
Data Models
===========

Models for the MoodCam pipeline and service.

Models:
    Mood:
        - MoodCategory: Closed set of moods
        - MoodBasis: SMILE or BRIGHTNESS
        - FallbackReason: Why brightness was used

    Face:
        - BoundingBox, FaceObservation: Detector output

    Input:
        - FrameMessage, PlaneMessage: HTTP frame submission

    Output:
        - MoodResponse, ErrorResponse: HTTP responses
"""

from moodcam.models.mood import FallbackReason, MoodBasis, MoodCategory
from moodcam.models.face import BoundingBox, FaceObservation
from moodcam.models.input import FrameMessage, PlaneMessage

__all__ = [
    # Mood
    "MoodCategory",
    "MoodBasis",
    "FallbackReason",
    # Face
    "BoundingBox",
    "FaceObservation",
    # Input
    "FrameMessage",
    "PlaneMessage",
]
