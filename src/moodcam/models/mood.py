"""
Mood Models
===========

Discrete mood categories and the bookkeeping that explains how a mood
was reached.

Positivity order (highest first):
    VERY_HAPPY > HAPPY > NEUTRAL > SAD > VERY_SAD

The order is implied by the threshold tables in moodcam.mood.classifier,
it is not stored here.
"""

from enum import Enum


class MoodCategory(str, Enum):
    """
    Closed set of moods the classifier can produce.

    Values are the display labels shown to the user.
    """

    VERY_HAPPY = "Very Happy"
    HAPPY = "Happy"
    NEUTRAL = "Neutral"
    SAD = "Sad"
    VERY_SAD = "Very Sad"


class MoodBasis(str, Enum):
    """Signal a mood was derived from."""

    SMILE = "SMILE"
    BRIGHTNESS = "BRIGHTNESS"


class FallbackReason(str, Enum):
    """
    Why the brightness heuristic was used instead of a smile probability.

    Attributes:
        NO_FACES: Detection succeeded but found no face
        DETECTION_FAILED: The detector reported a failure
        SMILE_UNAVAILABLE: A face was found without a smiling probability
    """

    NO_FACES = "NO_FACES"
    DETECTION_FAILED = "DETECTION_FAILED"
    SMILE_UNAVAILABLE = "SMILE_UNAVAILABLE"
