"""
Mood Module
===========

From decoded image and detection outcome to mood and suggestions.

    - estimate_brightness: Fallback luma signal
    - MoodClassifier: Threshold tables + fallback chain
    - suggestions_for: Mood to suggestion list
"""

from moodcam.mood.brightness import estimate_brightness
from moodcam.mood.classifier import (
    BRIGHTNESS_THRESHOLDS,
    SMILE_THRESHOLDS,
    MoodAssessment,
    MoodClassifier,
    classify_brightness,
    classify_smile,
    select_primary_face,
)
from moodcam.mood.suggestions import DEFAULT_SUGGESTIONS, SUGGESTIONS, suggestions_for


__all__ = [
    "estimate_brightness",
    "BRIGHTNESS_THRESHOLDS",
    "SMILE_THRESHOLDS",
    "MoodAssessment",
    "MoodClassifier",
    "classify_brightness",
    "classify_smile",
    "select_primary_face",
    "DEFAULT_SUGGESTIONS",
    "SUGGESTIONS",
    "suggestions_for",
]
