"""
Detection Module
================

Face detection as a pluggable black box.

Components:
    - FaceDetector: Protocol every backend implements
    - DetectionOutcome: FACES, EMPTY or FAILED, one per request
    - MockFaceDetector: Deterministic scripted detector
    - HaarFaceDetector: OpenCV cascades (offline)
    - VisionFaceDetector: Google Cloud Vision API (production)
"""

from moodcam.detection.detector import (
    DetectionOutcome,
    DetectionStatus,
    FaceDetectionError,
    FaceDetector,
    request_detection,
)
from moodcam.detection.mock import MockFaceDetector
from moodcam.detection.haar import HaarFaceDetector

# Vision detector imported separately to avoid mandatory dependency
try:
    from google.cloud import vision as _vision  # noqa: F401
    _VISION_AVAILABLE = True
except ImportError:
    _VISION_AVAILABLE = False

from moodcam.detection.vision import VisionFaceDetector


__all__ = [
    "DetectionOutcome",
    "DetectionStatus",
    "FaceDetectionError",
    "FaceDetector",
    "request_detection",
    "MockFaceDetector",
    "HaarFaceDetector",
    "VisionFaceDetector",
    "_VISION_AVAILABLE",
]
