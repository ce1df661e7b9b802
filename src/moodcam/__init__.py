"""
MoodCam
=======

Camera frame to mood to suggestions.

This package turns one captured YUV_420_888 camera frame into an upright
RGB image, reads a mood from the most prominent face (or from overall
brightness when no smile is available) and maps the mood to an ordered list
of suggestions.

Components:
    - capture: Plane reassembly and frame decoding
    - detection: Pluggable face detectors (mock, Haar cascades, Cloud Vision)
    - mood: Brightness estimation, mood classification, suggestions
    - pipeline: LangGraph frame pipeline and the capture session
    - models: Enums and pydantic schemas for the HTTP service

Example:
    from moodcam.capture import load_frame
    from moodcam.detection import HaarFaceDetector
    from moodcam.pipeline import MoodPipeline

    pipeline = MoodPipeline(detector=HaarFaceDetector())
    result = await pipeline.process(load_frame("face.jpg"))
    print(result.mood.value, result.suggestions)
"""

__version__ = "0.1.0"
__author__ = "MoodCam Project"

__all__ = [
    "__version__",
]
