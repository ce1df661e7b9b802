"""Counters for pipeline observability."""

from moodcam.mood.classifier import MoodAssessment
from moodcam.models.mood import FallbackReason, MoodBasis


class PipelineMetrics:
    """Running totals across frames. Never influences decisions."""

    __slots__ = (
        "frames_received",
        "frames_decoded",
        "decode_failures",
        "smile_classifications",
        "brightness_fallbacks",
        "no_face_fallbacks",
        "detection_failures",
        "smile_unavailable_fallbacks",
        "results_published",
        "results_discarded",
    )

    def __init__(self) -> None:
        for name in self.__slots__:
            setattr(self, name, 0)

    def record_assessment(self, assessment: MoodAssessment) -> None:
        if assessment.basis == MoodBasis.SMILE:
            self.smile_classifications += 1
            return

        self.brightness_fallbacks += 1
        if assessment.fallback_reason == FallbackReason.NO_FACES:
            self.no_face_fallbacks += 1
        elif assessment.fallback_reason == FallbackReason.DETECTION_FAILED:
            self.detection_failures += 1
        elif assessment.fallback_reason == FallbackReason.SMILE_UNAVAILABLE:
            self.smile_unavailable_fallbacks += 1

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {name: getattr(self, name) for name in self.__slots__}
