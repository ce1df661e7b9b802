"""
Mood Result
===========

The output triple for one successfully decoded frame:
(DecodedImage, MoodCategory, suggestions), plus the frame id used to
correlate results that arrive out of order.
"""

from dataclasses import dataclass
from typing import Tuple

from moodcam.capture.image import DecodedImage
from moodcam.mood.classifier import MoodAssessment
from moodcam.models.mood import MoodCategory


@dataclass(frozen=True, slots=True)
class MoodResult:
    """
    Result published once per successfully decoded frame.

    Attributes:
        frame_id: Identity of the source RawFrame
        image: Upright decoded image (owned by the caller)
        assessment: Mood and the signal it came from
        suggestions: Ordered suggestions for the mood
    """

    frame_id: int
    image: DecodedImage
    assessment: MoodAssessment
    suggestions: Tuple[str, ...]

    @property
    def mood(self) -> MoodCategory:
        return self.assessment.mood

    def __repr__(self) -> str:
        return (
            f"MoodResult(frame_id={self.frame_id}, mood={self.mood.value}, "
            f"basis={self.assessment.basis.value}, suggestions={list(self.suggestions)})"
        )
