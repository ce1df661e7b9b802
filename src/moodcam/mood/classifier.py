"""
Mood Classifier
===============

Derives a MoodCategory from a detection outcome, falling back to image
brightness whenever no smile probability is available.

Threshold tables use inclusive lower bounds, evaluated top-down; the first
match wins and anything below the last bound is VERY_SAD. Inputs are not
clamped.

    Smiling probability >=      Brightness >=
        0.75  VERY_HAPPY            180  VERY_HAPPY
        0.45  HAPPY                 140  HAPPY
        0.25  NEUTRAL               100  NEUTRAL
        0.10  SAD                    60  SAD
        else  VERY_SAD              else VERY_SAD

Fallback chain:
    FACES with smile probability  -> SMILE basis
    FACES without smile           -> BRIGHTNESS (SMILE_UNAVAILABLE)
    EMPTY                         -> BRIGHTNESS (NO_FACES)
    FAILED                        -> BRIGHTNESS (DETECTION_FAILED)

The classifier is stateless; concurrent calls over distinct frames are safe.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from moodcam.capture.image import DecodedImage
from moodcam.detection.detector import DetectionOutcome, DetectionStatus
from moodcam.models.face import FaceObservation
from moodcam.models.mood import FallbackReason, MoodBasis, MoodCategory
from moodcam.mood.brightness import DEFAULT_GRID_SIZE, estimate_brightness


logger = logging.getLogger(__name__)


Number = Union[int, float]
ThresholdTable = Tuple[Tuple[Number, MoodCategory], ...]

SMILE_THRESHOLDS: ThresholdTable = (
    (0.75, MoodCategory.VERY_HAPPY),
    (0.45, MoodCategory.HAPPY),
    (0.25, MoodCategory.NEUTRAL),
    (0.10, MoodCategory.SAD),
)

BRIGHTNESS_THRESHOLDS: ThresholdTable = (
    (180, MoodCategory.VERY_HAPPY),
    (140, MoodCategory.HAPPY),
    (100, MoodCategory.NEUTRAL),
    (60, MoodCategory.SAD),
)

FLOOR_MOOD = MoodCategory.VERY_SAD


def lookup_mood(value: Number, table: ThresholdTable) -> MoodCategory:
    """Return the mood of the first bound value reaches, else FLOOR_MOOD."""
    for lower_bound, mood in table:
        if value >= lower_bound:
            return mood
    return FLOOR_MOOD


def classify_smile(probability: float) -> MoodCategory:
    return lookup_mood(probability, SMILE_THRESHOLDS)


def classify_brightness(brightness: int) -> MoodCategory:
    return lookup_mood(brightness, BRIGHTNESS_THRESHOLDS)


def select_primary_face(faces: Sequence[FaceObservation]) -> FaceObservation:
    """
    Pick the face with the largest bounding box.

    Ties go to the face that appears first.

    Raises:
        ValueError: If faces is empty
    """
    if not faces:
        raise ValueError("select_primary_face() needs at least one face")
    # max() keeps the first maximal element
    return max(faces, key=lambda face: face.area)


@dataclass(frozen=True, slots=True)
class MoodAssessment:
    """
    A classified mood and how it was reached.

    Attributes:
        mood: Resulting mood
        basis: SMILE or BRIGHTNESS
        signal: Smiling probability or brightness the mood was read from
        fallback_reason: Why brightness was used (None for SMILE)
        face: The face whose smile was used, if any
    """

    mood: MoodCategory
    basis: MoodBasis
    signal: float
    fallback_reason: Optional[FallbackReason] = None
    face: Optional[FaceObservation] = None


class MoodClassifier:
    """
    Stateless mood classifier.

    Attributes:
        grid_size: Sample grid used by the brightness fallback
    """

    def __init__(self, grid_size: int = DEFAULT_GRID_SIZE) -> None:
        if grid_size < 1:
            raise ValueError(f"grid_size must be >= 1, got {grid_size}")
        self.grid_size = grid_size

    def classify(self, outcome: DetectionOutcome, image: DecodedImage) -> MoodAssessment:
        """
        Classify the mood of image given its detection outcome.

        Args:
            outcome: Resolved detection request for image
            image: The decoded image (used by the brightness fallback)

        Returns:
            MoodAssessment; a mood is always produced

        Raises:
            EmptyImageError: If the fallback runs on a zero-area image
        """
        if outcome.status == DetectionStatus.FAILED:
            return self.classify_by_brightness(image, FallbackReason.DETECTION_FAILED)

        if outcome.status == DetectionStatus.EMPTY or not outcome.faces:
            return self.classify_by_brightness(image, FallbackReason.NO_FACES)

        face = select_primary_face(outcome.faces)
        logger.debug(
            f"Face selected (frame={image.frame_id}): area={face.area} "
            f"smilingProb={face.smiling_probability} "
            f"leftEye={face.left_eye_open_probability} "
            f"rightEye={face.right_eye_open_probability}"
        )

        if face.smiling_probability is None:
            return self.classify_by_brightness(
                image, FallbackReason.SMILE_UNAVAILABLE, face=face
            )

        return MoodAssessment(
            mood=classify_smile(face.smiling_probability),
            basis=MoodBasis.SMILE,
            signal=face.smiling_probability,
            face=face,
        )

    def classify_by_brightness(
        self,
        image: DecodedImage,
        reason: FallbackReason,
        face: Optional[FaceObservation] = None,
    ) -> MoodAssessment:
        """Brightness fallback shared by every non-smile path."""
        brightness = estimate_brightness(image, self.grid_size)
        mood = classify_brightness(brightness)
        logger.info(
            f"Brightness fallback (frame={image.frame_id}): reason={reason.value} "
            f"brightness={brightness} -> mood={mood.value}"
        )
        return MoodAssessment(
            mood=mood,
            basis=MoodBasis.BRIGHTNESS,
            signal=float(brightness),
            fallback_reason=reason,
            face=face,
        )
