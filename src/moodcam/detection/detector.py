"""
Face Detector Capability
========================

Black-box abstraction for face detection.

The pipeline consumes ONLY the outcome of a detection request, never the
detector's internals. Every request resolves to exactly one of:

    FACES   - at least one face observation
    EMPTY   - detection ran and found nothing
    FAILED  - detection could not run; carries a human-readable message

Design Rules:
    - Detectors are injected, never global
    - Detector exceptions become FAILED outcomes, they are never raised
      to the pipeline's caller
    - Cancellation is not a failure and propagates normally
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple

from moodcam.capture.image import DecodedImage
from moodcam.models.face import FaceObservation


logger = logging.getLogger(__name__)


class FaceDetectionError(Exception):
    """Raised by detectors when a detection request fails."""
    pass


class FaceDetector(Protocol):
    """
    Protocol for face detection backends.

    Implemented by:
        - MockFaceDetector (scripted, for tests and offline runs)
        - HaarFaceDetector (OpenCV cascades)
        - VisionFaceDetector (Google Cloud Vision)
    """

    async def detect(
        self,
        image: DecodedImage,
        rotation_degrees: int = 0,
    ) -> Sequence[FaceObservation]:
        """
        Detect faces in an upright image.

        Args:
            image: Image to search
            rotation_degrees: Orientation hint (0 for upright images)

        Returns:
            Zero or more face observations

        Raises:
            FaceDetectionError: If detection fails
        """
        ...

    def close(self) -> None:
        """Release the detector's resources."""
        ...


class DetectionStatus(str, Enum):
    """Mutually exclusive detection outcomes."""

    FACES = "FACES"
    EMPTY = "EMPTY"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class DetectionOutcome:
    """
    Resolved result of one detection request.

    Attributes:
        frame_id: Frame the request was made for
        status: Which of the three outcomes occurred
        faces: Observations (non-empty only for FACES)
        message: Failure description (only for FAILED)
    """

    frame_id: int
    status: DetectionStatus
    faces: Tuple[FaceObservation, ...] = ()
    message: Optional[str] = None

    @classmethod
    def found(cls, frame_id: int, faces: Sequence[FaceObservation]) -> "DetectionOutcome":
        """Success outcome; EMPTY when no faces were found."""
        faces = tuple(faces)
        status = DetectionStatus.FACES if faces else DetectionStatus.EMPTY
        return cls(frame_id=frame_id, status=status, faces=faces)

    @classmethod
    def failed(cls, frame_id: int, message: str) -> "DetectionOutcome":
        return cls(frame_id=frame_id, status=DetectionStatus.FAILED, message=message)


async def request_detection(detector: FaceDetector, image: DecodedImage) -> DetectionOutcome:
    """
    Issue one detection request and resolve it to a DetectionOutcome.

    The image is already upright, so the orientation hint is always 0.

    Args:
        detector: Detector to call
        image: Upright decoded image

    Returns:
        Exactly one outcome; never raises for detector failures
    """
    try:
        faces = await detector.detect(image, 0)
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.warning(f"Face detection failed (frame={image.frame_id}): {message}")
        return DetectionOutcome.failed(image.frame_id, message)

    outcome = DetectionOutcome.found(image.frame_id, faces)
    logger.debug(
        f"Face detection (frame={image.frame_id}): "
        f"status={outcome.status.value}, faces={len(outcome.faces)}"
    )
    return outcome
