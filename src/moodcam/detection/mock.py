"""
Mock Face Detector
==================

Deterministic, scripted detector for tests and offline runs.

A script entry is either a sequence of FaceObservation (returned as-is) or
an Exception instance (raised, which the pipeline treats as a detection
failure). Entries can be set per frame id; other frames use the default.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence, Union

from moodcam.capture.image import DecodedImage
from moodcam.detection.detector import FaceDetectionError
from moodcam.models.face import FaceObservation


logger = logging.getLogger(__name__)


ScriptEntry = Union[Sequence[FaceObservation], BaseException]


class MockFaceDetector:
    """
    Scripted face detector.

    Attributes:
        calls: Frame ids passed to detect(), in call order
        close_count: Number of times close() was called
    """

    def __init__(
        self,
        faces: ScriptEntry = (),
        per_frame: Optional[Dict[int, ScriptEntry]] = None,
        delay: float = 0.0,
        per_frame_delay: Optional[Dict[int, float]] = None,
        close_error: Optional[Exception] = None,
    ) -> None:
        """
        Initialize mock detector.

        Args:
            faces: Default script entry for every frame
            per_frame: Script entries keyed by frame id
            delay: Seconds to wait before resolving each request
            per_frame_delay: Delays keyed by frame id
            close_error: Exception raised by close(), for teardown tests
        """
        self.default = faces
        self.per_frame = dict(per_frame or {})
        self.delay = delay
        self.per_frame_delay = dict(per_frame_delay or {})
        self.close_error = close_error

        self.calls: List[int] = []
        self.close_count = 0

        logger.info(
            f"MockFaceDetector initialized: scripted_frames={len(self.per_frame)}, "
            f"delay={delay}s"
        )

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    async def detect(
        self,
        image: DecodedImage,
        rotation_degrees: int = 0,
    ) -> Sequence[FaceObservation]:
        self.calls.append(image.frame_id)

        delay = self.per_frame_delay.get(image.frame_id, self.delay)
        if delay > 0:
            await asyncio.sleep(delay)

        if self.closed:
            raise FaceDetectionError("Detector already closed")

        entry = self.per_frame.get(image.frame_id, self.default)
        if isinstance(entry, BaseException):
            raise entry
        return list(entry)

    def close(self) -> None:
        self.close_count += 1
        if self.close_error is not None:
            raise self.close_error
