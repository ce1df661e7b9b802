"""
Haar Cascade Face Detector
==========================

Offline face detector built on the cascades shipped with OpenCV.

    - haarcascade_frontalface_default.xml: face boxes
    - haarcascade_smile.xml: smile inside the lower half of each face
    - haarcascade_eye.xml: eyes inside the upper half of each face

Smiling probability is a geometric heuristic: the width of the widest
smile detection relative to the face width, scaled so that a smile
spanning SMILE_FULL_WIDTH of the face scores 1.0. No smile scores 0.0.

Eye-open probabilities are 1.0 when an eye is found on that side of the
face and 0.0 otherwise.

A CascadeClassifier keeps per-image state inside detectMultiScale, so the
cascades are only touched while holding the detector's lock. Concurrent
requests run one after another in their worker threads.
"""

import asyncio
import logging
import threading
from typing import List, Optional, Sequence

import cv2
import numpy as np

from moodcam.capture.image import DecodedImage
from moodcam.detection.detector import FaceDetectionError
from moodcam.models.face import FaceObservation


logger = logging.getLogger(__name__)


SMILE_FULL_WIDTH = 0.6


def _load_cascade(name: str) -> cv2.CascadeClassifier:
    cascade = cv2.CascadeClassifier(cv2.data.haarcascades + name)
    if cascade.empty():
        raise FaceDetectionError(f"Failed to load OpenCV cascade: {name}")
    return cascade


class HaarFaceDetector:
    """
    Face detector using OpenCV Haar cascades.

    Detection runs in a worker thread so the event loop stays free.

    Attributes:
        scale_factor: Pyramid scale step for face detection
        min_neighbors: Neighbour count required to keep a face
        min_face_size: Smallest face side in pixels
    """

    def __init__(
        self,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_face_size: int = 60,
        smile_scale_factor: float = 1.7,
        smile_min_neighbors: int = 20,
    ) -> None:
        """
        Initialize Haar detector.

        Raises:
            FaceDetectionError: If a cascade file cannot be loaded
        """
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_face_size = min_face_size
        self.smile_scale_factor = smile_scale_factor
        self.smile_min_neighbors = smile_min_neighbors

        self._face: Optional[cv2.CascadeClassifier] = _load_cascade(
            "haarcascade_frontalface_default.xml"
        )
        self._smile: Optional[cv2.CascadeClassifier] = _load_cascade("haarcascade_smile.xml")
        self._eye: Optional[cv2.CascadeClassifier] = _load_cascade("haarcascade_eye.xml")

        # Guards the cascades; detectMultiScale is not thread-safe
        self._lock = threading.Lock()

        logger.info(
            f"HaarFaceDetector initialized: scale_factor={scale_factor}, "
            f"min_neighbors={min_neighbors}, min_face_size={min_face_size}"
        )

    async def detect(
        self,
        image: DecodedImage,
        rotation_degrees: int = 0,
    ) -> Sequence[FaceObservation]:
        if self._face is None:
            raise FaceDetectionError("HaarFaceDetector is closed")
        if rotation_degrees != 0:
            logger.debug(
                f"Ignoring orientation hint {rotation_degrees} (frame={image.frame_id})"
            )
        try:
            return await asyncio.to_thread(self._detect_sync, image)
        except cv2.error as e:
            raise FaceDetectionError(f"OpenCV detection failed: {e}") from e

    def close(self) -> None:
        # Waits for an in-flight detection to leave the cascades
        with self._lock:
            self._face = None
            self._smile = None
            self._eye = None
        logger.info("HaarFaceDetector closed")

    def _detect_sync(self, image: DecodedImage) -> List[FaceObservation]:
        gray = cv2.equalizeHist(cv2.cvtColor(image.pixels, cv2.COLOR_RGB2GRAY))

        with self._lock:
            if self._face is None:
                raise FaceDetectionError("HaarFaceDetector is closed")
            return self._detect_locked(gray)

    def _detect_locked(self, gray: np.ndarray) -> List[FaceObservation]:
        boxes = self._face.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=(self.min_face_size, self.min_face_size),
        )

        faces = []
        for (x, y, w, h) in boxes:
            roi = gray[y:y + h, x:x + w]
            left_eye, right_eye = self._eye_probabilities(roi[: h // 2, :], w)
            faces.append(
                FaceObservation.from_box(
                    int(x), int(y), int(w), int(h),
                    smiling_probability=self._smile_probability(roi[h // 2:, :], w),
                    left_eye_open_probability=left_eye,
                    right_eye_open_probability=right_eye,
                )
            )
        return faces

    def _smile_probability(self, lower_face: np.ndarray, face_width: int) -> float:
        if lower_face.size == 0 or self._smile is None:
            return 0.0
        smiles = self._smile.detectMultiScale(
            lower_face,
            scaleFactor=self.smile_scale_factor,
            minNeighbors=self.smile_min_neighbors,
            minSize=(max(1, face_width // 4), max(1, lower_face.shape[0] // 5)),
        )
        if len(smiles) == 0:
            return 0.0
        widest = max(int(s[2]) for s in smiles)
        return min(1.0, widest / (SMILE_FULL_WIDTH * face_width))

    def _eye_probabilities(self, upper_face: np.ndarray, face_width: int):
        if upper_face.size == 0 or self._eye is None:
            return None, None
        eyes = self._eye.detectMultiScale(upper_face, scaleFactor=1.1, minNeighbors=5)
        centers = [int(ex) + int(ew) // 2 for (ex, _, ew, _) in eyes]
        # Image-left eye is the subject's right eye
        right = 1.0 if any(c < face_width // 2 for c in centers) else 0.0
        left = 1.0 if any(c >= face_width // 2 for c in centers) else 0.0
        return left, right
