"""
Vision Face Detector
====================

Face detector backed by Google Cloud Vision face detection.

This detector:
    - Sends the upright image as JPEG to the FACE_DETECTION feature
    - Maps joy likelihood to a smiling probability
    - Applies client-side rate limiting
    - Raises FaceDetectionError on API errors (the pipeline falls back)

Joy likelihood mapping:
    UNKNOWN        -> None (classifier falls back to brightness)
    VERY_UNLIKELY  -> 0.05
    UNLIKELY       -> 0.20
    POSSIBLE       -> 0.50
    LIKELY         -> 0.80
    VERY_LIKELY    -> 0.95

Design Rules:
    - Fail fast on misconfiguration
    - Log all API calls
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

import cv2

from moodcam.capture.image import DecodedImage
from moodcam.detection.detector import FaceDetectionError
from moodcam.models.face import BoundingBox, FaceObservation


logger = logging.getLogger(__name__)


# Indexed by google.cloud.vision.Likelihood value
JOY_PROBABILITIES = (None, 0.05, 0.20, 0.50, 0.80, 0.95)


def joy_to_probability(likelihood: int) -> Optional[float]:
    """Map a Vision Likelihood value to a smiling probability."""
    index = int(likelihood)
    if 0 <= index < len(JOY_PROBABILITIES):
        return JOY_PROBABILITIES[index]
    return None


class VisionFaceDetector:
    """
    Face detector using Google Cloud Vision API.

    Attributes:
        max_rps: Maximum API calls per second
        max_results: Maximum faces requested per image
        jpeg_quality: Quality of the JPEG sent to the API
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        max_rps: float = 2.0,
        max_results: int = 10,
        jpeg_quality: int = 90,
    ) -> None:
        """
        Initialize Vision face detector.

        Args:
            credentials_path: Path to service account JSON (optional)
            max_rps: Maximum API requests per second
            max_results: Maximum faces per request
            jpeg_quality: JPEG quality for uploaded images

        Raises:
            ImportError: If google-cloud-vision is not installed
            FaceDetectionError: If the client cannot be created
        """
        self.max_rps = max_rps
        self.min_interval = 1.0 / max_rps if max_rps > 0 else 0.0
        self.max_results = max_results
        self.jpeg_quality = jpeg_quality

        self._last_call_time: float = 0.0
        self._api_call_count: int = 0
        self._api_error_count: int = 0

        self._client = None
        self._init_client(credentials_path)

        logger.info(
            f"VisionFaceDetector initialized: max_rps={max_rps}, "
            f"max_results={max_results}"
        )

    def _init_client(self, credentials_path: Optional[str]) -> None:
        """Initialize Google Cloud Vision client."""
        try:
            from google.cloud import vision

            if credentials_path:
                self._client = vision.ImageAnnotatorClient.from_service_account_json(
                    credentials_path
                )
                logger.info(f"Vision client initialized from: {credentials_path}")
            else:
                # Application default credentials
                self._client = vision.ImageAnnotatorClient()
                logger.info("Vision client initialized with default credentials")

        except ImportError:
            raise ImportError(
                "google-cloud-vision is required for VisionFaceDetector. "
                "Install with: pip install 'moodcam[vision]'"
            )
        except Exception as e:
            raise FaceDetectionError(f"Failed to initialize Vision client: {e}") from e

    async def detect(
        self,
        image: DecodedImage,
        rotation_degrees: int = 0,
    ) -> Sequence[FaceObservation]:
        if self._client is None:
            raise FaceDetectionError("VisionFaceDetector is closed")

        # Rate limiting: wait if calling too fast
        elapsed = time.time() - self._last_call_time
        if elapsed < self.min_interval:
            await asyncio.sleep(self.min_interval - elapsed)

        try:
            faces = await self._detect_faces(image)
        except FaceDetectionError:
            self._api_error_count += 1
            raise
        except Exception as e:
            self._api_error_count += 1
            raise FaceDetectionError(f"Vision API call failed: {e}") from e
        finally:
            self._last_call_time = time.time()

        self._api_call_count += 1
        logger.debug(f"Vision API: frame={image.frame_id}, faces={len(faces)}")
        return faces

    async def _detect_faces(self, image: DecodedImage) -> List[FaceObservation]:
        from google.cloud import vision

        ok, encoded = cv2.imencode(
            ".jpg", image.to_bgr(), [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality]
        )
        if not ok:
            raise FaceDetectionError(f"Could not encode frame {image.frame_id} as JPEG")

        response = await asyncio.to_thread(
            self._client.face_detection,
            image=vision.Image(content=encoded.tobytes()),
            max_results=self.max_results,
        )

        if response.error.message:
            raise FaceDetectionError(f"Vision API: {response.error.message}")

        return [self._to_observation(face) for face in response.face_annotations]

    @staticmethod
    def _to_observation(annotation) -> FaceObservation:
        vertices = annotation.bounding_poly.vertices
        xs = [v.x for v in vertices] or [0]
        ys = [v.y for v in vertices] or [0]
        box = BoundingBox(
            x=min(xs),
            y=min(ys),
            width=max(xs) - min(xs),
            height=max(ys) - min(ys),
        )
        return FaceObservation(
            bounding_box=box,
            smiling_probability=joy_to_probability(annotation.joy_likelihood),
        )

    def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            client.transport.close()
            logger.info("VisionFaceDetector closed")

    def get_metrics(self) -> dict:
        """Get detector metrics for observability."""
        return {
            "api_call_count": self._api_call_count,
            "api_error_count": self._api_error_count,
            "max_rps": self.max_rps,
        }
