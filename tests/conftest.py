"""
Test Configuration
==================

Pytest fixtures and test configuration for MoodCam.
"""

import numpy as np
import pytest


@pytest.fixture
def gradient_bgr():
    """Non-uniform 64x48 BGR image (width 64, height 48)."""
    image = np.zeros((48, 64, 3), dtype=np.uint8)
    image[..., 0] = np.linspace(0, 255, 64, dtype=np.uint8)[None, :]
    image[..., 1] = np.linspace(0, 255, 48, dtype=np.uint8)[:, None]
    image[..., 2] = 128
    return image


@pytest.fixture
def direct_decoder():
    """Decoder without the JPEG round trip, for exact comparisons."""
    from moodcam.capture.image_decoder import FrameDecoder

    return FrameDecoder(reconstruction="direct")


@pytest.fixture
def smiling_face():
    from moodcam.models.face import FaceObservation

    return FaceObservation.from_box(10, 10, 20, 20, smiling_probability=0.9)


@pytest.fixture
def make_image():
    """Factory for uniform DecodedImages given an (R, G, B) colour."""
    from moodcam.capture.image import DecodedImage

    def _make(rgb=(128, 128, 128), width=32, height=24, frame_id=0):
        pixels = np.empty((height, width, 3), dtype=np.uint8)
        pixels[:] = rgb
        return DecodedImage(frame_id=frame_id, pixels=pixels)

    return _make
