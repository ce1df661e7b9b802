"""
Brightness Estimator Tests
==========================
"""

import numpy as np
import pytest


def _luma(r, g, b):
    return int(0.2126 * r + 0.7152 * g + 0.0722 * b)


class TestEstimateBrightness:
    """Tests for estimate_brightness()."""

    def test_black_is_zero(self, make_image):
        from moodcam.mood.brightness import estimate_brightness

        assert estimate_brightness(make_image((0, 0, 0))) == 0

    @pytest.mark.parametrize("rgb", [(255, 255, 255), (180, 180, 180), (200, 120, 40), (0, 255, 0)])
    def test_uniform_image_matches_pixel_luma(self, rgb, make_image):
        from moodcam.mood.brightness import estimate_brightness

        assert estimate_brightness(make_image(rgb)) == _luma(*rgb)

    def test_deterministic(self, gradient_bgr):
        from moodcam.capture.image import DecodedImage
        from moodcam.mood.brightness import estimate_brightness

        image = DecodedImage(frame_id=1, pixels=gradient_bgr[..., ::-1].copy())
        first = estimate_brightness(image)

        assert all(estimate_brightness(image) == first for _ in range(5))
        assert 0 <= first <= 255

    def test_grid_size_does_not_change_uniform_result(self, make_image):
        from moodcam.mood.brightness import estimate_brightness

        image = make_image((90, 150, 30), width=100, height=60)

        assert estimate_brightness(image, grid_size=40) == estimate_brightness(image, grid_size=7)

    def test_each_sample_truncated_before_mean(self):
        from moodcam.capture.image import DecodedImage
        from moodcam.mood.brightness import estimate_brightness

        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[..., 1] = [[4, 4], [4, 5]]
        image = DecodedImage(frame_id=0, pixels=pixels)

        # Truncated samples 2, 2, 2, 3 average to 2; untruncated would give 3
        assert estimate_brightness(image, grid_size=2) == 2

    def test_brighter_image_scores_higher(self, make_image):
        from moodcam.mood.brightness import estimate_brightness

        assert estimate_brightness(make_image((60, 60, 60))) < estimate_brightness(make_image((200, 200, 200)))

    def test_zero_area_raises_empty_image_error(self):
        from moodcam.capture.image import DecodedImage
        from moodcam.errors import EmptyImageError
        from moodcam.mood.brightness import estimate_brightness

        image = DecodedImage(frame_id=4, pixels=np.zeros((0, 8, 3), dtype=np.uint8))

        with pytest.raises(EmptyImageError) as info:
            estimate_brightness(image)

        assert info.value.stage == "brightness"
        assert "8x0 image" in info.value.message
