"""
Brightness Estimator
====================

Mean BT.709 luma over a fixed sample grid, used as the fallback mood
signal when no smile probability is available.

The image is resized to grid_size x grid_size (bilinear) to bound cost;
the result is deterministic for a given image.
"""

import cv2
import numpy as np

from moodcam.capture.image import DecodedImage
from moodcam.errors import EmptyImageError


DEFAULT_GRID_SIZE = 40

# ITU-R BT.709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def estimate_brightness(image: DecodedImage, grid_size: int = DEFAULT_GRID_SIZE) -> int:
    """
    Estimate the brightness of an image.

    Each sampled pixel contributes int(0.2126 R + 0.7152 G + 0.0722 B);
    the result is the integer-truncated mean of those values.

    Args:
        image: Upright RGB image
        grid_size: Side of the square sample grid

    Returns:
        Mean luma, nominally in [0, 255]

    Raises:
        EmptyImageError: If the image has zero area
    """
    if image.width == 0 or image.height == 0:
        raise EmptyImageError(
            f"Cannot estimate brightness of a {image.width}x{image.height} image "
            f"(frame {image.frame_id})"
        )

    sample = cv2.resize(image.pixels, (grid_size, grid_size), interpolation=cv2.INTER_LINEAR)
    rgb = sample.astype(np.float64)
    luma = LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]
    total = int(np.trunc(luma).astype(np.int64).sum())
    return total // luma.size
