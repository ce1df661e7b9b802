"""
Decoded Image
=============

Upright RGB pixel grid produced once per RawFrame.

The pixel array is made read-only on construction; ownership passes to
the caller of the pipeline.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class DecodedImage:
    """
    Immutable upright RGB image.

    Attributes:
        frame_id: Identity of the RawFrame this image came from
        pixels: np.ndarray (H, W, 3), dtype=uint8, RGB order
    """

    frame_id: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) pixels, got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {self.pixels.dtype}")
        self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def packed(self) -> np.ndarray:
        """
        Pixels packed as opaque 0xAARRGGBB integers.

        Returns:
            np.ndarray (H, W), dtype=uint32
        """
        rgb = self.pixels.astype(np.uint32)
        return (
            np.uint32(0xFF000000)
            | (rgb[..., 0] << 16)
            | (rgb[..., 1] << 8)
            | rgb[..., 2]
        )

    def to_bgr(self) -> np.ndarray:
        """Copy of the pixels in OpenCV's BGR channel order."""
        return np.ascontiguousarray(self.pixels[..., ::-1])

    def __repr__(self) -> str:
        return f"DecodedImage(frame_id={self.frame_id}, {self.width}x{self.height})"
