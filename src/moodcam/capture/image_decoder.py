"""
Frame Decoder
=============

Turns a RawFrame into an upright RGB DecodedImage.

Steps:
    1. Check the pixel format and dimensions
    2. Reassemble planes into one buffer (Y, then V, then U)
    3. Detect the chroma layout from the pixel strides (NV21 or YV12)
    4. Convert to colour, optionally through a JPEG round trip
    5. Rotate clockwise by the frame's rotation metadata

Design Rules:
    - This is the ONLY place in the codebase that decodes frames
    - The RawFrame is closed on every exit path
    - Every OpenCV failure surfaces as DecodeError with the byte count
"""

import logging

import cv2
import numpy as np

from moodcam.capture.frame import RawFrame, YUV_420_888
from moodcam.capture.image import DecodedImage
from moodcam.capture.planes import reassemble_planes
from moodcam.errors import DecodeError, FormatError, UnsupportedFormatError


logger = logging.getLogger(__name__)


RECONSTRUCTION_MODES = ("jpeg", "direct")

# Chroma layout name -> (to RGB, to BGR) conversion codes
_CHROMA_LAYOUTS = {
    "NV21": (cv2.COLOR_YUV2RGB_NV21, cv2.COLOR_YUV2BGR_NV21),
    "YV12": (cv2.COLOR_YUV2RGB_YV12, cv2.COLOR_YUV2BGR_YV12),
}

_ROTATIONS = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def required_bytes(width: int, height: int) -> int:
    """Bytes needed to hold a 4:2:0 frame of the given size."""
    return width * height + 2 * (width // 2) * (height // 2)


def detect_chroma_layout(u_stride: int, v_stride: int) -> str:
    """
    Name the chroma layout implied by the chroma pixel strides.

    Raises:
        UnsupportedFormatError: If the strides describe neither NV21 nor YV12
    """
    if u_stride == 2 and v_stride == 2:
        return "NV21"
    if u_stride == 1 and v_stride == 1:
        return "YV12"
    layout = f"YUV_420_888(u_stride={u_stride}, v_stride={v_stride})"
    raise UnsupportedFormatError(
        f"Unsupported chroma layout: {layout}", detected_format=layout
    )


class FrameDecoder:
    """
    Decoder from RawFrame to upright DecodedImage.

    Attributes:
        reconstruction: 'jpeg' to round-trip through the JPEG codec,
            'direct' for a plain colour conversion
        jpeg_quality: Quality used for the JPEG round trip (1-100)
    """

    def __init__(self, reconstruction: str = "jpeg", jpeg_quality: int = 100) -> None:
        if reconstruction not in RECONSTRUCTION_MODES:
            raise ValueError(
                f"reconstruction must be one of {RECONSTRUCTION_MODES}, "
                f"got {reconstruction!r}"
            )
        if not 1 <= jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in [1, 100], got {jpeg_quality}")

        self.reconstruction = reconstruction
        self.jpeg_quality = jpeg_quality

        logger.info(
            f"FrameDecoder initialized: reconstruction={reconstruction}, "
            f"jpeg_quality={jpeg_quality}"
        )

    def decode(self, frame: RawFrame) -> DecodedImage:
        """
        Decode a frame into an upright RGB image.

        The frame is closed before this method returns or raises.

        Args:
            frame: Frame to decode

        Returns:
            DecodedImage, width/height swapped for 90 and 270 rotations

        Raises:
            UnsupportedFormatError: Pixel format or chroma layout unsupported
            FormatError: Bad dimensions or malformed plane data
            DecodeError: Colour reconstruction failed
        """
        try:
            if frame.pixel_format != YUV_420_888:
                raise UnsupportedFormatError(
                    f"Unsupported image format: {frame.pixel_format}",
                    detected_format=frame.pixel_format,
                )

            width, height = frame.width, frame.height
            if width <= 0 or height <= 0:
                raise FormatError(f"Invalid image dimensions: w={width} h={height}")

            planes = frame.planes
            buffer = reassemble_planes(planes)
            layout = detect_chroma_layout(planes[1].pixel_stride, planes[2].pixel_stride)

            rgb = self._reconstruct(buffer, width, height, layout)
            rgb = self._rotate(rgb, frame.rotation, len(buffer))

            logger.debug(
                f"Decoded frame {frame.frame_id}: {layout} {width}x{height} "
                f"rotation={frame.rotation} -> {rgb.shape[1]}x{rgb.shape[0]}"
            )
            return DecodedImage(frame_id=frame.frame_id, pixels=rgb)
        finally:
            frame.close()

    def _reconstruct(
        self,
        buffer: bytearray,
        width: int,
        height: int,
        layout: str,
    ) -> np.ndarray:
        """Convert the reassembled buffer to an RGB array."""
        byte_count = len(buffer)

        if width % 2 or height % 2:
            raise DecodeError(
                f"4:2:0 reconstruction needs even dimensions, got {width}x{height} "
                f"(bytes: {byte_count})",
                byte_count=byte_count,
            )

        needed = required_bytes(width, height)
        if byte_count < needed:
            raise DecodeError(
                f"Buffer too short for {width}x{height} {layout}: "
                f"have {byte_count} bytes, need {needed}",
                byte_count=byte_count,
            )

        yuv = np.frombuffer(buffer, dtype=np.uint8, count=needed)
        yuv = yuv.reshape(height * 3 // 2, width)
        to_rgb, to_bgr = _CHROMA_LAYOUTS[layout]

        try:
            if self.reconstruction == "direct":
                return cv2.cvtColor(yuv, to_rgb)
            return self._jpeg_round_trip(cv2.cvtColor(yuv, to_bgr), byte_count)
        except cv2.error as e:
            raise DecodeError(
                f"Colour conversion failed (bytes: {byte_count}): {e}",
                byte_count=byte_count,
            ) from e

    def _jpeg_round_trip(self, bgr: np.ndarray, byte_count: int) -> np.ndarray:
        """Compress to JPEG and decode back, returning RGB."""
        ok, encoded = cv2.imencode(
            ".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality]
        )
        if not ok:
            raise DecodeError(
                f"cv2.imencode returned False (bytes: {byte_count})",
                byte_count=byte_count,
            )

        decoded = cv2.imdecode(encoded, cv2.IMREAD_COLOR)
        if decoded is None:
            raise DecodeError(
                f"cv2.imdecode returned None (bytes: {encoded.size})",
                byte_count=int(encoded.size),
            )

        return cv2.cvtColor(decoded, cv2.COLOR_BGR2RGB)

    @staticmethod
    def _rotate(rgb: np.ndarray, rotation: int, byte_count: int) -> np.ndarray:
        """Rotate clockwise by rotation degrees."""
        if rotation == 0:
            return rgb
        code = _ROTATIONS.get(rotation)
        if code is None:
            raise DecodeError(
                f"Cannot rotate by {rotation} degrees (bytes: {byte_count})",
                byte_count=byte_count,
            )
        return cv2.rotate(rgb, code)
