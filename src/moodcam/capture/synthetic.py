"""
Synthetic Frames
================

Build camera-style RawFrames from ordinary BGR images.

Used by the demo script and the test suite to feed the pipeline without a
camera. Semi-planar output mimics what phone camera stacks deliver for YUV_420_888:
both chroma planes have pixel stride 2 and overlap, each one byte short of
a full interleaved chroma block.
"""

from typing import Optional

import cv2
import numpy as np

from moodcam.capture.frame import Plane, RawFrame, YUV_420_888


_UNROTATE = {
    90: cv2.ROTATE_90_COUNTERCLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_CLOCKWISE,
}


def frame_from_bgr(
    bgr: np.ndarray,
    frame_id: int = 0,
    rotation: int = 0,
    semi_planar: bool = True,
    timestamp: float = 0.0,
) -> RawFrame:
    """
    Build a RawFrame whose decoded, upright form is bgr.

    Args:
        bgr: Upright image (H, W, 3), uint8, even dimensions
        frame_id: Identity for the frame
        rotation: Rotation metadata; the sensor image is stored rotated
            counter-clockwise so that decoding restores bgr's orientation
        semi_planar: Interleaved chroma planes (stride 2) if True,
            fully planar (stride 1) otherwise
        timestamp: Capture timestamp

    Returns:
        RawFrame in YUV_420_888 format
    """
    sensor = bgr if rotation == 0 else cv2.rotate(bgr, _UNROTATE[rotation])
    height, width = sensor.shape[:2]
    if width % 2 or height % 2:
        raise ValueError(f"Synthetic frames need even dimensions, got {width}x{height}")

    i420 = cv2.cvtColor(sensor, cv2.COLOR_BGR2YUV_I420).reshape(-1)
    luma_size = width * height
    chroma_size = luma_size // 4
    y = i420[:luma_size]
    u = i420[luma_size:luma_size + chroma_size]
    v = i420[luma_size + chroma_size:]

    if semi_planar:
        u_plane = Plane(_interleave(u, v)[:-1].tobytes(), pixel_stride=2, row_stride=width)
        v_plane = Plane(_interleave(v, u)[:-1].tobytes(), pixel_stride=2, row_stride=width)
    else:
        u_plane = Plane(u.tobytes(), pixel_stride=1, row_stride=width // 2)
        v_plane = Plane(v.tobytes(), pixel_stride=1, row_stride=width // 2)

    y_plane = Plane(y.tobytes(), pixel_stride=1, row_stride=width)

    return RawFrame(
        frame_id=frame_id,
        width=width,
        height=height,
        planes=(y_plane, u_plane, v_plane),
        rotation=rotation,
        pixel_format=YUV_420_888,
        timestamp=timestamp,
    )


def solid_frame(
    width: int,
    height: int,
    bgr: tuple,
    frame_id: int = 0,
    rotation: int = 0,
) -> RawFrame:
    """Frame of a single colour, given as a (B, G, R) tuple."""
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:] = bgr
    return frame_from_bgr(image, frame_id=frame_id, rotation=rotation)


def _interleave(first: np.ndarray, second: np.ndarray) -> np.ndarray:
    out = np.empty(first.size * 2, dtype=np.uint8)
    out[0::2] = first
    out[1::2] = second
    return out


def load_frame(path: str, frame_id: int = 0, rotation: int = 0) -> Optional[RawFrame]:
    """
    Read an image file and wrap it as a RawFrame.

    Odd dimensions are cropped by one pixel.

    Returns:
        RawFrame, or None if OpenCV cannot read the file
    """
    bgr = cv2.imread(path, cv2.IMREAD_COLOR)
    if bgr is None:
        return None
    height, width = bgr.shape[:2]
    bgr = np.ascontiguousarray(bgr[: height - height % 2, : width - width % 2])
    return frame_from_bgr(bgr, frame_id=frame_id, rotation=rotation)
