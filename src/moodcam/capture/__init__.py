"""
Capture Module
==============

Frame reconstruction: from camera planes to an upright RGB image.

    - RawFrame / Plane: Caller-owned scoped frame data
    - reassemble_planes: Y + V + U into one contiguous buffer
    - FrameDecoder: Colour reconstruction and rotation
    - DecodedImage: Immutable upright RGB result

Example:
    from moodcam.capture import FrameDecoder, frame_from_bgr

    decoder = FrameDecoder(reconstruction="direct")
    image = decoder.decode(frame_from_bgr(bgr, rotation=90))
"""

from moodcam.capture.frame import Plane, RawFrame, YUV_420_888
from moodcam.capture.image import DecodedImage
from moodcam.capture.image_decoder import FrameDecoder
from moodcam.capture.planes import reassemble_planes
from moodcam.capture.synthetic import frame_from_bgr, load_frame, solid_frame


__all__ = [
    "Plane",
    "RawFrame",
    "YUV_420_888",
    "DecodedImage",
    "FrameDecoder",
    "reassemble_planes",
    "frame_from_bgr",
    "load_frame",
    "solid_frame",
]
