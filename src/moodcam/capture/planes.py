"""
Plane Reassembler
=================

Packs the three planes of a 4:2:0 frame into one contiguous buffer that
the colour converter can read.

Layout of the output:

    [ luma bytes ][ plane 2 bytes ][ plane 1 bytes ]

Plane 2 (V) is copied before plane 1 (U). With semi-planar captures the V
plane buffer already holds interleaved VU samples, so this order yields
NV21. With fully planar captures it yields YV12. Do not "fix" the order.

The copy is all-or-nothing: any failure raises FormatError and no partial
buffer is returned.
"""

import logging
from typing import Optional, Sequence

from moodcam.capture.frame import Plane
from moodcam.errors import FormatError


logger = logging.getLogger(__name__)


def reassemble_planes(planes: Sequence[Optional[Plane]]) -> bytearray:
    """
    Concatenate luma, plane 2 and plane 1 into a single buffer.

    Args:
        planes: Luma plane followed by the two chroma planes

    Returns:
        Buffer of length y.size + plane2.size + plane1.size

    Raises:
        FormatError: If a plane is missing, luma is empty, both chroma
            planes are empty, or a plane declares more bytes than it holds
    """
    if len(planes) < 3:
        raise FormatError(f"Expected 3 planes, got {len(planes)}")

    names = ("Y", "U", "V")
    for index in range(3):
        if planes[index] is None or planes[index].buffer is None:
            raise FormatError(f"Missing {names[index]} plane (index {index})")

    y_plane, u_plane, v_plane = planes[0], planes[1], planes[2]
    y_size, u_size, v_size = y_plane.size, u_plane.size, v_plane.size

    if y_size == 0 or (u_size == 0 and v_size == 0):
        raise FormatError(
            f"Unexpected plane sizes: y={y_size} u={u_size} v={v_size}"
        )

    out = bytearray(y_size + u_size + v_size)
    offset = 0
    for name, plane in (("Y", y_plane), ("V", v_plane), ("U", u_plane)):
        _copy_into(out, offset, plane, name)
        offset += plane.size

    logger.debug(
        f"Reassembled planes: y={y_size} v={v_size} u={u_size} "
        f"total={len(out)}"
    )
    return out


def _copy_into(out: bytearray, offset: int, plane: Plane, name: str) -> None:
    """Copy the declared bytes of one plane into out at offset."""
    if plane.size < 0:
        raise FormatError(f"Buffer copy failed: {name} plane size is negative")

    try:
        available = plane.available
        if plane.size > available:
            raise FormatError(
                f"Buffer copy failed: {name} plane declares {plane.size} "
                f"bytes but holds {available}"
            )
        with memoryview(plane.buffer) as view, view.cast("B") as flat:
            out[offset:offset + plane.size] = flat[:plane.size]
    except FormatError:
        raise
    except (TypeError, ValueError) as e:
        raise FormatError(f"Buffer copy failed for {name} plane: {e}") from e
