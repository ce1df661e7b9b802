"""
Raw Frame Model
===============

Caller-owned representation of a single captured camera frame.

A RawFrame wraps the three planes of a YUV 4:2:0 capture exactly as the
camera delivers them. It is a scoped resource: the plane buffers are only
valid until close() is called, and the decoder closes the frame on every
exit path.

Design Rules:
    - Planes are read once, during reconstruction
    - close() is idempotent
    - Reading a plane after close() is a FormatError
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from moodcam.errors import FormatError


YUV_420_888 = "YUV_420_888"

VALID_ROTATIONS = (0, 90, 180, 270)


@dataclass(slots=True)
class Plane:
    """
    One image plane.

    Attributes:
        buffer: Raw bytes of the plane (any bytes-like object)
        size: Declared number of readable bytes (defaults to len(buffer))
        pixel_stride: Distance between samples (1 = planar, 2 = interleaved)
        row_stride: Distance between rows in bytes (0 = tightly packed)
    """

    buffer: Optional[bytes]
    size: Optional[int] = None
    pixel_stride: int = 1
    row_stride: int = 0

    def __post_init__(self) -> None:
        if self.size is None:
            self.size = len(self.buffer) if self.buffer is not None else 0

    @property
    def available(self) -> int:
        """Bytes actually held by the buffer."""
        if self.buffer is None:
            return 0
        return memoryview(self.buffer).nbytes


class RawFrame:
    """
    A single captured frame awaiting reconstruction.

    Attributes:
        frame_id: Caller-assigned identity used to correlate results
        width: Capture width in pixels
        height: Capture height in pixels
        rotation: Clockwise degrees needed to make the image upright
        pixel_format: Name of the pixel layout (only YUV_420_888 decodes)

    Example:
        with RawFrame(1, 640, 480, planes=(y, u, v)) as frame:
            image = decoder.decode(frame)
    """

    def __init__(
        self,
        frame_id: int,
        width: int,
        height: int,
        planes: Sequence[Optional[Plane]],
        rotation: int = 0,
        pixel_format: str = YUV_420_888,
        timestamp: float = 0.0,
    ) -> None:
        if rotation not in VALID_ROTATIONS:
            raise ValueError(
                f"rotation must be one of {VALID_ROTATIONS}, got {rotation}"
            )

        self.frame_id = frame_id
        self.width = width
        self.height = height
        self.rotation = rotation
        self.pixel_format = pixel_format
        self.timestamp = timestamp
        self._planes: Optional[Tuple[Optional[Plane], ...]] = tuple(planes)

    @property
    def closed(self) -> bool:
        """Whether the plane buffers have been released."""
        return self._planes is None

    @property
    def planes(self) -> Tuple[Optional[Plane], ...]:
        """
        The frame's planes.

        Raises:
            FormatError: If the frame was already closed
        """
        if self._planes is None:
            raise FormatError(
                f"Frame {self.frame_id}: plane buffers already released"
            )
        return self._planes

    def close(self) -> None:
        """Release the plane buffers. Safe to call more than once."""
        if self._planes is None:
            return
        for plane in self._planes:
            if plane is not None and isinstance(plane.buffer, memoryview):
                plane.buffer.release()
        self._planes = None

    def __enter__(self) -> "RawFrame":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        """Compact repr that doesn't dump plane data."""
        return (
            f"RawFrame(frame_id={self.frame_id}, "
            f"{self.width}x{self.height}, "
            f"rotation={self.rotation}, "
            f"format={self.pixel_format}, "
            f"closed={self.closed})"
        )
