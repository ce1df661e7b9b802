"""
Input Message Schema
====================

Pydantic model for frames submitted over HTTP.

Input Contract:
    {
        "frame_id": 7,
        "width": 640,
        "height": 480,
        "rotation": 270,
        "pixel_format": "YUV_420_888",
        "planes": [
            {"data": "<base64 Y>", "pixel_stride": 1, "row_stride": 640},
            {"data": "<base64 U>", "pixel_stride": 2, "row_stride": 640},
            {"data": "<base64 V>", "pixel_stride": 2, "row_stride": 640}
        ]
    }

Dimension and plane checks are left to the decoder so that failures carry
the same specific messages as library callers get.
"""

import base64
import binascii
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from moodcam.capture.frame import VALID_ROTATIONS, YUV_420_888, Plane, RawFrame
from moodcam.errors import FormatError


class PlaneMessage(BaseModel):
    """One base64-encoded plane."""

    data: Optional[str] = Field(
        default=None,
        description="Base64-encoded plane bytes (null for a missing plane)",
    )

    size: Optional[int] = Field(
        default=None,
        description="Declared byte count (defaults to the decoded length)",
    )

    pixel_stride: int = Field(default=1, ge=1, description="Sample stride in bytes")

    row_stride: int = Field(default=0, ge=0, description="Row stride in bytes")


class FrameMessage(BaseModel):
    """
    Schema for a captured frame submitted to POST /mood.

    Attributes:
        frame_id: Caller-assigned identity echoed in the response
        width: Capture width in pixels
        height: Capture height in pixels
        rotation: Clockwise degrees needed to make the image upright
        pixel_format: Pixel layout name
        planes: Y, U and V planes
    """

    frame_id: int = Field(default=0, ge=0, description="Caller-assigned frame id")

    width: int = Field(..., description="Capture width in pixels")

    height: int = Field(..., description="Capture height in pixels")

    rotation: int = Field(default=0, description="Rotation in degrees (0/90/180/270)")

    pixel_format: str = Field(default=YUV_420_888, description="Pixel layout name")

    planes: List[Optional[PlaneMessage]] = Field(..., description="Y, U, V planes")

    timestamp: float = Field(default=0.0, ge=0, description="Capture timestamp")

    @field_validator("rotation")
    @classmethod
    def _check_rotation(cls, value: int) -> int:
        if value not in VALID_ROTATIONS:
            raise ValueError(f"rotation must be one of {VALID_ROTATIONS}")
        return value

    def to_raw_frame(self) -> RawFrame:
        """
        Decode the planes into a RawFrame.

        Raises:
            FormatError: If a plane is not valid base64
        """
        planes = []
        for index, message in enumerate(self.planes):
            if message is None or message.data is None:
                planes.append(None)
                continue
            try:
                data = base64.b64decode(message.data, validate=True)
            except binascii.Error as e:
                raise FormatError(f"Plane {index} is not valid base64: {e}") from e
            planes.append(
                Plane(
                    data,
                    size=message.size,
                    pixel_stride=message.pixel_stride,
                    row_stride=message.row_stride,
                )
            )

        return RawFrame(
            frame_id=self.frame_id,
            width=self.width,
            height=self.height,
            planes=planes,
            rotation=self.rotation,
            pixel_format=self.pixel_format,
            timestamp=self.timestamp,
        )

    @classmethod
    def from_raw_frame(cls, frame: RawFrame) -> "FrameMessage":
        """Encode a RawFrame as a message (used by clients and tests)."""
        planes = []
        for plane in frame.planes:
            if plane is None:
                planes.append(None)
                continue
            planes.append(
                PlaneMessage(
                    data=base64.b64encode(bytes(plane.buffer)).decode("ascii"),
                    size=plane.size,
                    pixel_stride=plane.pixel_stride,
                    row_stride=plane.row_stride,
                )
            )
        return cls(
            frame_id=frame.frame_id,
            width=frame.width,
            height=frame.height,
            rotation=frame.rotation,
            pixel_format=frame.pixel_format,
            planes=planes,
            timestamp=frame.timestamp,
        )
