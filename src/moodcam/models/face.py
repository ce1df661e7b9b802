"""
Face Observation Models
=======================

What a face detector reports for one face.

Only the bounding box area and the smiling probability take part in
classification. Eye-open probabilities are carried through for callers.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Axis-aligned face box in image pixels."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(default=0, description="Left edge")
    y: int = Field(default=0, description="Top edge")
    width: int = Field(..., ge=0, description="Box width")
    height: int = Field(..., ge=0, description="Box height")

    @property
    def area(self) -> int:
        return self.width * self.height


class FaceObservation(BaseModel):
    """
    One detected face.

    Attributes:
        bounding_box: Face location in the upright image
        smiling_probability: Probability the face is smiling, if the
            detector classifies smiles
        left_eye_open_probability: Optional, not used for classification
        right_eye_open_probability: Optional, not used for classification
    """

    model_config = ConfigDict(frozen=True)

    bounding_box: BoundingBox

    smiling_probability: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Smiling probability in [0, 1], None if not classified",
    )

    left_eye_open_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    right_eye_open_probability: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    @property
    def area(self) -> int:
        """Bounding box area in pixels²."""
        return self.bounding_box.area

    @classmethod
    def from_box(
        cls,
        x: int,
        y: int,
        width: int,
        height: int,
        smiling_probability: Optional[float] = None,
        **eyes: Optional[float],
    ) -> "FaceObservation":
        """Shorthand constructor from plain box coordinates."""
        return cls(
            bounding_box=BoundingBox(x=x, y=y, width=width, height=height),
            smiling_probability=smiling_probability,
            **eyes,
        )
