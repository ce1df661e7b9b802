"""
Model Tests
===========

Tests for the HTTP message schemas and face observations.
"""

import base64

import pytest
from pydantic import ValidationError


class TestFaceObservation:
    """Tests for FaceObservation."""

    def test_area_from_bounding_box(self):
        from moodcam.models.face import FaceObservation

        face = FaceObservation.from_box(3, 4, 10, 40)

        assert face.area == 400
        assert face.smiling_probability is None

    def test_probability_out_of_range_rejected(self):
        from moodcam.models.face import FaceObservation

        with pytest.raises(ValidationError):
            FaceObservation.from_box(0, 0, 10, 10, smiling_probability=1.5)

    def test_frozen(self, smiling_face):
        with pytest.raises(ValidationError):
            smiling_face.smiling_probability = 0.1


class TestFrameMessage:
    """Tests for FrameMessage <-> RawFrame conversion."""

    def test_round_trip_through_message(self, gradient_bgr, direct_decoder):
        from moodcam.capture.synthetic import frame_from_bgr
        from moodcam.models.input import FrameMessage

        original = frame_from_bgr(gradient_bgr, frame_id=8, rotation=270)
        message = FrameMessage.from_raw_frame(original)
        payload = message.model_dump(mode="json")

        frame = FrameMessage.model_validate(payload).to_raw_frame()

        assert (frame.frame_id, frame.width, frame.height, frame.rotation) == (8, 48, 64, 270)
        assert [p.pixel_stride for p in frame.planes] == [1, 2, 2]
        assert bytes(frame.planes[2].buffer) == bytes(original.planes[2].buffer)
        assert direct_decoder.decode(frame).width == 64

    def test_missing_plane_becomes_none(self):
        from moodcam.models.input import FrameMessage

        message = FrameMessage(
            width=2,
            height=2,
            planes=[{"data": base64.b64encode(b"\x00" * 4).decode()}, None, {"data": None}],
        )
        frame = message.to_raw_frame()

        assert frame.planes[1] is None
        assert frame.planes[2] is None

    def test_invalid_base64_is_format_error(self):
        from moodcam.errors import FormatError
        from moodcam.models.input import FrameMessage

        message = FrameMessage(width=2, height=2, planes=[{"data": "not base64!"}, None, None])

        with pytest.raises(FormatError, match="Plane 0 is not valid base64"):
            message.to_raw_frame()

    def test_rotation_validated(self):
        from moodcam.models.input import FrameMessage

        with pytest.raises(ValidationError):
            FrameMessage(width=2, height=2, rotation=45, planes=[])


class TestResponses:
    """Tests for MoodResponse and ErrorResponse."""

    def test_error_response_names_stage(self):
        from moodcam.errors import DecodeError
        from moodcam.models.output import ErrorResponse

        error = DecodeError("Buffer too short", byte_count=20)
        response = ErrorResponse.from_error(3, error)

        assert response.error == "DecodeError"
        assert response.stage == "decode"
        assert response.message == "decode failed: Buffer too short"

    def test_mood_response_with_image(self, make_image, smiling_face):
        from moodcam.models.output import MoodResponse
        from moodcam.mood.classifier import MoodAssessment
        from moodcam.models.mood import MoodBasis, MoodCategory
        from moodcam.pipeline import MoodResult

        result = MoodResult(
            frame_id=1,
            image=make_image((10, 20, 30), width=16, height=8),
            assessment=MoodAssessment(
                mood=MoodCategory.HAPPY, basis=MoodBasis.SMILE, signal=0.5, face=smiling_face
            ),
            suggestions=("Ice-cream", "Pasta", "Fresh fruit"),
        )

        response = MoodResponse.from_result(result, include_image=True)
        payload = response.model_dump(mode="json")

        assert payload["mood"] == "Happy"
        assert payload["basis"] == "SMILE"
        assert (payload["width"], payload["height"]) == (16, 8)
        assert base64.b64decode(payload["image"])[:2] == b"\xff\xd8"
        assert MoodResponse.from_result(result).image is None
