"""
HTTP Service Tests
==================

Tests for the FastAPI endpoints, using the mock detector.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(monkeypatch):
    from moodcam import main
    from moodcam.config import settings

    monkeypatch.setattr(settings.detector, "backend", "mock")
    monkeypatch.setattr(settings.detector.mock, "smiling_probability", None)
    monkeypatch.setattr(settings.decoder, "reconstruction", "direct")
    monkeypatch.setattr(settings.output, "include_image", False)

    with TestClient(main.app) as test_client:
        yield test_client


def _payload(bgr=(200, 200, 200), frame_id=1, rotation=0, width=16, height=16):
    from moodcam.capture.synthetic import solid_frame
    from moodcam.models.input import FrameMessage

    frame = solid_frame(width, height, bgr, frame_id=frame_id, rotation=rotation)
    return FrameMessage.from_raw_frame(frame).model_dump(mode="json")


class TestServiceEndpoints:
    """Tests for the informational endpoints."""

    def test_root(self, client):
        body = client.get("/").json()

        assert body["service"] == "MoodCam"
        assert body["detector_backend"] == "mock"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        assert client.get("/ready").json()["status"] == "ready"


class TestMoodEndpoint:
    """Tests for POST /mood."""

    def test_brightness_fallback(self, client):
        from moodcam.mood.suggestions import suggestions_for

        response = client.post("/mood", json=_payload(frame_id=21))

        assert response.status_code == 200
        body = response.json()
        assert body["frame_id"] == 21
        assert body["basis"] == "BRIGHTNESS"
        assert body["fallback_reason"] == "NO_FACES"
        assert body["suggestions"] == suggestions_for(body["mood"])
        assert body["image"] is None

    def test_rotated_frame_dimensions(self, client):
        response = client.post("/mood", json=_payload(rotation=90, width=32, height=16))

        body = response.json()
        assert (body["width"], body["height"]) == (32, 16)

    def test_smile_from_mock_detector(self, monkeypatch):
        from moodcam import main
        from moodcam.config import settings

        monkeypatch.setattr(settings.detector, "backend", "mock")
        monkeypatch.setattr(settings.detector.mock, "smiling_probability", 0.5)
        monkeypatch.setattr(settings.output, "include_image", True)

        with TestClient(main.app) as test_client:
            body = test_client.post("/mood", json=_payload()).json()

        assert body["mood"] == "Happy"
        assert body["basis"] == "SMILE"
        assert body["signal"] == 0.5
        assert body["image"]

    def test_empty_luma_returns_422(self, client):
        payload = _payload(frame_id=5)
        payload["planes"][0] = {"data": "", "pixel_stride": 1}

        response = client.post("/mood", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body == {
            "frame_id": 5,
            "error": "FormatError",
            "stage": "plane_reassembly",
            "message": body["message"],
        }
        assert "Unexpected plane sizes: y=0" in body["message"]

    def test_unsupported_format_returns_422(self, client):
        payload = _payload()
        payload["pixel_format"] = "RGBA_8888"

        body = client.post("/mood", json=payload).json()

        assert body["stage"] == "format_check"
        assert "RGBA_8888" in body["message"]

    def test_metrics_count_requests(self, client):
        client.post("/mood", json=_payload(frame_id=1))
        bad = _payload(frame_id=2)
        bad["planes"][1] = None
        client.post("/mood", json=bad)

        body = client.get("/metrics").json()

        assert body["frames_received"] == 2
        assert body["decode_failures"] == 1
        assert body["no_face_fallbacks"] == 1
        assert body["frame_errors"] >= 1
