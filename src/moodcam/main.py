"""
MoodCam Main Application
========================

FastAPI entry point for the mood service.

A client posts one captured YUV_420_888 frame per request; the service
decodes it, reads the mood from the primary face (or from brightness when
no smile is available) and answers with the mood and its suggestions.

Endpoints:
    GET  /          - Service information
    GET  /health    - Liveness check (is process alive?)
    GET  /ready     - Readiness check (pipeline initialized?)
    GET  /metrics   - Pipeline counters
    POST /mood      - Classify one frame
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from moodcam.capture.image_decoder import FrameDecoder
from moodcam.config import settings
from moodcam.detection import (
    HaarFaceDetector,
    MockFaceDetector,
    VisionFaceDetector,
    _VISION_AVAILABLE,
)
from moodcam.errors import FrameError
from moodcam.models.face import FaceObservation
from moodcam.models.input import FrameMessage
from moodcam.models.output import ErrorResponse, MoodResponse
from moodcam.mood.classifier import MoodClassifier
from moodcam.pipeline import MoodPipeline


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_pipeline: Optional[MoodPipeline] = None
_startup_time: float = 0.0
_frame_error_count: int = 0


def get_pipeline() -> Optional[MoodPipeline]:
    return _pipeline


# =============================================================================
# Face Detector Factory
# =============================================================================

def create_face_detector() -> Union[MockFaceDetector, HaarFaceDetector, VisionFaceDetector]:
    """
    Create face detector based on config.

    Fails fast if vision backend is requested but unavailable.
    """
    backend = settings.detector.backend

    if backend == "mock":
        mock = settings.detector.mock
        faces = ()
        if mock.smiling_probability is not None:
            faces = (
                FaceObservation.from_box(
                    0, 0, mock.face_size, mock.face_size,
                    smiling_probability=mock.smiling_probability,
                ),
            )
        logger.info(f"Using MockFaceDetector: faces={len(faces)}")
        return MockFaceDetector(faces=faces)

    elif backend == "haar":
        logger.info(
            f"Using HaarFaceDetector: "
            f"scale_factor={settings.detector.haar.scale_factor}, "
            f"min_face_size={settings.detector.haar.min_face_size}"
        )
        return HaarFaceDetector(
            scale_factor=settings.detector.haar.scale_factor,
            min_neighbors=settings.detector.haar.min_neighbors,
            min_face_size=settings.detector.haar.min_face_size,
        )

    elif backend == "vision":
        if not _VISION_AVAILABLE:
            raise RuntimeError(
                "Vision backend requested but google-cloud-vision not installed. "
                "Install with: pip install google-cloud-vision"
            )

        logger.info(f"Using VisionFaceDetector: max_rps={settings.detector.vision.max_rps}")
        return VisionFaceDetector(
            credentials_path=settings.detector.vision.credentials_path,
            max_rps=settings.detector.vision.max_rps,
            max_results=settings.detector.vision.max_results,
        )

    else:
        raise ValueError(f"Unknown detector backend: {backend}")


def create_pipeline() -> MoodPipeline:
    """Assemble the pipeline from settings."""
    return MoodPipeline(
        detector=create_face_detector(),
        decoder=FrameDecoder(
            reconstruction=settings.decoder.reconstruction,
            jpeg_quality=settings.decoder.jpeg_quality,
        ),
        classifier=MoodClassifier(grid_size=settings.brightness.grid_size),
    )


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _pipeline, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.app.name} {settings.app.version}")

    _pipeline = create_pipeline()
    logger.info(
        f"Pipeline ready: detector={settings.detector.backend}, "
        f"reconstruction={settings.decoder.reconstruction}"
    )

    yield

    logger.info("Shutting down gracefully...")
    if _pipeline is not None:
        _pipeline.close()
        _pipeline = None
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="MoodCam",
    description="Camera frame to mood and suggestions service",
    version=settings.app.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "MoodCam",
        "version": settings.app.version,
        "name": settings.app.name,
        "status": "running",
        "detector_backend": settings.detector.backend,
        "reconstruction": settings.decoder.reconstruction,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness check - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness check - can the service classify frames?

    Returns 503 until the pipeline is initialized.
    """
    pipeline = get_pipeline()
    if pipeline is not None and not pipeline.closed:
        return JSONResponse({
            "status": "ready",
            "frames_processed": pipeline.metrics.frames_received,
        })
    return JSONResponse({"status": "not_ready"}, status_code=503)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    pipeline = get_pipeline()
    pipeline_metrics = pipeline.get_metrics() if pipeline else {}

    detector_metrics = {}
    if pipeline is not None and isinstance(pipeline.detector, VisionFaceDetector):
        detector_metrics = {"detector": pipeline.detector.get_metrics()}

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "detector_backend": settings.detector.backend,
        "frame_errors": _frame_error_count,
        **pipeline_metrics,
        **detector_metrics,
    })


@app.post("/mood")
async def mood(message: FrameMessage) -> JSONResponse:
    """
    Classify one frame.

    Returns 200 with a MoodResponse, 422 with an ErrorResponse naming the
    failed stage, or 503 if the pipeline is not running.
    """
    global _frame_error_count

    pipeline = get_pipeline()
    if pipeline is None or pipeline.closed:
        return JSONResponse({"error": "Pipeline not ready"}, status_code=503)

    try:
        frame = message.to_raw_frame()
        result = await pipeline.process(frame)
    except FrameError as e:
        _frame_error_count += 1
        logger.error(f"Frame {message.frame_id} rejected: {e.describe()}")
        error = ErrorResponse.from_error(message.frame_id, e)
        return JSONResponse(error.model_dump(mode="json"), status_code=422)

    response = MoodResponse.from_result(
        result,
        include_image=settings.output.include_image,
        jpeg_quality=settings.output.image_jpeg_quality,
    )
    return JSONResponse(response.model_dump(mode="json"))


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    # Cloud Run uses PORT env var
    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "moodcam.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )
