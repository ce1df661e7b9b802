"""
MoodCam Configuration
=====================

Settings for the mood service, validated with pydantic.

Later sources override earlier ones:
    1. Model defaults
    2. config.yaml
    3. Environment variables

Environment Variable Mapping:
    MOODCAM_RECONSTRUCTION      -> decoder.reconstruction
    MOODCAM_JPEG_QUALITY        -> decoder.jpeg_quality
    MOODCAM_BRIGHTNESS_GRID     -> brightness.grid_size
    MOODCAM_DETECTOR_BACKEND    -> detector.backend
    MOODCAM_VISION_CREDENTIALS  -> detector.vision.credentials_path
    MOODCAM_INCLUDE_IMAGE       -> output.include_image
    MOODCAM_PORT                -> server.port
    MOODCAM_LOG_LEVEL           -> logging.level
    PORT                        -> server.port (Cloud Run)

Example:
    from moodcam.config import settings

    print(settings.detector.backend)
    print(settings.decoder.reconstruction)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Service identification."""

    name: str = Field(default="moodcam", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class DecoderConfig(BaseModel):
    """Frame reconstruction configuration."""

    reconstruction: Literal["jpeg", "direct"] = Field(
        default="jpeg",
        description="'jpeg' round-trips through the JPEG codec, 'direct' converts only",
    )
    jpeg_quality: int = Field(
        default=100,
        ge=1,
        le=100,
        description="JPEG quality used for the round trip",
    )


class BrightnessConfig(BaseModel):
    """Brightness fallback configuration."""

    grid_size: int = Field(
        default=40,
        ge=1,
        le=512,
        description="Side of the square sample grid",
    )


class MockDetectorConfig(BaseModel):
    """Mock detector configuration."""

    smiling_probability: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Smile of the single scripted face (None = no face)",
    )
    face_size: int = Field(default=120, ge=1, description="Side of the scripted face box")


class HaarDetectorConfig(BaseModel):
    """OpenCV Haar cascade detector configuration."""

    scale_factor: float = Field(default=1.1, gt=1.0, description="Pyramid scale step")
    min_neighbors: int = Field(default=5, ge=0, description="Neighbours to keep a face")
    min_face_size: int = Field(default=60, ge=1, description="Smallest face side (px)")


class VisionDetectorConfig(BaseModel):
    """Google Cloud Vision detector configuration."""

    credentials_path: Optional[str] = Field(
        default=None,
        description="Service account JSON (None = application default credentials)",
    )
    max_rps: float = Field(default=2.0, gt=0, description="Maximum API calls per second")
    max_results: int = Field(default=10, ge=1, description="Maximum faces per request")


class DetectorConfig(BaseModel):
    """Face detector selection."""

    backend: Literal["mock", "haar", "vision"] = Field(
        default="haar",
        description="Face detector backend: 'mock', 'haar' or 'vision'",
    )
    mock: MockDetectorConfig = Field(default_factory=MockDetectorConfig)
    haar: HaarDetectorConfig = Field(default_factory=HaarDetectorConfig)
    vision: VisionDetectorConfig = Field(default_factory=VisionDetectorConfig)


class OutputConfig(BaseModel):
    """Response configuration."""

    include_image: bool = Field(
        default=False,
        description="Include the upright image as base64 JPEG in responses",
    )
    image_jpeg_quality: int = Field(default=90, ge=1, le=100)


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for MoodCam.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    brightness: BrightnessConfig = Field(default_factory=BrightnessConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Build Settings from defaults, an optional YAML file and the environment.

    Environment values win over the file, and the file wins over the
    model defaults. Invalid values raise pydantic's ValidationError.

    Args:
        config_path: Explicit YAML path; when omitted the first existing
            file from CONFIG_SEARCH_PATHS is used

    Returns:
        Settings: Validated configuration
    """
    if config_path is None:
        config_path = next(
            (str(candidate) for candidate in CONFIG_SEARCH_PATHS if candidate.exists()),
            None,
        )

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Reading settings file {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("Settings file not found; relying on defaults and MOODCAM_* variables")

    _apply_env_overrides(config_data)
    return Settings.model_validate(config_data)


CONFIG_SEARCH_PATHS = (
    Path("config.yaml"),
    Path("config.yml"),
    Path("/app/config.yaml"),
    Path(__file__).parent.parent.parent / "config.yaml",
)


def _as_flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


# (variable, settings path, converter). PORT comes after MOODCAM_PORT so
# the platform-assigned port wins when both are set.
_ENV_OVERRIDES = (
    ("MOODCAM_RECONSTRUCTION", ("decoder", "reconstruction"), str),
    ("MOODCAM_JPEG_QUALITY", ("decoder", "jpeg_quality"), int),
    ("MOODCAM_BRIGHTNESS_GRID", ("brightness", "grid_size"), int),
    ("MOODCAM_DETECTOR_BACKEND", ("detector", "backend"), str),
    ("MOODCAM_VISION_CREDENTIALS", ("detector", "vision", "credentials_path"), str),
    ("MOODCAM_INCLUDE_IMAGE", ("output", "include_image"), _as_flag),
    ("MOODCAM_PORT", ("server", "port"), int),
    ("PORT", ("server", "port"), int),
    ("MOODCAM_LOG_LEVEL", ("logging", "level"), str),
)


def _apply_env_overrides(config_data: dict) -> None:
    """Write every set MOODCAM_* variable into the raw config mapping."""
    for variable, path, convert in _ENV_OVERRIDES:
        raw = os.environ.get(variable)
        if not raw:
            continue
        section = config_data
        for key in path[:-1]:
            section = section.setdefault(key, {})
        section[path[-1]] = convert(raw)


def setup_logging(settings: Settings) -> None:
    """Install the root handler with the level and line format from settings."""
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        line = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        line = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    logging.basicConfig(level=level, format=line, datefmt="%Y-%m-%dT%H:%M:%S")


settings = load_config()
setup_logging(settings)
