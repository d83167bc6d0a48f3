"""Configuration management for the license field extractor.

Loads and validates YAML configuration with defaults for recognition,
preprocessing, template storage and extraction behavior.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from src.ocr.tesseract_engine import DEFAULT_ALLOWED_CHARACTERS

logger = logging.getLogger(__name__)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognizer."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 7
    allowed_characters: str | None = DEFAULT_ALLOWED_CHARACTERS


class PreprocessingConfig(BaseModel):
    """Configuration for document and region image filters."""

    grayscale_enabled: bool = True
    contrast_enabled: bool = True
    contrast_factor: float = 2.0
    contrast_offset: float = -0.5


class TemplatesConfig(BaseModel):
    """Location of the layout template files."""

    directory: str = "configs/templates"


class ExtractionConfig(BaseModel):
    """Configuration for the per-field extraction loop."""

    failure_policy: str = "fail_fast"
    max_workers: int = Field(default=1, ge=1)


class ServerConfig(BaseModel):
    """Address the API server binds to."""

    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, ge=1)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
