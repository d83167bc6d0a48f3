"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.ocr.tesseract_engine import DEFAULT_ALLOWED_CHARACTERS
from src.utils.config import (
    AppConfig,
    ExtractionConfig,
    OCRConfig,
    PreprocessingConfig,
    ServerConfig,
    TemplatesConfig,
    load_config,
)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 7
        assert cfg.tesseract_cmd is None
        assert cfg.allowed_characters == DEFAULT_ALLOWED_CHARACTERS

    def test_disable_allow_list(self) -> None:
        assert OCRConfig(allowed_characters=None).allowed_characters is None


class TestPreprocessingConfig:
    """Tests for PreprocessingConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = PreprocessingConfig()
        assert cfg.grayscale_enabled is True
        assert cfg.contrast_enabled is True
        assert cfg.contrast_factor == 2.0
        assert cfg.contrast_offset == -0.5

    def test_override(self) -> None:
        cfg = PreprocessingConfig(contrast_enabled=False, contrast_factor=1.5)
        assert cfg.contrast_enabled is False
        assert cfg.contrast_factor == 1.5


class TestExtractionConfig:
    """Tests for ExtractionConfig validation."""

    def test_defaults(self) -> None:
        cfg = ExtractionConfig()
        assert cfg.failure_policy == "fail_fast"
        assert cfg.max_workers == 1

    def test_max_workers_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ExtractionConfig(max_workers=0)


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.templates, TemplatesConfig)
        assert isinstance(cfg.extraction, ExtractionConfig)
        assert isinstance(cfg.server, ServerConfig)
        assert cfg.templates.directory == "configs/templates"
        assert cfg.server.port == 8000
        assert cfg.server.max_upload_bytes == 20 * 1024 * 1024
        assert cfg.log_level == "INFO"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, project_root: Path) -> None:
        cfg = load_config(project_root / "configs" / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.allowed_characters == DEFAULT_ALLOWED_CHARACTERS
        assert cfg.extraction.failure_policy == "fail_fast"

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "ocr": {"psm": 6, "allowed_characters": None},
            "templates": {"directory": "/srv/templates"},
            "extraction": {"failure_policy": "best_effort", "max_workers": 4},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.ocr.psm == 6
        assert cfg.ocr.allowed_characters is None
        assert cfg.templates.directory == "/srv/templates"
        assert cfg.extraction.max_workers == 4
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert isinstance(load_config(config_file), AppConfig)
