"""Tests for the end-to-end license processor."""

import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from src.errors import InvalidImageError, RecognitionError, TemplateNotFoundError
from src.ocr.document_processor import LicenseProcessor, load_image
from src.ocr.tesseract_engine import DEFAULT_ALLOWED_CHARACTERS
from src.templates.repository import TemplateRepository
from src.utils.config import AppConfig, ExtractionConfig, PreprocessingConfig
from stubs import ADDRESS_VALUE, NAME_VALUE, StubRecognizer

_TEMPLATE = """<annotation>
    <size><width>200</width><height>100</height><depth>1</depth></size>
    <object><name>Name</name>
        <bndbox><xmin>10</xmin><ymin>10</ymin><xmax>60</xmax><ymax>30</ymax></bndbox></object>
    <object><name>Sex</name>
        <bndbox><xmin>70</xmin><ymin>10</ymin><xmax>100</xmax><ymax>30</ymax></bndbox></object>
    <object><name>Address</name>
        <bndbox><xmin>10</xmin><ymin>40</ymin><xmax>190</xmax><ymax>70</ymax></bndbox></object>
    <object><name>Photo</name>
        <bndbox><xmin>120</xmin><ymin>50</ymin><xmax>260</xmax><ymax>99</ymax></bndbox></object>
</annotation>
"""


def _png_bytes(image: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(image).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    states = tmp_path / "States"
    states.mkdir()
    (states / "newyork.xml").write_text(_TEMPLATE)
    return tmp_path


@pytest.fixture
def config(templates_dir: Path) -> AppConfig:
    cfg = AppConfig(preprocessing=PreprocessingConfig(contrast_enabled=False))
    cfg.templates.directory = str(templates_dir)
    return cfg


class TestLoadImage:
    """Tests for image decoding."""

    def test_from_bytes(self, license_image: np.ndarray) -> None:
        np.testing.assert_array_equal(load_image(_png_bytes(license_image)), license_image)

    def test_from_path(self, tmp_path: Path, license_image: np.ndarray) -> None:
        path = tmp_path / "license.png"
        path.write_bytes(_png_bytes(license_image))
        assert load_image(path).shape == (100, 200)

    def test_palette_image_converted(self) -> None:
        img = Image.new("P", (4, 3))
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        assert load_image(buf.getvalue()).shape == (3, 4, 3)

    def test_garbage_bytes(self) -> None:
        with pytest.raises(InvalidImageError):
            load_image(b"not an image")


class TestLicenseProcessor:
    """Tests for LicenseProcessor.process."""

    def test_process(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        recognizer = StubRecognizer(stub_texts)
        processor = LicenseProcessor(config, recognizer=recognizer)
        data = processor.process(_png_bytes(license_image), "New York")

        assert data.state == "newyork"
        assert data.fields == {
            "Name": "JANE DOE",
            "Sex": "F",
            "Address": "123 MAINST APT 2 CA 90210-1234",
        }
        assert [w.field_name for w in data.warnings] == ["Photo"]
        assert data.processed_image is None
        assert all(p.allowed_characters == DEFAULT_ALLOWED_CHARACTERS for _, p in recognizer.calls)

    def test_state_from_sentence(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        processor = LicenseProcessor(config, recognizer=StubRecognizer(stub_texts))
        data = processor.process(
            _png_bytes(license_image), "The issuing state is clearly New York."
        )
        assert data.state == "newyork"

    def test_include_image(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        processor = LicenseProcessor(config, recognizer=StubRecognizer(stub_texts))
        data = processor.process(_png_bytes(license_image), "newyork", include_image=True)
        assert data.processed_image

    def test_unknown_template(self, config: AppConfig, license_image: np.ndarray) -> None:
        processor = LicenseProcessor(config, recognizer=StubRecognizer())
        with pytest.raises(TemplateNotFoundError) as exc_info:
            processor.process(_png_bytes(license_image), "Atlantis")
        assert exc_info.value.identifier == "atlantis"

    def test_unknown_state_answer(self, config: AppConfig, license_image: np.ndarray) -> None:
        processor = LicenseProcessor(config, recognizer=StubRecognizer())
        with pytest.raises(TemplateNotFoundError):
            processor.process(_png_bytes(license_image), "Unknown")

    def test_recognition_failure_propagates(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        processor = LicenseProcessor(
            config, recognizer=StubRecognizer(stub_texts, fail_on=(NAME_VALUE,))
        )
        with pytest.raises(RecognitionError):
            processor.process(_png_bytes(license_image), "New York")

    def test_best_effort_from_config(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        config.extraction = ExtractionConfig(failure_policy="best_effort", max_workers=2)
        processor = LicenseProcessor(
            config, recognizer=StubRecognizer(stub_texts, fail_on=(ADDRESS_VALUE,))
        )
        data = processor.process(_png_bytes(license_image), "New York")
        assert list(data.fields) == ["Name", "Sex"]
        assert {w.reason for w in data.warnings} == {"recognition_failed", "out_of_bounds"}

    def test_explicit_repository(
        self, templates_dir: Path, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        cfg = AppConfig(preprocessing=PreprocessingConfig(contrast_enabled=False))
        processor = LicenseProcessor(
            cfg,
            repository=TemplateRepository(templates_dir),
            recognizer=StubRecognizer(stub_texts),
        )
        assert processor.process(_png_bytes(license_image), "NEW YORK").fields["Sex"] == "F"

    def test_color_image_converted(
        self, config: AppConfig, license_image: np.ndarray, stub_texts: dict
    ) -> None:
        color = np.stack([license_image] * 3, axis=-1)
        processor = LicenseProcessor(config, recognizer=StubRecognizer(stub_texts))
        data = processor.process(_png_bytes(color), "New York")
        assert data.fields["Sex"] == "F"
