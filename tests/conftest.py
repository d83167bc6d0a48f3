"""Shared test fixtures for the license OCR test suite."""

from pathlib import Path

import numpy as np
import pytest

from src.templates.models import FieldDefinition, Region, Template
from stubs import ADDRESS_VALUE, NAME_VALUE, SEX_VALUE


@pytest.fixture
def license_image() -> np.ndarray:
    """Create a 100x200 grayscale image with three filled field regions."""
    image = np.zeros((100, 200), dtype=np.uint8)
    image[10:30, 10:60] = NAME_VALUE
    image[10:30, 70:100] = SEX_VALUE
    image[40:70, 10:190] = ADDRESS_VALUE
    return image


@pytest.fixture
def license_template() -> Template:
    """Template matching ``license_image`` plus one out-of-bounds field."""
    return Template(
        identifier="testland",
        fields=(
            FieldDefinition("Name", Region(10, 10, 60, 30)),
            FieldDefinition("Sex", Region(70, 10, 100, 30)),
            FieldDefinition("Address", Region(10, 40, 190, 70)),
            FieldDefinition("Signature", Region(150, 80, 250, 95)),
        ),
        canvas_size=(200, 100),
    )


@pytest.fixture
def stub_texts() -> dict[int, str]:
    """Recognizer output for each region of ``license_image``."""
    return {
        NAME_VALUE: "  JANE DOE ",
        SEX_VALUE: "SEX: F",
        ADDRESS_VALUE: "123MAINST.APT2CA90210-1234",
    }


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent
