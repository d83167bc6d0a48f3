"""End-to-end license processing.

Resolves the jurisdiction, looks up its layout template, decodes and
preprocesses the image, and extracts every templated field.
"""

import io
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.errors import InvalidImageError, TemplateNotFoundError
from src.extraction.orchestrator import FailurePolicy, FieldExtractor, FieldWarning
from src.preprocessing.pipeline import LicensePreprocessor, encode_jpeg_base64
from src.templates.jurisdiction import resolve_jurisdiction
from src.templates.repository import TemplateRepository, normalize_identifier
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .tesseract_engine import (
    RecognitionAdapter,
    RecognitionPolicy,
    Recognizer,
    TesseractEngine,
)

logger = get_logger(__name__)


@dataclass
class LicenseData:
    """Fields extracted from one license image."""

    state: str
    fields: dict[str, str]
    warnings: list[FieldWarning] = field(default_factory=list)
    processed_image: str | None = None


def load_image(source: Path | bytes) -> np.ndarray:
    """Decode an image file or raw bytes into an array.

    Raises:
        InvalidImageError: If the data is not a readable image.
    """
    try:
        if isinstance(source, bytes):
            img = Image.open(io.BytesIO(source))
        else:
            img = Image.open(source)
        img.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"Cannot decode image: {exc}") from exc
    if img.mode not in ("L", "RGB", "RGBA"):
        img = img.convert("RGB")
    return np.array(img)


class LicenseProcessor:
    """Template-driven license field extraction pipeline.

    Args:
        config: Application configuration object.
        repository: Template source; built from ``config.templates`` when
            omitted.
        recognizer: Recognizer to use; a :class:`TesseractEngine` built from
            ``config.ocr`` when omitted.
    """

    def __init__(
        self,
        config: AppConfig,
        repository: TemplateRepository | None = None,
        recognizer: Recognizer | None = None,
    ) -> None:
        self.config = config
        self.repository = repository or TemplateRepository(
            Path(config.templates.directory)
        )
        self.preprocessor = LicensePreprocessor(config.preprocessing)
        if recognizer is None:
            recognizer = TesseractEngine(
                tesseract_cmd=config.ocr.tesseract_cmd,
                default_lang=config.ocr.default_lang,
                psm=config.ocr.psm,
            )
        self.extractor = FieldExtractor(
            RecognitionAdapter(recognizer),
            preprocessor=self.preprocessor,
            failure_policy=FailurePolicy(config.extraction.failure_policy),
            max_workers=config.extraction.max_workers,
        )
        self.policy = RecognitionPolicy(config.ocr.allowed_characters)

    def process(
        self,
        source: Path | bytes,
        state: str,
        include_image: bool = False,
    ) -> LicenseData:
        """Extract the templated fields from a license image.

        Args:
            source: Path to an image file, or raw image bytes.
            state: Jurisdiction name, or a free-form answer naming it.
            include_image: Whether to return the preprocessed image as
                base64 JPEG.

        Returns:
            Extracted license data.

        Raises:
            TemplateNotFoundError: If no layout exists for the jurisdiction.
            MalformedTemplateError: If the layout file cannot be parsed.
            InvalidImageError: If the image cannot be decoded.
            RecognitionError: If recognition fails in fail-fast mode.
        """
        name = resolve_jurisdiction(state)
        if name is None:
            raise TemplateNotFoundError(state or "unknown")
        key = normalize_identifier(name)

        template = self.repository.lookup(key)
        if template is None:
            raise TemplateNotFoundError(key)

        image = self.preprocessor.prepare_document(load_image(source))
        size = (image.shape[1], image.shape[0])
        logger.info("Processing %s license (%dx%d)", key, *size)
        if template.canvas_size and template.canvas_size != size:
            logger.warning(
                "Image size %dx%d differs from template canvas %dx%d",
                *size,
                *template.canvas_size,
            )

        result = self.extractor.extract(template, image, self.policy)
        return LicenseData(
            state=key,
            fields=result.fields,
            warnings=result.warnings,
            processed_image=encode_jpeg_base64(image) if include_image else None,
        )
