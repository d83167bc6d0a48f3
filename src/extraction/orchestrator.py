"""Template-driven field extraction.

Drives crop, recognize and post-process over every field of a template and
assembles the result in template order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum

import numpy as np

from src.errors import OutOfBoundsError, RecognitionError
from src.ocr.region_extractor import crop_region, image_size
from src.ocr.tesseract_engine import RecognitionAdapter, RecognitionPolicy
from src.preprocessing.pipeline import LicensePreprocessor
from src.templates.models import FieldDefinition, Template
from src.utils.logger import get_logger

from .postprocessor import FieldPostProcessor

logger = get_logger(__name__)


class FailurePolicy(StrEnum):
    """What to do when the recognizer fails on one field."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass
class FieldWarning:
    """Diagnostic for a field left out of the result."""

    field_name: str
    reason: str
    message: str


@dataclass
class ExtractionResult:
    """Post-processed text per field name, in template order."""

    identifier: str
    fields: dict[str, str] = field(default_factory=dict)
    warnings: list[FieldWarning] = field(default_factory=list)


@dataclass
class _FieldOutcome:
    definition: FieldDefinition
    text: str | None = None
    warning: FieldWarning | None = None


class FieldExtractor:
    """Extracts every field of a template from a document image.

    Args:
        adapter: Recognition adapter wrapping the recognizer.
        preprocessor: Optional filters applied to each cropped region.
        postprocessor: Field rule table; defaults to the sex/address rules.
        failure_policy: Whether a recognition failure aborts the extraction
            or only drops the field.
        max_workers: Number of fields processed concurrently.
    """

    def __init__(
        self,
        adapter: RecognitionAdapter,
        preprocessor: LicensePreprocessor | None = None,
        postprocessor: FieldPostProcessor | None = None,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.adapter = adapter
        self.preprocessor = preprocessor
        self.postprocessor = postprocessor or FieldPostProcessor()
        self.failure_policy = FailurePolicy(failure_policy)
        self.max_workers = max_workers

    def extract(
        self,
        template: Template,
        image: np.ndarray,
        policy: RecognitionPolicy | None = None,
    ) -> ExtractionResult:
        """Run extraction for all fields in a template.

        Args:
            template: Layout describing the field regions.
            image: Document image the regions refer to.
            policy: Character restriction passed to the recognizer.

        Returns:
            Extraction result; fields whose region is out of bounds (or, in
            best-effort mode, whose recognition failed) are omitted and
            listed in ``warnings``.

        Raises:
            RecognitionError: In fail-fast mode, on the first recognition
                failure.
            InvalidImageError: If ``image`` is not a usable image array.
        """
        image_size(image)
        definitions = list(template.fields)

        if self.max_workers > 1 and len(definitions) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(
                    pool.map(
                        lambda d: self._process_field(d, image, policy), definitions
                    )
                )
        else:
            outcomes = [self._process_field(d, image, policy) for d in definitions]

        result = ExtractionResult(identifier=template.identifier)
        for outcome in outcomes:
            if outcome.warning is not None:
                result.warnings.append(outcome.warning)
                continue
            # Duplicate names: the later field overwrites the earlier one.
            result.fields[outcome.definition.name] = outcome.text or ""

        logger.info(
            "Extracted %d of %d fields for template '%s'",
            len(result.fields),
            len(definitions),
            template.identifier,
        )
        return result

    def _process_field(
        self,
        definition: FieldDefinition,
        image: np.ndarray,
        policy: RecognitionPolicy | None,
    ) -> _FieldOutcome:
        try:
            region_image = crop_region(image, definition.region)
        except OutOfBoundsError as exc:
            logger.warning("Field %s has invalid bounds: %s", definition.name, exc)
            return _FieldOutcome(
                definition,
                warning=FieldWarning(definition.name, "out_of_bounds", str(exc)),
            )

        if self.preprocessor is not None:
            region_image = self.preprocessor.prepare_region(region_image)

        try:
            raw_text = self.adapter.recognize(region_image, policy)
        except RecognitionError as exc:
            if self.failure_policy is FailurePolicy.FAIL_FAST:
                logger.error("Recognition failed on field %s", definition.name)
                raise
            logger.warning("Skipping field %s: %s", definition.name, exc)
            return _FieldOutcome(
                definition,
                warning=FieldWarning(definition.name, "recognition_failed", str(exc)),
            )

        text = self.postprocessor.process(definition.name, raw_text)
        logger.debug("Field %s: %r", definition.name, text)
        return _FieldOutcome(definition, text=text)
