"""Exception hierarchy for license field extraction.

Field-level problems (a region outside the image, one malformed template
entry) are absorbed by the extractor; the rest propagate to the caller.
"""

from pathlib import Path


class LicenseOCRError(Exception):
    """Base class for all extraction errors."""


class TemplateNotFoundError(LicenseOCRError):
    """No layout exists for the requested identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"No layout for identifier '{identifier}'")


class MalformedTemplateError(LicenseOCRError):
    """A template file exists but cannot be interpreted."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed template {path}: {reason}")


class OutOfBoundsError(LicenseOCRError):
    """A field region does not fit inside the source image."""

    def __init__(self, region: object, width: int, height: int) -> None:
        self.region = region
        self.image_width = width
        self.image_height = height
        super().__init__(f"Region {region} is outside image bounds {width}x{height}")


class RecognitionError(LicenseOCRError):
    """The character recognizer failed on a region."""


class InvalidImageError(LicenseOCRError):
    """Input bytes or arrays cannot be used as a document image."""
