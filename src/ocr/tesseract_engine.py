"""Tesseract recognizer and the per-region recognition adapter.

The extractor treats character recognition as an opaque callable that turns
a cropped region into text. :class:`TesseractEngine` is the production
implementation; tests substitute a stub with the same ``recognize`` method.
"""

import threading
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import pytesseract
from PIL import Image

from src.errors import RecognitionError
from src.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ALLOWED_CHARACTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-./"


@dataclass(frozen=True)
class RecognitionPolicy:
    """Restricts recognizable characters for every region in a run.

    ``allowed_characters=None`` means no restriction.
    """

    allowed_characters: str | None = None


class Recognizer(Protocol):
    """Anything that turns a region image into text."""

    def recognize(
        self, image: np.ndarray, policy: RecognitionPolicy | None = None
    ) -> str: ...


class TesseractEngine:
    """Recognizer backed by Tesseract through pytesseract.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: OCR language code.
        psm: Tesseract page segmentation mode. Field regions hold a
            single line, so the default is 7.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 7,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def build_config(self, policy: RecognitionPolicy | None = None) -> str:
        """Build the Tesseract command-line config for a policy.

        Args:
            policy: Character restriction to apply, if any.

        Returns:
            Config string passed to pytesseract.
        """
        config = f"--psm {self.psm}"
        if policy is not None and policy.allowed_characters:
            config += f" -c tessedit_char_whitelist={policy.allowed_characters}"
        return config

    def recognize(
        self, image: np.ndarray, policy: RecognitionPolicy | None = None
    ) -> str:
        """Recognize the text in a single region image.

        Args:
            image: Region image as a numpy array.
            policy: Character restriction to apply, if any.

        Returns:
            Raw recognized text.

        Raises:
            RecognitionError: If Tesseract is missing or fails.
        """
        pil_image = Image.fromarray(image)
        try:
            return pytesseract.image_to_string(
                pil_image,
                lang=self.default_lang,
                config=self.build_config(policy),
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise RecognitionError("Tesseract executable not found") from exc
        except pytesseract.TesseractError as exc:
            raise RecognitionError(f"Tesseract failed: {exc}") from exc


class RecognitionAdapter:
    """Calls a recognizer once per region and cleans up its output.

    Recognizers are assumed to be single stateful sessions, so calls are
    serialized through a lock unless ``thread_safe`` is set.

    Args:
        recognizer: The underlying recognizer.
        thread_safe: Whether concurrent ``recognize`` calls are allowed.
    """

    def __init__(self, recognizer: Recognizer, thread_safe: bool = False) -> None:
        self.recognizer = recognizer
        self.thread_safe = thread_safe
        self._lock = threading.Lock()

    def recognize(
        self, image: np.ndarray, policy: RecognitionPolicy | None = None
    ) -> str:
        """Recognize a region and trim surrounding whitespace.

        Args:
            image: Cropped region image.
            policy: Character restriction applied to the recognizer.

        Returns:
            Trimmed recognized text.

        Raises:
            RecognitionError: If the recognizer raises for any reason.
        """
        try:
            if self.thread_safe:
                text = self.recognizer.recognize(image, policy)
            else:
                with self._lock:
                    text = self.recognizer.recognize(image, policy)
        except RecognitionError:
            raise
        except Exception as exc:
            raise RecognitionError(f"Recognizer failed: {exc}") from exc
        return (text or "").strip()
