"""Image filters applied before recognition.

Whole documents are converted to grayscale before cropping; each cropped
field gets a linear contrast boost before it is handed to the recognizer.
"""

import base64
import io

import cv2
import numpy as np
from PIL import Image

from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an RGB or RGBA image to a single channel.

    Args:
        image: Input image; 2-D arrays are already grayscale.

    Returns:
        Grayscale image (always a new array).
    """
    if image.ndim == 2:
        return image.copy()
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)


def enhance_contrast(
    image: np.ndarray, factor: float = 2.0, offset: float = -0.5
) -> np.ndarray:
    """Stretch intensities linearly: ``v * factor + offset * 255``.

    Args:
        image: Input image with values in 0..255.
        factor: Multiplier applied to every pixel.
        offset: Shift expressed as a fraction of full scale.

    Returns:
        Contrast-enhanced ``uint8`` image.
    """
    result = image.astype(np.float32) * factor + offset * 255.0
    return np.clip(result, 0, 255).astype(np.uint8)


def encode_jpeg_base64(image: np.ndarray) -> str:
    """Encode an image as base64 JPEG for returning to clients."""
    buffer = io.BytesIO()
    Image.fromarray(image).convert("RGB").save(buffer, format="JPEG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


class LicensePreprocessor:
    """Applies the configured document and region filters.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def prepare_document(self, image: np.ndarray) -> np.ndarray:
        """Prepare a full document image before any regions are cropped."""
        if not self.config.grayscale_enabled:
            return image
        logger.debug("Converting %s image to grayscale", image.shape)
        return to_grayscale(image)

    def prepare_region(self, image: np.ndarray) -> np.ndarray:
        """Prepare one cropped region for recognition."""
        if not self.config.contrast_enabled:
            return image
        return enhance_contrast(
            image,
            factor=self.config.contrast_factor,
            offset=self.config.contrast_offset,
        )
