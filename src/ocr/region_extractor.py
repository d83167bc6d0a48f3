"""Crop template regions out of a document image."""

import numpy as np

from src.errors import InvalidImageError, OutOfBoundsError
from src.templates.models import Region


def image_size(image: np.ndarray) -> tuple[int, int]:
    """Return ``(width, height)`` of an image array.

    Raises:
        InvalidImageError: If the array is not a non-empty 2-D or 3-D image.
    """
    if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidImageError(f"Not a usable image array: shape {image.shape}")
    return image.shape[1], image.shape[0]


def crop_region(image: np.ndarray, region: Region) -> np.ndarray:
    """Copy a region out of an image.

    Args:
        image: Source image, ``(height, width)`` or ``(height, width, channels)``.
        region: Region to copy.

    Returns:
        A new array of exactly ``region.height x region.width`` pixels that
        does not share memory with ``image``.

    Raises:
        OutOfBoundsError: If the region is degenerate or leaves the image.
    """
    width, height = image_size(image)
    if not region.fits_within(width, height):
        raise OutOfBoundsError(region, width, height)
    return image[region.y_min : region.y_max, region.x_min : region.x_max].copy()
