"""Grayscale reduction that keeps the channel layout of the input."""

import cv2
import numpy as np

from .base import validate_image


def to_gray(image: np.ndarray) -> np.ndarray:
    """Return a single channel luminance copy of an image."""
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image.copy()


def remove_colors(image: np.ndarray) -> np.ndarray:
    """Convert an image to luminance, then back to its original channel count.

    Inpainting works best on grayscale images; re-expanding to BGR keeps the
    later stages independent of the channel count. Applying this twice gives
    the same result as applying it once.

    Args:
        image: BGR or grayscale image

    Returns:
        Grayscale image with the same shape as the input
    """
    validate_image(image)

    gray = to_gray(image)
    if image.ndim == 3:
        return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)
    return gray
