"""Chromatic content detection."""

import cv2
import numpy as np

from .base import validate_image

# Lower HSV bounds of the "vivid color" band; hue is not constrained
MIN_SATURATION = 32
MIN_VALUE = 32


def has_color(
    image: np.ndarray,
    min_saturation: int = MIN_SATURATION,
    min_value: int = MIN_VALUE,
) -> bool:
    """Check whether an image holds any vivid color pixel.

    Grayscale and near-grayscale scans need a different threshold strategy
    than color scans, see select_threshold.

    Args:
        image: BGR or grayscale image
        min_saturation: Minimum HSV saturation of a color pixel
        min_value: Minimum HSV value of a color pixel

    Returns:
        True if at least one pixel falls inside the color band
    """
    validate_image(image)

    # Single channel images carry no chroma
    if image.ndim == 2:
        return False

    hsv = cv2.cvtColor(image, cv2.COLOR_BGR2HSV)

    lower = np.array([0, min_saturation, min_value], dtype=np.uint8)
    upper = np.array([255, 255, 255], dtype=np.uint8)
    mask = cv2.inRange(hsv, lower, upper)

    return cv2.countNonZero(mask) > 0
