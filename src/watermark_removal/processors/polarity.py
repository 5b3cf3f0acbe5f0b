"""Carbon copy detection and polarity normalization."""

from typing import Tuple

import cv2
import numpy as np

from .base import validate_image

# Mean brightness (0-255) below which a scan is treated as a carbon copy
CARBON_COPY_THRESHOLD = 96.0


def invert_colors(image: np.ndarray) -> np.ndarray:
    """Replace every channel value by its complement (255 - value)."""
    validate_image(image)
    return cv2.bitwise_not(image)


def normalize_polarity(
    image: np.ndarray,
    brightness: float,
    threshold: float = CARBON_COPY_THRESHOLD,
) -> Tuple[np.ndarray, bool]:
    """Flip dark-background scans to the standard light-background polarity.

    Args:
        image: Source image (grayscale or BGR)
        brightness: Mean brightness of the image, see compute_brightness
        threshold: Brightness below which the image is inverted

    Returns:
        Tuple of (normalized image, whether it was inverted). The returned
        array never aliases the input.
    """
    validate_image(image)

    if brightness < threshold:
        return cv2.bitwise_not(image), True

    return image.copy(), False
