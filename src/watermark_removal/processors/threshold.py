"""Adaptive threshold selection and fixed-threshold binarization."""

import cv2
import numpy as np

from .base import validate_image
from .grayscale import to_gray


def select_threshold(mean_of_means: float, mean_of_spreads: float, has_color: bool) -> float:
    """Choose the binarization threshold from the image statistics.

    Monochrome scans use the mean spread directly. Color scans have a higher
    inherent channel spread, so the threshold is recentered on the mean and
    damped by half of the gap between mean and spread. The formula is an
    empirical heuristic that existing templates are tuned against; keep it
    as is.

    Args:
        mean_of_means: Average of the per-channel means
        mean_of_spreads: Average of the per-channel standard deviations
        has_color: Whether the image carries vivid color

    Returns:
        Threshold on the 0-255 scale
    """
    if not has_color:
        return mean_of_spreads

    delta = (mean_of_means - mean_of_spreads) / 2
    return mean_of_means - delta


def binarize_with_threshold(image: np.ndarray, threshold: float) -> np.ndarray:
    """Binarize an image with a simple two-level split at ``threshold``.

    Pixels strictly brighter than the threshold become 255, all others 0.

    Args:
        image: BGR or grayscale image
        threshold: Threshold value (0-255)

    Returns:
        Binary image with the same channel count as the input
    """
    validate_image(image)

    gray = to_gray(image)
    _, binary = cv2.threshold(gray, float(threshold), 255, cv2.THRESH_BINARY)

    # Keep the channel layout of the input for later composition
    if image.ndim == 3:
        return cv2.cvtColor(binary, cv2.COLOR_GRAY2BGR)
    return binary
