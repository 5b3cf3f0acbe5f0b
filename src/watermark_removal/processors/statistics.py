"""Global brightness and channel statistics used to steer mask computation."""

from dataclasses import dataclass
from typing import Dict

import cv2
import numpy as np

from .base import validate_image


@dataclass(frozen=True)
class ChannelMetrics:
    """Summary statistics of an image.

    Attributes:
        brightness: Mean of every pixel value over all channels and locations.
            Used to detect dark-background (carbon copy) scans.
        mean_of_means: Average of the per-channel means, the overall color
            balance of the image.
        mean_of_spreads: Average of the per-channel standard deviations, the
            overall contrast of the image.
    """

    brightness: float
    mean_of_means: float
    mean_of_spreads: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "brightness": self.brightness,
            "mean_of_means": self.mean_of_means,
            "mean_of_spreads": self.mean_of_spreads,
        }


def compute_brightness(image: np.ndarray) -> float:
    """Return the arithmetic mean of all pixel values of an image.

    Raises:
        InvalidImageError: If the image has zero area.
    """
    validate_image(image)
    return float(np.mean(image, dtype=np.float64))


def compute_channel_metrics(image: np.ndarray) -> ChannelMetrics:
    """Compute brightness, mean-of-means and mean-of-spreads of an image.

    Args:
        image: 8-bit grayscale or BGR image

    Returns:
        ChannelMetrics for the image

    Raises:
        InvalidImageError: If the image has zero area or is malformed.
    """
    brightness = compute_brightness(image)

    mean, std_dev = cv2.meanStdDev(image)

    return ChannelMetrics(
        brightness=brightness,
        mean_of_means=float(np.mean(mean)),
        mean_of_spreads=float(np.mean(std_dev)),
    )
