"""Union of per-template watermark masks."""

from typing import Iterable, Tuple

import cv2
import numpy as np

from ..exceptions import InvalidImageError


def empty_mask(shape: Tuple[int, ...]) -> np.ndarray:
    """Return an all-zero (preserve everything) mask for an image shape."""
    return np.zeros(shape[:2], dtype=np.uint8)


class MaskAggregator:
    """Running bitwise OR of watermark masks.

    Any pixel marked for removal by any added mask is marked in the
    composite. The result does not depend on the order masks are added in.
    """

    def __init__(self, shape: Tuple[int, ...]):
        self.mask = empty_mask(shape)
        self.count = 0

    def add(self, mask: np.ndarray) -> np.ndarray:
        """OR ``mask`` into the composite in place and return the composite."""
        if mask is None or mask.shape[:2] != self.mask.shape:
            raise InvalidImageError(
                "Mask geometry does not match the source image",
                expected=self.mask.shape,
                actual=None if mask is None else mask.shape,
            )
        if mask.ndim == 3:
            mask = cv2.cvtColor(mask, cv2.COLOR_BGR2GRAY)

        cv2.bitwise_or(self.mask, mask, dst=self.mask)
        self.count += 1
        return self.mask


def aggregate_masks(shape: Tuple[int, ...], masks: Iterable[np.ndarray]) -> np.ndarray:
    """Combine masks with a bitwise OR starting from an all-zero mask.

    Args:
        shape: Shape of the source image
        masks: Per-template masks with the same height and width

    Returns:
        The composite mask; all zeros when no masks are given
    """
    aggregator = MaskAggregator(shape)
    for mask in masks:
        aggregator.add(mask)
    return aggregator.mask
