"""Watermark removal by OpenCV inpainting."""

import logging
from typing import Any

import cv2
import numpy as np

from ..exceptions import InvalidImageError
from .base import BaseProcessor, validate_image

logger = logging.getLogger(__name__)

INPAINT_METHODS = {
    "telea": cv2.INPAINT_TELEA,
    "ns": cv2.INPAINT_NS,
}


class InpaintProcessor(BaseProcessor):
    """Processor filling masked pixels from their surroundings."""

    def process(self, image: np.ndarray, mask: np.ndarray = None, **kwargs: Any) -> np.ndarray:
        """Remove the masked watermark from an image.

        Args:
            image: Image to restore
            mask: Single channel mask, 255 marks pixels to fill
            **kwargs: ``radius`` and ``method`` override the configured values

        Returns:
            Restored image
        """
        self.validate_image(image)
        self.clear_debug_images()

        radius = kwargs.get("radius", self.get_config_value("radius", 3))
        method = kwargs.get("method", self.get_config_value("method", "telea"))

        self.save_debug_image("inpaint_mask", mask)
        result = remove_watermark(image, mask, radius=radius, method=method)
        self.save_debug_image("inpainted", result)
        return result


def remove_watermark(
    image: np.ndarray,
    mask: np.ndarray,
    radius: float = 3,
    method: str = "telea",
) -> np.ndarray:
    """Remove a watermark from an image using inpainting.

    Pixels where the mask is 0 are preserved; pixels where it is non-zero
    are synthesized from the neighborhood within ``radius``. An empty mask
    returns an unchanged copy of the image.

    Args:
        image: 8-bit image, grayscale or BGR
        mask: 8-bit single channel mask with the image's height and width
        radius: Neighborhood radius considered for each masked pixel
        method: "telea" or "ns"

    Returns:
        Inpainted image

    Raises:
        InvalidImageError: If image and mask geometry differ
        ValueError: If the method is unknown or the radius is not positive
    """
    validate_image(image)
    validate_image(mask, name="mask")

    if method not in INPAINT_METHODS:
        raise ValueError(f"Unsupported inpainting method: {method}")
    if radius <= 0:
        raise ValueError("Inpaint radius must be positive")
    if mask.ndim != 2 or mask.shape != image.shape[:2]:
        raise InvalidImageError(
            "Mask must be single channel with the image's size",
            image_shape=image.shape, mask_shape=mask.shape,
        )

    if cv2.countNonZero(mask) == 0:
        logger.debug("Empty mask, skipping inpainting")
        return image.copy()

    return cv2.inpaint(image, mask, float(radius), INPAINT_METHODS[method])
