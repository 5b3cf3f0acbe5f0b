"""Per-template watermark mask computation."""

from dataclasses import dataclass
from typing import Any, Union

import cv2
import numpy as np

from .base import BaseProcessor, validate_image
from .foreground import extract_foreground_text
from .gravity import Gravity, align_to_canvas, crop_with_gravity, parse_gravity
from .grayscale import to_gray
from .threshold import binarize_with_threshold


@dataclass
class WatermarkMaskResult:
    """Mask computed for one template, with its intermediate images.

    Only ``final_mask`` takes part in aggregation; the other images are kept
    for inspection.
    """

    final_mask: np.ndarray
    cropped_template: np.ndarray
    binarized: np.ndarray
    foreground_mask: np.ndarray
    clamped: bool = False


class WatermarkMaskProcessor(BaseProcessor):
    """Processor computing the watermark mask of one template for an image."""

    def process(
        self,
        image: np.ndarray,
        template: np.ndarray = None,
        gravity: Union[str, Gravity] = Gravity.SOUTH_EAST,
        threshold: float = 0.0,
        exclude_foreground: bool = False,
        **kwargs: Any,
    ) -> WatermarkMaskResult:
        """Compute the watermark mask of ``template`` for ``image``.

        Args:
            image: Polarity-normalized grayscale image
            template: Watermark template mask
            gravity: Anchor the template is aligned with
            threshold: Binarization threshold, see select_threshold
            exclude_foreground: Keep probable text out of the mask
            **kwargs: Passed on to compute_watermark_mask

        Returns:
            WatermarkMaskResult
        """
        self.validate_image(image)

        self.clear_debug_images()

        result = compute_watermark_mask(
            image, template, gravity, threshold, exclude_foreground, **kwargs
        )

        self.save_debug_image("cropped_template", result.cropped_template)
        self.save_debug_image("binarized", result.binarized)
        self.save_debug_image("foreground", result.foreground_mask)
        self.save_debug_image("mask", result.final_mask)

        return result


def compute_watermark_mask(
    image: np.ndarray,
    template: np.ndarray,
    gravity: Union[str, Gravity],
    threshold: float,
    exclude_foreground: bool,
    kernel_size: int = 3,
    dilate_iter: int = 1,
) -> WatermarkMaskResult:
    """Compute the watermark mask of a template, excluding foreground text.

    1. Crop the template to the image size, anchored by gravity.
    2. Binarize the image at the adaptive threshold.
    3. Extract the foreground text from the binary image.
    4. Subtract the text area from the template when requested.

    Args:
        image: Polarity-normalized grayscale image
        template: Watermark template mask
        gravity: Anchor the template is aligned with
        threshold: Binarization threshold
        exclude_foreground: Keep probable text out of the mask
        kernel_size: Dilation kernel size of the foreground extractor
        dilate_iter: Dilation iterations of the foreground extractor

    Returns:
        WatermarkMaskResult whose masks have the height and width of ``image``
    """
    anchor = parse_gravity(gravity)
    validate_image(image)
    validate_image(template, name="template")

    if template.ndim == 3:
        template = to_gray(template)

    height, width = image.shape[:2]

    crop = crop_with_gravity(template, width, height, anchor)
    cropped = align_to_canvas(crop.image, width, height, anchor)

    binary = binarize_with_threshold(image, threshold)

    foreground = extract_foreground_text(binary, kernel_size=kernel_size, dilate_iter=dilate_iter)

    if exclude_foreground:
        mask = cv2.bitwise_and(cropped, foreground)
    else:
        mask = cropped.copy()

    return WatermarkMaskResult(
        final_mask=mask,
        cropped_template=cropped,
        binarized=binary,
        foreground_mask=foreground,
        clamped=crop.clamped,
    )
