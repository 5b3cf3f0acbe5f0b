"""Foreground (text) extraction used to keep text out of watermark masks."""

import cv2
import numpy as np

from .base import validate_image
from .grayscale import to_gray


def build_foreground_silhouette(
    gray: np.ndarray,
    kernel_size: int = 3,
    dilate_iter: int = 1,
) -> np.ndarray:
    """Return a solid white mask for every probable text pixel.

    Args:
        gray: Grayscale image
        kernel_size: Size of the rectangular structuring element (default: 3)
        dilate_iter: Number of dilation iterations

    Returns:
        Binary mask where text pixels are white (255)
    """
    # Otsu -> dark foreground becomes white (255)
    _, mask = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU)

    # Thicken and connect strokes broken by anti-aliasing
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (kernel_size, kernel_size))
    return cv2.dilate(mask, kernel, iterations=dilate_iter)


def extract_foreground_text(
    binary: np.ndarray,
    kernel_size: int = 3,
    dilate_iter: int = 1,
) -> np.ndarray:
    """Extract probable foreground text from a binarized image.

    The result follows the mask convention (255 = remove): text is encoded
    as 0 so that AND-ing it with a watermark template excludes the text.
    Background texture may be classified as text; that is accepted.

    Args:
        binary: Binarized image (grayscale or BGR)
        kernel_size: Size of the rectangular dilation kernel (default: 3)
        dilate_iter: Number of dilation iterations (default: 1)

    Returns:
        Single channel mask containing only 0 and 255
    """
    validate_image(binary)

    silhouette = build_foreground_silhouette(to_gray(binary), kernel_size, dilate_iter)

    # Text in black on a white background
    return cv2.bitwise_not(silhouette)
