"""Image I/O utilities for loading and saving images and templates."""

import os
import tempfile
from pathlib import Path
from typing import List, Union

import cv2
import numpy as np

from ..exceptions import ImageLoadError, ImageSaveError, InvalidConfigurationError

PathLike = Union[str, Path]

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp"]


def load_image(image_path: PathLike) -> np.ndarray:
    """Load a source image as 3-channel BGR.

    Args:
        image_path: Path to the image file

    Returns:
        numpy array containing the image

    Raises:
        ImageLoadError: If image cannot be loaded
    """
    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise ImageLoadError("Could not load image", image_path=str(image_path))
    return image


def load_template(template_path: PathLike) -> np.ndarray:
    """Load a watermark template as a single channel mask.

    Raises:
        InvalidConfigurationError: If the template cannot be loaded
    """
    path = Path(template_path)
    if not path.is_file():
        raise InvalidConfigurationError("Mask template not found", mask_file=str(path))

    template = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if template is None or template.size == 0:
        raise InvalidConfigurationError("Could not decode mask template", mask_file=str(path))
    return template


def save_image(image: np.ndarray, output_path: PathLike) -> None:
    """Save image to file.

    The image is encoded to a temporary file next to the destination and
    moved into place, so a failed write never leaves a partial file.

    Args:
        image: Image array to save
        output_path: Path where to save the image

    Raises:
        ImageSaveError: If image is None or empty, or cannot be written
    """
    output_path = Path(output_path)

    if image is None:
        raise ImageSaveError("Cannot save None as image", image_path=str(output_path))

    if image.size == 0:
        raise ImageSaveError("Cannot save empty image", image_path=str(output_path))

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageSaveError(f"Could not create output directory: {e}",
                             image_path=str(output_path)) from e

    # OpenCV picks the encoder from the extension, keep it on the temp file
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{output_path.stem}.", suffix=output_path.suffix, dir=output_path.parent
    )
    os.close(fd)
    try:
        if not cv2.imwrite(tmp_name, image):
            raise ImageSaveError("Could not encode image", image_path=str(output_path))
        os.replace(tmp_name, output_path)
    except cv2.error as e:
        raise ImageSaveError(f"Could not encode image: {e}",
                             image_path=str(output_path)) from e
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def get_image_files(directory: PathLike) -> List[Path]:
    """Get all image files from directory.

    Args:
        directory: Directory to search for images

    Returns:
        List of paths to image files, sorted
    """
    directory = Path(directory)
    image_files = set()  # Use set to avoid duplicates on case-insensitive filesystems

    for ext in IMAGE_EXTENSIONS:
        image_files.update(directory.glob(f"*{ext}"))
        image_files.update(directory.glob(f"*{ext.upper()}"))

    return sorted(image_files)
