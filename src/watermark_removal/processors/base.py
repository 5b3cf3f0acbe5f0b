"""Base processor class and common utilities for watermark removal processors."""

from typing import Any, Dict, Optional
import numpy as np
from abc import ABC, abstractmethod
from pathlib import Path
import cv2

from ..exceptions import ImageSaveError, InvalidImageError


def validate_image(image: np.ndarray, name: str = "image") -> None:
    """Validate that the input is a non-degenerate 8-bit image.

    Raises:
        InvalidImageError: If the array is missing, empty, not uint8,
            or neither a 2D grayscale raster nor a 3-channel BGR one.
    """
    if image is None:
        raise InvalidImageError(f"{name} cannot be None")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"{name} must be a numpy array",
                                type=type(image).__name__)
    if image.size == 0:
        raise InvalidImageError(f"{name} cannot be empty", shape=image.shape)
    if image.dtype != np.uint8:
        raise InvalidImageError(f"{name} must be 8-bit unsigned", dtype=str(image.dtype))
    if image.ndim not in (2, 3):
        raise InvalidImageError(f"{name} must be a 2D raster", shape=image.shape)
    if image.ndim == 3 and image.shape[2] != 3:
        raise InvalidImageError(f"{name} must be single-channel or 3-channel BGR",
                                shape=image.shape)


class BaseProcessor(ABC):
    """Base class for all image processors."""

    def __init__(self, config: Optional[Any] = None):
        """Initialize processor with optional configuration."""
        self.config = config
        self.debug_images = {}  # Store debug images during processing

    def get_config_value(self, key: str, default: Any) -> Any:
        """Safely get a config value with a default."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, image: np.ndarray, **kwargs) -> Any:
        """Process an image. Must be implemented by subclasses."""
        pass

    def validate_image(self, image: np.ndarray) -> None:
        """Validate that the input is a valid image."""
        validate_image(image)

    def save_debug_image(self, name: str, image: np.ndarray) -> None:
        """Store a debug image for later saving."""
        if self.get_config_value('save_debug_images', False):
            self.debug_images[name] = image

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        """Get all stored debug images."""
        return self.debug_images

    def clear_debug_images(self) -> None:
        """Clear stored debug images."""
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> None:
        """Save all debug images to the specified directory."""
        write_debug_images(self.debug_images, debug_dir, prefix=prefix,
                           processor=type(self).__name__)


def write_debug_images(
    images: Dict[str, np.ndarray],
    debug_dir: Path,
    prefix: str = "",
    processor: Optional[str] = None,
) -> None:
    """Write debug images as ``{prefix}_{name}.png`` files.

    Raises:
        ImageSaveError: If the directory or any image cannot be written
    """
    if not images:
        return

    debug_dir = Path(debug_dir)
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageSaveError(f"Could not create debug directory: {e}",
                             processor=processor, image_path=str(debug_dir)) from e

    for name, image in images.items():
        filename = f"{prefix}_{name}.png" if prefix else f"{name}.png"
        filepath = debug_dir / filename
        if not cv2.imwrite(str(filepath), image):
            raise ImageSaveError("Could not write debug image",
                                 processor=processor, image_path=str(filepath))
