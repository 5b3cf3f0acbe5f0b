"""Gravity-anchored cropping and alignment of watermark templates."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np

from ..exceptions import InvalidConfigurationError, InvalidImageError
from .base import validate_image

logger = logging.getLogger(__name__)


class Gravity(str, Enum):
    """Anchor positions a template is aligned against."""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    NORTH_EAST = "north-east"
    NORTH_WEST = "north-west"
    SOUTH_EAST = "south-east"
    SOUTH_WEST = "south-west"
    CENTER = "center"


# Placement of the region along (x, y): flush with the start edge, the end
# edge, or centered
_START, _END, _CENTER = "start", "end", "center"

_PLACEMENT: Dict[Gravity, Tuple[str, str]] = {
    Gravity.NORTH: (_START, _START),
    Gravity.NORTH_WEST: (_START, _START),
    Gravity.NORTH_EAST: (_END, _START),
    Gravity.WEST: (_START, _START),
    Gravity.EAST: (_END, _START),
    Gravity.SOUTH: (_START, _END),
    Gravity.SOUTH_WEST: (_START, _END),
    Gravity.SOUTH_EAST: (_END, _END),
    Gravity.CENTER: (_CENTER, _CENTER),
}


@dataclass
class CropResult:
    """A template region cut out for one source image.

    ``clamped`` is set when the requested size did not fit inside the
    template and had to be shrunk. It is a diagnostic, not an error.
    """

    image: np.ndarray
    origin: Tuple[int, int]
    requested_size: Tuple[int, int]
    size: Tuple[int, int]

    @property
    def clamped(self) -> bool:
        return self.size != self.requested_size


def parse_gravity(value: Union[str, Gravity]) -> Gravity:
    """Return the Gravity named by ``value``.

    Raises:
        InvalidConfigurationError: If the value is not one of the nine anchors.
    """
    if isinstance(value, Gravity):
        return value
    try:
        return Gravity(value)
    except ValueError:
        valid = ", ".join(g.value for g in Gravity)
        raise InvalidConfigurationError(
            f"Invalid gravity '{value}', expected one of: {valid}", gravity=value
        ) from None


def _axis_origin(extent: int, size: int, placement: str) -> Tuple[int, int]:
    """Return (start, size) of a region along one axis, clamped to the extent."""
    if placement == _END:
        start = extent - size
    elif placement == _CENTER:
        start = (extent - size) // 2
    else:
        start = 0

    if start < 0:
        start = 0
        size = extent  # Adjust size to fit

    if start + size > extent:
        size = extent - start

    return start, size


def crop_with_gravity(
    template: np.ndarray,
    width: int,
    height: int,
    gravity: Union[str, Gravity],
) -> CropResult:
    """Crop a ``width`` x ``height`` region of a template anchored by gravity.

    The region touches the template edges implied by the gravity, e.g.
    south-east anchors the bottom-right corner of the crop to the
    bottom-right corner of the template. When the template is smaller than
    the requested size along an axis, the region starts at 0 and spans the
    full template extent on that axis.

    Args:
        template: Template mask
        width: Requested width
        height: Requested height
        gravity: Anchor position

    Returns:
        CropResult holding an independent copy of the region

    Raises:
        InvalidConfigurationError: If the gravity is unknown
        InvalidImageError: If the template is empty or the size not positive
    """
    anchor = parse_gravity(gravity)
    validate_image(template, name="template")
    if width <= 0 or height <= 0:
        raise InvalidImageError("Crop size must be positive", width=width, height=height)

    template_height, template_width = template.shape[:2]
    x_placement, y_placement = _PLACEMENT[anchor]

    start_x, crop_width = _axis_origin(template_width, width, x_placement)
    start_y, crop_height = _axis_origin(template_height, height, y_placement)

    region = template[start_y:start_y + crop_height, start_x:start_x + crop_width].copy()
    result = CropResult(
        image=region,
        origin=(start_x, start_y),
        requested_size=(width, height),
        size=(crop_width, crop_height),
    )

    if result.clamped:
        logger.debug(
            "Template crop clamped from %dx%d to %dx%d (gravity=%s)",
            width, height, crop_width, crop_height, anchor.value,
        )

    return result


def align_to_canvas(
    region: np.ndarray,
    width: int,
    height: int,
    gravity: Union[str, Gravity],
) -> np.ndarray:
    """Place a region on an all-zero ``width`` x ``height`` canvas.

    The region is anchored with the same gravity it was cropped with, so a
    clamped template crop still lands at the expected corner or edge of the
    source image. Pixels outside the region are 0 (preserve).
    """
    anchor = parse_gravity(gravity)
    region_height, region_width = region.shape[:2]

    if (region_width, region_height) == (width, height):
        return region
    if region_width > width or region_height > height:
        raise InvalidImageError(
            "Region does not fit on canvas",
            region=f"{region_width}x{region_height}", canvas=f"{width}x{height}",
        )

    x_placement, y_placement = _PLACEMENT[anchor]
    offset_x = _canvas_offset(width, region_width, x_placement)
    offset_y = _canvas_offset(height, region_height, y_placement)

    canvas = np.zeros((height, width) + region.shape[2:], dtype=region.dtype)
    canvas[offset_y:offset_y + region_height, offset_x:offset_x + region_width] = region
    return canvas


def _canvas_offset(extent: int, size: int, placement: str) -> int:
    if placement == _END:
        return extent - size
    if placement == _CENTER:
        return (extent - size) // 2
    return 0
