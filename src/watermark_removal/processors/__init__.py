"""Watermark Removal Processors Module.

This module provides the image processing components of the watermark
removal pipeline. Each processor handles one step of the mask computation.
"""

# Base processor
from .base import BaseProcessor, validate_image, write_debug_images

# Image I/O
from .image_io import (
    load_image,
    load_template,
    save_image,
    get_image_files,
)

# Image statistics
from .statistics import (
    ChannelMetrics,
    compute_brightness,
    compute_channel_metrics,
)

# Polarity
from .polarity import (
    CARBON_COPY_THRESHOLD,
    invert_colors,
    normalize_polarity,
)

# Color classification
from .color import has_color

# Grayscale reduction
from .grayscale import remove_colors, to_gray

# Thresholding
from .threshold import (
    select_threshold,
    binarize_with_threshold,
)

# Gravity cropping
from .gravity import (
    Gravity,
    CropResult,
    parse_gravity,
    crop_with_gravity,
    align_to_canvas,
)

# Foreground extraction
from .foreground import (
    extract_foreground_text,
    build_foreground_silhouette,
)

# Watermark masks
from .mask_builder import (
    WatermarkMaskProcessor,
    WatermarkMaskResult,
    compute_watermark_mask,
)

# Aggregation
from .aggregation import (
    MaskAggregator,
    aggregate_masks,
    empty_mask,
)

# Inpainting
from .inpaint import (
    InpaintProcessor,
    remove_watermark,
)

# Visualization
from .visualization import (
    compose_diagnostic_panel,
    overlay_mask,
)

__all__ = [
    # Base
    "BaseProcessor",
    "validate_image",
    "write_debug_images",

    # Image I/O
    "load_image",
    "load_template",
    "save_image",
    "get_image_files",

    # Image statistics
    "ChannelMetrics",
    "compute_brightness",
    "compute_channel_metrics",

    # Polarity
    "CARBON_COPY_THRESHOLD",
    "invert_colors",
    "normalize_polarity",

    # Color classification
    "has_color",

    # Grayscale reduction
    "remove_colors",
    "to_gray",

    # Thresholding
    "select_threshold",
    "binarize_with_threshold",

    # Gravity cropping
    "Gravity",
    "CropResult",
    "parse_gravity",
    "crop_with_gravity",
    "align_to_canvas",

    # Foreground extraction
    "extract_foreground_text",
    "build_foreground_silhouette",

    # Watermark masks
    "WatermarkMaskProcessor",
    "WatermarkMaskResult",
    "compute_watermark_mask",

    # Aggregation
    "MaskAggregator",
    "aggregate_masks",
    "empty_mask",

    # Inpainting
    "InpaintProcessor",
    "remove_watermark",

    # Visualization
    "compose_diagnostic_panel",
    "overlay_mask",
]
