"""Visualization utilities for debugging watermark masks."""

from typing import Dict, Tuple
import cv2
import numpy as np


def compose_diagnostic_panel(
    images: Dict[str, np.ndarray],
    tile_height: int = 320,
    label_color: Tuple[int, int, int] = (0, 0, 255),
    border_color: Tuple[int, int, int] = (128, 128, 128),
) -> np.ndarray:
    """Tile labelled diagnostic images side by side.

    Args:
        images: Images keyed by label, grayscale or BGR
        tile_height: Height every tile is scaled to
        label_color: Color of the labels (B, G, R)
        border_color: Color of the tile borders (B, G, R)

    Returns:
        BGR panel image
    """
    if not images:
        raise ValueError("No images to visualize")

    tiles = []
    for label, image in images.items():
        if image.ndim == 2:
            tile = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        else:
            tile = image.copy()

        height, width = tile.shape[:2]
        scale = tile_height / float(height)
        tile = cv2.resize(tile, (max(1, int(round(width * scale))), tile_height),
                          interpolation=cv2.INTER_NEAREST)

        cv2.rectangle(tile, (0, 0), (tile.shape[1] - 1, tile.shape[0] - 1), border_color, 1)
        cv2.putText(tile, label, (8, 24), cv2.FONT_HERSHEY_SIMPLEX, 0.6, label_color, 2)
        tiles.append(tile)

    return np.hstack(tiles)


def overlay_mask(
    image: np.ndarray,
    mask: np.ndarray,
    color: Tuple[int, int, int] = (0, 0, 255),
    alpha: float = 0.5,
) -> np.ndarray:
    """Blend the masked pixels of an image with a color.

    Args:
        image: Base image, grayscale or BGR
        mask: Single channel mask, non-zero pixels are highlighted
        color: Highlight color (B, G, R)
        alpha: Weight of the highlight color

    Returns:
        BGR image with the mask overlay
    """
    vis_image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image.copy()

    highlight = np.zeros_like(vis_image)
    highlight[:] = color
    blended = cv2.addWeighted(vis_image, 1.0 - alpha, highlight, alpha, 0)

    selected = mask > 0
    vis_image[selected] = blended[selected]
    return vis_image
