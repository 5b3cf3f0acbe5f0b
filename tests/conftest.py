"""
Pytest configuration and shared fixtures for watermark removal tests.

Provides synthetic scans, template files and configurations for all test
modules.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator

import cv2
import numpy as np
import pytest

from watermark_removal.config import Config, MaskSpec, get_default_config
from watermark_removal.utils.logging_utils import setup_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output free of pipeline logging."""
    setup_logging(level="WARNING", use_rich=False, format_style="minimal")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def gray_scan() -> np.ndarray:
    """A uniform mid-gray BGR scan."""
    return np.full((120, 160, 3), 150, dtype=np.uint8)


@pytest.fixture
def document_image() -> np.ndarray:
    """A light BGR scan with dark text-like strokes."""
    image = np.full((200, 300, 3), 230, dtype=np.uint8)

    # Text lines
    for y in (40, 80, 120):
        cv2.line(image, (30, y), (270, y), (20, 20, 20), 3)

    # Gray stamp in the bottom-right corner
    image[150:190, 230:290] = 180
    return image


@pytest.fixture
def color_image() -> np.ndarray:
    """A light scan with a saturated red patch."""
    image = np.full((100, 100, 3), 220, dtype=np.uint8)
    image[20:40, 20:40] = (0, 0, 255)
    return image


@pytest.fixture
def carbon_copy_image() -> np.ndarray:
    """A dark-background scan whose inverse is a light scan with a red patch."""
    image = np.full((100, 120, 3), 30, dtype=np.uint8)
    # Inverts to (0, 0, 255)
    image[30:60, 40:80] = (255, 255, 0)
    return image


def make_template(height: int, width: int, box=None) -> np.ndarray:
    """Create a template mask, white (255) inside ``box`` = (x, y, w, h)."""
    template = np.zeros((height, width), dtype=np.uint8)
    if box is not None:
        x, y, w, h = box
        template[y:y + h, x:x + w] = 255
    return template


@pytest.fixture
def template_factory():
    """Factory for in-memory template masks."""
    return make_template


@pytest.fixture
def template_files(temp_dir: Path) -> Dict[str, Path]:
    """Write a set of template masks sized for a 120x160 scan."""
    mask_dir = temp_dir / "masks"
    mask_dir.mkdir()

    templates = {
        "empty": make_template(120, 160),
        "top_left": make_template(120, 160, (0, 0, 40, 30)),
        "bottom_right": make_template(120, 160, (120, 90, 40, 30)),
    }

    files = {}
    for name, template in templates.items():
        path = mask_dir / f"{name}.png"
        cv2.imwrite(str(path), template)
        files[name] = path
    return files


@pytest.fixture
def sample_config() -> Config:
    """Create a configuration without templates for testing."""
    config = get_default_config()
    config.logging.use_rich = False
    return config


@pytest.fixture
def two_template_config(template_files: Dict[str, Path]) -> Config:
    """Configuration with two disjoint templates."""
    return Config(masks=[
        MaskSpec(file=template_files["top_left"], gravity="north-west"),
        MaskSpec(file=template_files["bottom_right"], gravity="south-east"),
    ])
