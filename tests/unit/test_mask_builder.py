"""Tests for per-template watermark mask computation."""

import cv2
import numpy as np
import pytest

from watermark_removal.config import Config
from watermark_removal.exceptions import ImageSaveError, InvalidConfigurationError
from watermark_removal.processors import (
    WatermarkMaskProcessor,
    compute_watermark_mask,
    write_debug_images,
)


@pytest.fixture
def text_image() -> np.ndarray:
    """A 60x80 light scan with one dark text stroke in the upper half."""
    image = np.full((60, 80, 3), 230, dtype=np.uint8)
    image[10:14, 10:70] = 20
    return image


@pytest.fixture
def upper_template(template_factory) -> np.ndarray:
    return template_factory(60, 80, (0, 0, 80, 30))


class TestComputeWatermarkMask:
    """Test mask construction for one template."""

    def test_template_passes_through(self, text_image, upper_template):
        result = compute_watermark_mask(text_image, upper_template, "north-west", 128, False)

        np.testing.assert_array_equal(result.final_mask, upper_template)
        assert result.final_mask.shape == (60, 80)
        assert not result.clamped

    def test_foreground_is_excluded(self, text_image, upper_template):
        result = compute_watermark_mask(text_image, upper_template, "north-west", 128, True)

        mask = result.final_mask
        assert mask[12, 40] == 0
        assert mask[20, 40] == 255
        assert mask[40, 40] == 0

    def test_exclusion_never_adds_pixels(self, text_image, upper_template):
        result = compute_watermark_mask(text_image, upper_template, "north-west", 128, True)

        assert np.all(result.final_mask <= upper_template)

    def test_intermediate_images(self, text_image, upper_template):
        result = compute_watermark_mask(text_image, upper_template, "north-west", 128, True)

        assert result.binarized.shape == text_image.shape
        assert result.foreground_mask.shape == (60, 80)
        assert result.foreground_mask[12, 40] == 0
        np.testing.assert_array_equal(result.cropped_template, upper_template)

    def test_large_template_is_cropped_by_gravity(self, text_image, template_factory):
        template = template_factory(100, 120, (100, 80, 20, 20))

        result = compute_watermark_mask(text_image, template, "south-east", 128, False)

        np.testing.assert_array_equal(result.final_mask, template[40:100, 40:120])
        assert result.final_mask[59, 79] == 255
        assert result.final_mask[0, 0] == 0

    def test_small_template_is_aligned_to_anchor(self, text_image):
        template = np.full((30, 40), 255, dtype=np.uint8)

        result = compute_watermark_mask(text_image, template, "south-east", 128, False)

        assert result.clamped
        assert result.final_mask.shape == (60, 80)
        assert result.final_mask[59, 79] == 255
        assert result.final_mask[0, 0] == 0
        assert cv2.countNonZero(result.final_mask) == 30 * 40

    def test_bgr_template(self, text_image, upper_template):
        bgr = cv2.cvtColor(upper_template, cv2.COLOR_GRAY2BGR)

        result = compute_watermark_mask(text_image, bgr, "north-west", 128, False)

        assert result.final_mask.ndim == 2
        np.testing.assert_array_equal(result.final_mask, upper_template)

    def test_unknown_gravity(self, text_image, upper_template):
        with pytest.raises(InvalidConfigurationError):
            compute_watermark_mask(text_image, upper_template, "up", 128, False)


class TestWatermarkMaskProcessor:
    """Test the processor wrapper and its debug images."""

    def test_process(self, text_image, upper_template):
        processor = WatermarkMaskProcessor()

        result = processor.process(text_image, template=upper_template,
                                   gravity="north-west", threshold=128)

        np.testing.assert_array_equal(result.final_mask, upper_template)
        assert processor.get_debug_images() == {}

    def test_debug_images_saved(self, text_image, upper_template, temp_dir):
        processor = WatermarkMaskProcessor(Config(save_debug_images=True))

        processor.process(text_image, template=upper_template, gravity="north-west",
                          threshold=128, exclude_foreground=True)
        processor.save_debug_images_to_dir(temp_dir, prefix="template_00")

        assert set(processor.get_debug_images()) == {
            "cropped_template", "binarized", "foreground", "mask"
        }
        assert (temp_dir / "template_00_mask.png").exists()
        assert (temp_dir / "template_00_foreground.png").exists()


def test_write_debug_images_into_file_path(temp_dir, upper_template):
    blocker = temp_dir / "debug"
    blocker.write_text("a file, not a directory")

    with pytest.raises(ImageSaveError):
        write_debug_images({"mask": upper_template}, blocker / "scan")


def test_write_debug_images_without_images(temp_dir):
    write_debug_images({}, temp_dir / "unused")

    assert not (temp_dir / "unused").exists()
