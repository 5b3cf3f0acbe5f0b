"""Tests for chromatic content detection."""

import numpy as np

from watermark_removal.processors import has_color


class TestHasColor:
    """Test the HSV color band check."""

    def test_gray_image_has_no_color(self, gray_scan):
        assert not has_color(gray_scan)

    def test_saturated_patch_is_color(self, color_image):
        assert has_color(color_image)

    def test_single_pixel_is_enough(self, gray_scan):
        gray_scan[5, 5] = (255, 0, 0)
        assert has_color(gray_scan)

    def test_single_channel_image(self):
        assert not has_color(np.full((10, 10), 128, dtype=np.uint8))

    def test_weak_saturation_is_not_color(self):
        # Saturation is about 23 on the 0-255 scale
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:] = (100, 100, 110)
        assert not has_color(image)

    def test_dark_pixels_are_not_color(self):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:] = (0, 0, 20)
        assert not has_color(image)

    def test_custom_saturation_bound(self):
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        image[:] = (100, 100, 110)
        assert has_color(image, min_saturation=16)

    def test_any_hue_counts(self):
        # Red sits at hue 0 in OpenCV's HSV encoding
        image = np.zeros((4, 4, 3), dtype=np.uint8)
        image[:] = (0, 0, 200)
        assert has_color(image)
