"""Tests for threshold selection, binarization and grayscale reduction."""

import numpy as np
import pytest

from watermark_removal.processors import binarize_with_threshold, remove_colors, select_threshold


class TestSelectThreshold:
    """Test the adaptive threshold formula."""

    def test_monochrome_uses_spread(self):
        assert select_threshold(150.0, 20.0, has_color=False) == pytest.approx(20.0)

    def test_color_recenters_between_mean_and_spread(self):
        # 150 - (150 - 20) / 2
        assert select_threshold(150.0, 20.0, has_color=True) == pytest.approx(85.0)

    def test_color_midpoint(self):
        assert select_threshold(100.0, 40.0, has_color=True) == pytest.approx(70.0)

    def test_monochrome_is_exactly_spread(self):
        assert select_threshold(100.0, 40.0, has_color=False) == 40.0

    def test_flat_image(self):
        assert select_threshold(150.0, 0.0, has_color=False) == 0.0


class TestBinarize:
    """Test fixed threshold binarization."""

    def test_strictly_above_threshold_is_white(self):
        image = np.array([[10, 100, 200]], dtype=np.uint8)

        binary = binarize_with_threshold(image, 100)

        np.testing.assert_array_equal(binary, [[0, 0, 255]])

    def test_keeps_channel_count(self, document_image):
        binary = binarize_with_threshold(document_image, 128)

        assert binary.shape == document_image.shape
        assert set(np.unique(binary)) <= {0, 255}

    def test_fractional_threshold(self):
        image = np.array([[85, 86]], dtype=np.uint8)
        np.testing.assert_array_equal(binarize_with_threshold(image, 85.5), [[0, 255]])


class TestRemoveColors:
    """Test grayscale reduction."""

    def test_output_has_equal_channels(self, color_image):
        gray = remove_colors(color_image)

        assert gray.shape == color_image.shape
        assert np.array_equal(gray[:, :, 0], gray[:, :, 1])
        assert np.array_equal(gray[:, :, 1], gray[:, :, 2])

    def test_idempotent(self, color_image):
        once = remove_colors(color_image)
        np.testing.assert_array_equal(remove_colors(once), once)

    def test_gray_input_unchanged(self, gray_scan):
        np.testing.assert_array_equal(remove_colors(gray_scan), gray_scan)

    def test_single_channel_input(self):
        image = np.full((5, 5), 77, dtype=np.uint8)
        result = remove_colors(image)

        assert result.ndim == 2
        np.testing.assert_array_equal(result, image)
