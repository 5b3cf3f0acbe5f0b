"""Tests for mask aggregation."""

import itertools

import cv2
import numpy as np
import pytest

from watermark_removal.exceptions import InvalidImageError
from watermark_removal.processors import MaskAggregator, aggregate_masks, empty_mask


@pytest.fixture
def disjoint_masks(template_factory):
    return [
        template_factory(40, 50, (0, 0, 10, 10)),
        template_factory(40, 50, (30, 20, 20, 20)),
    ]


def test_no_masks_gives_empty_mask():
    mask = aggregate_masks((40, 50, 3), [])

    assert mask.shape == (40, 50)
    assert mask.dtype == np.uint8
    assert cv2.countNonZero(mask) == 0


def test_union_of_disjoint_masks(disjoint_masks):
    mask = aggregate_masks((40, 50), disjoint_masks)

    assert cv2.countNonZero(mask) == 10 * 10 + 20 * 20
    assert mask[5, 5] == 255
    assert mask[30, 40] == 255
    assert mask[15, 25] == 0


def test_order_does_not_matter(disjoint_masks):
    forward = aggregate_masks((40, 50), disjoint_masks)
    backward = aggregate_masks((40, 50), list(reversed(disjoint_masks)))

    np.testing.assert_array_equal(forward, backward)


def test_overlapping_masks_in_any_order(template_factory):
    masks = [
        template_factory(40, 50, (0, 0, 30, 20)),
        template_factory(40, 50, (20, 10, 20, 20)),
        template_factory(40, 50, (10, 15, 40, 10)),
    ]
    expected = aggregate_masks((40, 50), masks)

    for order in itertools.permutations(masks):
        np.testing.assert_array_equal(aggregate_masks((40, 50), order), expected)

    union = np.zeros((40, 50), dtype=bool)
    for mask in masks:
        union |= mask > 0
    np.testing.assert_array_equal(expected > 0, union)


def test_adding_a_mask_twice(disjoint_masks):
    once = aggregate_masks((40, 50), disjoint_masks[:1])
    twice = aggregate_masks((40, 50), disjoint_masks[:1] * 2)

    np.testing.assert_array_equal(once, twice)


def test_geometry_mismatch():
    aggregator = MaskAggregator((40, 50))

    with pytest.raises(InvalidImageError):
        aggregator.add(np.zeros((40, 51), dtype=np.uint8))


def test_bgr_mask_is_reduced(disjoint_masks):
    aggregator = MaskAggregator((40, 50))

    aggregator.add(cv2.cvtColor(disjoint_masks[0], cv2.COLOR_GRAY2BGR))

    assert aggregator.count == 1
    np.testing.assert_array_equal(aggregator.mask, disjoint_masks[0])


def test_empty_mask_uses_height_and_width():
    assert empty_mask((7, 9, 3)).shape == (7, 9)
