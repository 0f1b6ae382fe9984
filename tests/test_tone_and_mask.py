"""Tests for sepia toning and background removal."""

import numpy as np
import pytest

from pixeledit.core import InvalidParameter
from pixeledit.processing.mask import corner_average, remove_background
from pixeledit.processing.tone import sepia

from conftest import make_buffer, solid


class TestSepia:

    def test_neutral_gray(self):
        out = sepia(solid(1, 1, (128, 128, 128, 255)))
        assert out.get(0, 0) == (173, 154, 120, 255)

    def test_colored_pixel_keeps_alpha(self):
        # 0.393*10 + 0.769*20 + 0.189*30 = 24.98, etc.
        out = sepia(solid(1, 1, (10, 20, 30, 77)))
        assert out.get(0, 0) == (25, 22, 17, 77)

    def test_white_clamps(self):
        out = sepia(solid(1, 1, (255, 255, 255, 255)))
        assert out.get(0, 0) == (255, 255, 239, 255)

    def test_black_stays_black(self):
        assert sepia(solid(2, 2, (0, 0, 0, 0))) == solid(2, 2, (0, 0, 0, 0))

    def test_same_dimensions_new_buffer(self, gradient):
        before = gradient.copy()
        out = sepia(gradient)
        assert out.size == gradient.size
        assert np.array_equal(out.alpha, gradient.alpha)
        assert gradient == before


def framed(center, corner=(100, 100, 100, 255), edge=(0, 0, 0, 255)):
    """3x3 buffer: given corners, given center, other pixels set to edge."""
    return make_buffer([
        [corner, edge, corner],
        [edge, center, edge],
        [corner, edge, corner],
    ])


class TestRemoveBackground:

    def test_uniform_buffer_fully_transparent(self):
        out = remove_background(solid(5, 4, (40, 80, 120, 255)), threshold=1)
        assert np.all(out.alpha == 0)

    def test_masked_pixels_are_transparent_black(self):
        out = remove_background(solid(2, 2, (40, 80, 120, 255)))
        assert out.get(1, 1) == (0, 0, 0, 0)

    def test_difference_equal_to_threshold_is_kept(self):
        out = remove_background(framed((130, 100, 100, 255)), threshold=30)
        assert out.get(1, 1) == (130, 100, 100, 255)

    def test_difference_below_threshold_is_masked(self):
        out = remove_background(framed((129, 71, 100, 255)), threshold=30)
        assert out.get(1, 1) == (0, 0, 0, 0)

    def test_channels_checked_independently(self):
        # each channel alone is within 30, but one of them is not
        out = remove_background(framed((110, 110, 140, 255)), threshold=30)
        assert out.get(1, 1) == (110, 110, 140, 255)

    def test_kept_pixels_copied_with_their_alpha(self):
        out = remove_background(framed((0, 0, 0, 255), edge=(200, 10, 10, 33)))
        assert out.get(1, 0) == (200, 10, 10, 33)

    def test_corner_alpha_ignored(self):
        buf = framed((100, 100, 100, 255), corner=(100, 100, 100, 0))
        assert np.allclose(corner_average(buf), (100, 100, 100))
        assert remove_background(buf).get(1, 1) == (0, 0, 0, 0)

    def test_fractional_corner_average(self):
        buf = make_buffer([
            [(0, 0, 0, 255), (0, 0, 0, 255)],
            [(0, 0, 0, 255), (1, 0, 0, 255)],
        ])
        assert np.allclose(corner_average(buf), (0.25, 0, 0))

    def test_zero_threshold_masks_nothing(self, gradient):
        assert remove_background(gradient, threshold=0) == gradient

    @pytest.mark.parametrize("threshold", [-1, 256, "30"])
    def test_rejects_bad_threshold(self, gradient, threshold):
        with pytest.raises(InvalidParameter):
            remove_background(gradient, threshold=threshold)

    def test_single_pixel_buffer(self):
        out = remove_background(solid(1, 1, (9, 9, 9, 255)))
        assert out.get(0, 0) == (0, 0, 0, 0)
