"""Tests for box-filter resampling."""

import numpy as np
import pytest

from pixeledit.core import InvalidDimensions, PixelBuffer
from pixeledit.processing.resize import resize

from conftest import make_buffer, solid


def row(*values, alpha=255):
    return make_buffer([[(v, v, v, alpha) for v in values]])


@pytest.mark.parametrize("width,height", [(1, 1), (7, 3), (2, 9), (40, 25)])
def test_output_has_requested_size(gradient, width, height):
    assert resize(gradient, width, height).size == (width, height)


def test_same_size_is_identity(gradient):
    assert resize(gradient, gradient.width, gradient.height) == gradient


def test_downsample_averages_block():
    buf = make_buffer([
        [(0, 0, 0, 255), (255, 255, 255, 255)],
        [(100, 100, 100, 255), (50, 50, 50, 255)],
    ])
    # (0 + 255 + 100 + 50) / 4 = 101.25
    assert resize(buf, 1, 1).get(0, 0) == (101, 101, 101, 255)


def test_halving_pairs_neighbours():
    out = resize(row(10, 20, 30, 40), 2, 1)
    assert out.get(0, 0)[0] == 15
    assert out.get(1, 0)[0] == 35


def test_fractional_coverage_is_area_weighted():
    # dst 0 covers [0, 1.5): 1 * 0 + 0.5 * 90 over 1.5 -> 30
    # dst 1 covers [1.5, 3): 0.5 * 90 + 1 * 180 over 1.5 -> 150
    out = resize(row(0, 90, 180), 2, 1)
    assert out.get(0, 0)[0] == 30
    assert out.get(1, 0)[0] == 150


def test_upsample_uniform_stays_uniform():
    out = resize(solid(1, 1, (12, 34, 56, 78)), 3, 2)
    assert np.all(out.pixels == (12, 34, 56, 78))


def test_alpha_averaged_without_premultiplying():
    buf = make_buffer([[(255, 0, 0, 0), (0, 0, 255, 255)]])
    # 127.5 rounds away from zero
    assert resize(buf, 1, 1).get(0, 0) == (128, 0, 128, 128)


def test_aspect_ratio_not_preserved(gradient):
    assert resize(gradient, 1, 10).size == (1, 10)


@pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, -1)])
def test_rejects_empty_target(gradient, width, height):
    with pytest.raises(InvalidDimensions):
        resize(gradient, width, height)


def test_source_untouched(gradient):
    before = gradient.copy()
    resize(gradient, 2, 2)
    assert gradient == before


class TestNominalSourceSize:

    def test_larger_nominal_size_leaves_uncovered_pixels_transparent(self):
        # 2 pixels mapped as if the source were 4 wide
        buf = make_buffer([[(255, 0, 0, 255), (0, 0, 255, 255)]])
        out = resize(buf, 4, 1, source_size=(4, 1))
        assert out.get(0, 0) == (255, 0, 0, 255)
        assert out.get(1, 0) == (0, 0, 255, 255)
        assert out.get(2, 0) == (0, 0, 0, 0)
        assert out.get(3, 0) == (0, 0, 0, 0)

    def test_partial_coverage_is_renormalized(self):
        buf = row(100, 200)
        # dst 0 covers [0, 1.5) -> (100 + 0.5 * 200) / 1.5
        out = resize(buf, 2, 1, source_size=(3, 1))
        assert out.get(0, 0)[0] == 133
        # dst 1 covers [1.5, 3) but only [1.5, 2) exists
        assert out.get(1, 0)[0] == 200

    def test_smaller_nominal_size_crops(self):
        buf = row(10, 20, 30, 40)
        out = resize(buf, 2, 1, source_size=(2, 1))
        assert [out.get(x, 0)[0] for x in range(2)] == [10, 20]

    def test_rejects_bad_nominal_size(self, gradient):
        with pytest.raises(InvalidDimensions):
            resize(gradient, 2, 2, source_size=(0, 3))
