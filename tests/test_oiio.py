"""Tests for the OpenImageIO codec and filter library."""

import numpy as np
import pytest

oiio = pytest.importorskip("OpenImageIO")

from pixeledit.core import DecodeFailure, FilterFailure, ImageFormat, UnsupportedFormat
from pixeledit.oiio import OiioAdapter, OiioCodec, OiioFilterLibrary
from pixeledit.processing import FilterKind
from pixeledit.services import ImageEditor

from conftest import make_buffer, solid


@pytest.fixture
def library():
    return OiioFilterLibrary(scatter_seed=3)


def center(buffer):
    return buffer.get(buffer.width // 2, buffer.height // 2)


class TestCodec:

    def test_png_round_trip_keeps_alpha(self, tmp_path):
        buf = make_buffer([
            [(10, 200, 30, 255), (0, 0, 0, 0)],
            [(255, 255, 255, 255), (90, 80, 70, 255)],
        ])
        path = tmp_path / "out.png"
        OiioAdapter.write_image(buf, ImageFormat.PNG, path)

        decoded, image_format = OiioAdapter.read_image(path)
        assert image_format is ImageFormat.PNG
        assert decoded == buf

    def test_jpeg_drops_alpha(self, tmp_path, gradient):
        path = tmp_path / "out.jpg"
        OiioCodec().encode(gradient, ImageFormat.JPEG, path)
        decoded, image_format = OiioCodec().decode(path)
        assert image_format is ImageFormat.JPEG
        assert decoded.size == gradient.size
        assert np.all(decoded.alpha == 255)

    def test_format_decides_encoder(self, tmp_path):
        path = tmp_path / "actually_png.jpg"
        OiioAdapter.write_image(solid(2, 2, (1, 2, 3, 0)), ImageFormat.PNG, path)
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeFailure):
            OiioAdapter.read_image(tmp_path / "missing.png")

    def test_unsupported_extension(self, tmp_path):
        with pytest.raises(UnsupportedFormat):
            OiioAdapter.read_image(tmp_path / "image.exr")

    def test_imagebuf_conversion(self, gradient):
        buf = OiioAdapter.to_imagebuf(gradient.pixels)
        assert buf.spec().nchannels == 4
        assert np.array_equal(OiioAdapter.from_imagebuf(buf), gradient.pixels)


class TestFilterLibrary:

    def test_negate_keeps_alpha(self, library):
        out = library.apply_filter(solid(2, 2, (10, 20, 30, 128)), FilterKind.NEGATE, {})
        assert out.get(0, 0) == (245, 235, 225, 128)

    def test_grayscale(self, library):
        out = library.apply_filter(solid(1, 1, (255, 0, 0, 255)), FilterKind.GRAYSCALE, {})
        assert out.get(0, 0) == (76, 76, 76, 255)

    def test_brightness_clamps(self, library):
        out = library.apply_filter(solid(1, 1, (100, 250, 10, 255)), FilterKind.BRIGHTNESS, {"level": 20})
        assert out.get(0, 0) == (120, 255, 30, 255)
        out = library.apply_filter(solid(1, 1, (100, 250, 10, 255)), FilterKind.BRIGHTNESS, {"level": -20})
        assert out.get(0, 0) == (80, 230, 0, 255)

    def test_contrast_zero_level_is_identity(self, library, gradient):
        assert library.apply_filter(gradient, FilterKind.CONTRAST, {"level": 0}) == gradient

    def test_contrast_flattens_toward_gray(self, library):
        # level 100 -> factor 0
        out = library.apply_filter(solid(1, 1, (0, 255, 40, 255)), FilterKind.CONTRAST, {"level": 100})
        assert out.get(0, 0) == (128, 128, 128, 255)

    def test_colorize_alpha_adds_transparency(self, library):
        params = {"red": 50, "green": 0, "blue": 200, "alpha": 20}
        out = library.apply_filter(solid(1, 1, (100, 100, 100, 200)), FilterKind.COLORIZE, params)
        assert out.get(0, 0) == (150, 100, 255, 180)

    @pytest.mark.parametrize("kind,params,expected", [
        (FilterKind.GAUSSIAN_BLUR, {}, 100),
        (FilterKind.MEAN_REMOVAL, {}, 100),
        (FilterKind.SMOOTH, {"weight": -6}, 100),
        (FilterKind.SELECTIVE_BLUR, {}, 100),
        (FilterKind.EDGE_DETECT, {}, 127),
        (FilterKind.EMBOSS, {}, 127),
    ])
    def test_kernels_on_uniform_interior(self, library, kind, params, expected):
        out = library.apply_filter(solid(3, 3, (100, 100, 100, 255)), kind, params)
        assert center(out) == (expected, expected, expected, 255)

    def test_pixelate_blocks(self, library):
        buf = make_buffer([[(0, 0, 0, 255), (100, 100, 100, 255), (200, 200, 200, 255), (50, 50, 50, 255)]])
        out = library.apply_filter(buf, FilterKind.PIXELATE, {"block_size": 2, "advanced": False})
        assert out.size == buf.size
        reds = [out.get(x, 0)[0] for x in range(4)]
        assert reds[0] == reds[1]
        assert reds[2] == reds[3]

    def test_pixelate_advanced_averages(self, library):
        buf = make_buffer([[(0, 0, 0, 255), (100, 100, 100, 255), (200, 200, 200, 255), (50, 50, 50, 255)]])
        out = library.apply_filter(buf, FilterKind.PIXELATE, {"block_size": 2, "advanced": True})
        reds = [out.get(x, 0)[0] for x in range(4)]
        assert reds[0] == reds[1] and 0 < reds[0] < 100
        assert reds[2] == reds[3] and 50 < reds[2] < 200

    def test_scatter_moves_existing_pixels(self, library, gradient):
        out = library.apply_filter(gradient, FilterKind.SCATTER, {"subtraction": 1, "addition": 2})
        assert out.size == gradient.size
        source = {gradient.get(x, y) for x in range(4) for y in range(3)}
        assert all(out.get(x, y) in source for x in range(4) for y in range(3))

    def test_scatter_seeded(self, gradient):
        params = {"subtraction": 1, "addition": 2}
        first = OiioFilterLibrary(scatter_seed=9).apply_filter(gradient, FilterKind.SCATTER, params)
        second = OiioFilterLibrary(scatter_seed=9).apply_filter(gradient, FilterKind.SCATTER, params)
        assert first == second

    def test_local_kind_rejected(self, library, gradient):
        with pytest.raises(FilterFailure):
            library.apply_filter(gradient, FilterKind.SEPIA, {})


def test_editor_end_to_end(tmp_path, settings):
    source = tmp_path / "in.png"
    OiioAdapter.write_image(solid(8, 6, (40, 80, 120, 255)), ImageFormat.PNG, source)

    result = (
        ImageEditor(settings=settings)
        .load(source)
        .resize(4, 3)
        .grayscale()
        .save(tmp_path / "out.png")
    )
    assert result.ok, result.error
    decoded, _ = OiioAdapter.read_image(tmp_path / "out.png")
    assert decoded.size == (4, 3)
    assert decoded.get(0, 0)[0] == decoded.get(0, 0)[1] == decoded.get(0, 0)[2]
