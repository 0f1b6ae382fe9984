"""
Filter library for the delegated edit operations, via OpenImageIO.

Color channels go through ImageBufAlgo as float images; alpha is split off
beforehand and re-attached afterwards so no filter touches it unless the
operation is about transparency.
"""

import logging
from typing import Any, Mapping, Optional

import numpy as np
import OpenImageIO as oiio

from ..core import FilterFailure, PixelBuffer
from ..processing.filters import FilterKind
from .adapter import OiioAdapter

logger = logging.getLogger(__name__)

ImageBufAlgo = oiio.ImageBufAlgo

# (kernel, divisor, offset in 0-255 units)
EDGE_DETECT_KERNEL = ((-1, 0, -1), (0, 4, 0), (-1, 0, -1))
EMBOSS_KERNEL = ((1.5, 0, 0), (0, 0, 0), (0, 0, -1.5))
GAUSSIAN_KERNEL = ((1, 2, 1), (2, 4, 2), (1, 2, 1))
MEAN_REMOVAL_KERNEL = ((-1, -1, -1), (-1, 9, -1), (-1, -1, -1))

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


class OiioFilterLibrary:
    """Applies delegated filters to PixelBuffers."""

    def __init__(self, scatter_seed: Optional[int] = None):
        self.rng = np.random.default_rng(scatter_seed)
        self._handlers = {
            FilterKind.NEGATE: self._apply_negate,
            FilterKind.GRAYSCALE: self._apply_grayscale,
            FilterKind.BRIGHTNESS: self._apply_brightness,
            FilterKind.CONTRAST: self._apply_contrast,
            FilterKind.EDGE_DETECT: self._apply_edge_detect,
            FilterKind.EMBOSS: self._apply_emboss,
            FilterKind.GAUSSIAN_BLUR: self._apply_gaussian_blur,
            FilterKind.SELECTIVE_BLUR: self._apply_selective_blur,
            FilterKind.MEAN_REMOVAL: self._apply_mean_removal,
            FilterKind.SMOOTH: self._apply_smooth,
            FilterKind.PIXELATE: self._apply_pixelate,
        }

    def apply_filter(self, buffer: PixelBuffer, kind: FilterKind, params: Mapping[str, Any]) -> PixelBuffer:
        """
        Apply one delegated filter and return a new buffer.

        Raises:
            FilterFailure: the kind is not a delegated filter, or OIIO failed
        """
        if kind == FilterKind.SCATTER:
            return self._apply_scatter(buffer, params)
        if kind == FilterKind.COLORIZE:
            return self._apply_colorize(buffer, params)

        handler = self._handlers.get(kind)
        if handler is None:
            raise FilterFailure(f"{kind.value} is not handled by the filter library")

        src = OiioAdapter.to_imagebuf(buffer.rgb)
        result = handler(src, params)
        _check(result, kind.value)

        pixels = np.empty_like(buffer.pixels)
        pixels[:, :, :3] = OiioAdapter.from_imagebuf(result)
        pixels[:, :, 3] = buffer.alpha
        return PixelBuffer(pixels)

    def _apply_negate(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return ImageBufAlgo.invert(src)

    def _apply_grayscale(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        luma = ImageBufAlgo.channel_sum(src, LUMA_WEIGHTS)
        _check(luma, "channel_sum")
        return ImageBufAlgo.channels(luma, (0, 0, 0))

    def _apply_brightness(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        shift = params["level"] / 255.0
        return ImageBufAlgo.add(src, (shift, shift, shift))

    def _apply_contrast(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        # factor < 1 flattens toward mid gray, > 1 stretches away from it
        factor = ((100.0 - params["level"]) / 100.0) ** 2
        offset = 0.5 - 0.5 * factor
        return ImageBufAlgo.mad(src, (factor,) * 3, (offset,) * 3)

    def _apply_colorize(self, buffer: PixelBuffer, params) -> PixelBuffer:
        """Add the color to RGB; alpha adds transparency."""
        src = OiioAdapter.to_imagebuf(buffer.rgb)
        tint = tuple(params[name] / 255.0 for name in ("red", "green", "blue"))
        result = ImageBufAlgo.add(src, tint)
        _check(result, "color_overlay")

        pixels = np.empty_like(buffer.pixels)
        pixels[:, :, :3] = OiioAdapter.from_imagebuf(result)
        pixels[:, :, 3] = np.clip(buffer.alpha.astype(np.int32) - int(params["alpha"]), 0, 255)
        return PixelBuffer(pixels)

    def _apply_edge_detect(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return _convolve(src, EDGE_DETECT_KERNEL, 1.0, 127)

    def _apply_emboss(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return _convolve(src, EMBOSS_KERNEL, 1.0, 127)

    def _apply_gaussian_blur(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return _convolve(src, GAUSSIAN_KERNEL, 16.0, 0)

    def _apply_selective_blur(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return ImageBufAlgo.median_filter(src, 3, 3)

    def _apply_mean_removal(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        return _convolve(src, MEAN_REMOVAL_KERNEL, 1.0, 0)

    def _apply_smooth(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        weight = float(params["weight"])
        kernel = ((1, 1, 1), (1, weight, 1), (1, 1, 1))
        return _convolve(src, kernel, weight + 8.0, 0)

    def _apply_pixelate(self, src: oiio.ImageBuf, params) -> oiio.ImageBuf:
        """Shrink to one sample per block, then blow back up without interpolation."""
        spec = src.spec()
        block = int(params["block_size"])
        blocks_x = -(-spec.width // block)
        blocks_y = -(-spec.height // block)
        small_roi = oiio.ROI(0, blocks_x, 0, blocks_y, 0, 1, 0, spec.nchannels)
        full_roi = oiio.ROI(0, spec.width, 0, spec.height, 0, 1, 0, spec.nchannels)

        if params.get("advanced"):
            small = ImageBufAlgo.resize(src, "box", roi=small_roi)
        else:
            small = ImageBufAlgo.resample(src, interpolate=False, roi=small_roi)
        _check(small, "pixelate")
        return ImageBufAlgo.resample(small, interpolate=False, roi=full_roi)

    def _apply_scatter(self, buffer: PixelBuffer, params) -> PixelBuffer:
        """Move every pixel by a random offset in [-subtraction, addition]."""
        subtraction = int(params["subtraction"])
        addition = int(params["addition"])
        h, w = buffer.height, buffer.width

        dx = self.rng.integers(-subtraction, addition + 1, size=(h, w))
        dy = self.rng.integers(-subtraction, addition + 1, size=(h, w))
        ys = np.clip(np.arange(h)[:, np.newaxis] + dy, 0, h - 1)
        xs = np.clip(np.arange(w)[np.newaxis, :] + dx, 0, w - 1)
        return PixelBuffer(buffer.pixels[ys, xs])


def _kernel_buf(kernel, divisor: float) -> oiio.ImageBuf:
    """3x3 kernel image centered on the origin."""
    spec = oiio.ImageSpec(3, 3, 1, oiio.FLOAT)
    spec.x = -1
    spec.y = -1
    spec.full_x = -1
    spec.full_y = -1
    buf = oiio.ImageBuf(spec)
    weights = np.asarray(kernel, dtype=np.float32).reshape(3, 3, 1) / divisor
    buf.set_pixels(oiio.ROI(-1, 2, -1, 2, 0, 1, 0, 1), weights)
    return buf


def _convolve(src: oiio.ImageBuf, kernel, divisor: float, offset: float) -> oiio.ImageBuf:
    result = ImageBufAlgo.convolve(src, _kernel_buf(kernel, divisor), False)
    if offset:
        _check(result, "convolve")
        shift = offset / 255.0
        result = ImageBufAlgo.add(result, (shift, shift, shift))
    return result


def _check(result: Optional[oiio.ImageBuf], operation: str) -> None:
    if result is None or result.has_error:
        detail = result.geterror() if result is not None else oiio.geterror()
        raise FilterFailure(f"{operation} failed: {detail}")
