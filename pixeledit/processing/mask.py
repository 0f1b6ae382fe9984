"""
Background removal by corner-sampled color keying.

The background color is estimated as the mean of the four corner pixels.
Pixels whose R, G and B are each strictly closer than the threshold to that
mean become fully transparent.
"""

import numpy as np

from ..core import PixelBuffer, ValidationEngine, raise_for_issues

DEFAULT_THRESHOLD = 30


def corner_average(source: PixelBuffer) -> np.ndarray:
    """Mean (r, g, b) of the four corner pixels as floats. Alpha is ignored."""
    w, h = source.width, source.height
    corners = source.rgb[[0, 0, h - 1, h - 1], [0, w - 1, 0, w - 1]]
    return corners.astype(np.float64).mean(axis=0)


def remove_background(source: PixelBuffer, threshold: float = DEFAULT_THRESHOLD) -> PixelBuffer:
    """
    Mask out pixels close to the corner average.

    Args:
        source: Buffer to read from
        threshold: Per-channel tolerance in [0, 255]; comparison is strict,
            so a channel exactly threshold away keeps the pixel

    Returns:
        New buffer where masked pixels are (0, 0, 0, 0) and the others are
        copied unchanged, alpha included
    """
    raise_for_issues(ValidationEngine.validate_range("Color threshold", threshold, 0, 255))

    background = corner_average(source)
    distance = np.abs(source.rgb.astype(np.float64) - background)
    masked = np.all(distance < threshold, axis=2)

    pixels = source.pixels.copy()
    pixels[masked] = 0
    return PixelBuffer(pixels)
