"""Sepia tone mapping."""

import numpy as np

from ..core import PixelBuffer
from .rounding import to_channel

# Rows produce r', g', b' from (r, g, b)
SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ],
    dtype=np.float64,
)


def sepia(source: PixelBuffer) -> PixelBuffer:
    """Apply the sepia color matrix to every pixel; alpha is kept as is."""
    rgb = source.rgb.astype(np.float64)
    toned = np.einsum("yxc,kc->yxk", rgb, SEPIA_MATRIX)

    pixels = np.empty_like(source.pixels)
    pixels[:, :, :3] = to_channel(toned)
    pixels[:, :, 3] = source.alpha
    return PixelBuffer(pixels)
