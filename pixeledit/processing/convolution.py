"""
3x3 convolution engine.

Applies a kernel to the R, G and B channels, normalized by the sum of the
kernel entries (1 when that sum is 0), plus an optional bias. Alpha is
copied from the center pixel.
"""

from typing import Sequence

import numpy as np

from ..core import BorderPolicy, PixelBuffer, ValidationEngine, raise_for_issues
from .rounding import to_channel

Kernel = Sequence[Sequence[float]]

SHARPEN = (
    (0, -1, 0),
    (-1, 5, -1),
    (0, -1, 0),
)

# Divisor 9: a 3x3 box blur
POSTERIZE = (
    (1, 1, 1),
    (1, 1, 1),
    (1, 1, 1),
)

IDENTITY = (
    (0, 0, 0),
    (0, 1, 0),
    (0, 0, 0),
)

_PAD_MODES = {
    BorderPolicy.BLACK: "constant",
    BorderPolicy.EXTEND: "edge",
}


def kernel_divisor(kernel: Kernel) -> float:
    """Sum of all kernel entries, or 1 when they cancel out."""
    divisor = float(sum(sum(row) for row in kernel))
    return divisor if divisor != 0 else 1.0


def convolve(
    source: PixelBuffer,
    kernel: Kernel,
    bias: float = 0,
    border: BorderPolicy = BorderPolicy.BLACK,
) -> PixelBuffer:
    """
    Convolve a buffer with a 3x3 kernel.

    kernel[ky + 1][kx + 1] weights the sample at (x + kx, y + ky). Results
    are rounded half away from zero and clamped to [0, 255].

    Raises:
        InvalidMatrix: kernel is not 3x3 or holds non-numeric entries
    """
    raise_for_issues(ValidationEngine.validate_kernel(kernel))

    weights = np.asarray(kernel, dtype=np.float64)
    divisor = kernel_divisor(kernel)

    rgb = source.rgb.astype(np.float64)
    padded = np.pad(rgb, ((1, 1), (1, 1), (0, 0)), mode=_PAD_MODES[border])

    h, w = source.height, source.width
    total = np.zeros_like(rgb)
    for ky in range(3):
        for kx in range(3):
            weight = weights[ky, kx]
            if weight:
                total += weight * padded[ky:ky + h, kx:kx + w]

    pixels = np.empty_like(source.pixels)
    pixels[:, :, :3] = to_channel(total / divisor + bias)
    pixels[:, :, 3] = source.alpha
    return PixelBuffer(pixels)
