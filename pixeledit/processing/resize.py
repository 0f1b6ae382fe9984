"""Box-filter resampling of pixel buffers."""

import logging
from typing import Optional, Tuple

import numpy as np

from ..core import PixelBuffer, ValidationEngine, raise_for_issues
from .rounding import to_channel

logger = logging.getLogger(__name__)


def resize(
    source: PixelBuffer,
    target_width: int,
    target_height: int,
    source_size: Optional[Tuple[int, int]] = None,
) -> PixelBuffer:
    """
    Resample a buffer to new dimensions.

    Each destination pixel averages the source samples under its footprint,
    weighted by covered area, so this behaves as a box filter both when
    shrinking and when enlarging. All four channels are averaged
    independently (straight alpha, no premultiplication).

    Args:
        source: Buffer to read from (left untouched)
        target_width: Output width, >= 1
        target_height: Output height, >= 1
        source_size: Nominal (width, height) the destination grid maps onto.
            Defaults to the buffer's own size. Coverage that falls outside
            the real buffer is ignored.

    Returns:
        New buffer of size target_width x target_height
    """
    raise_for_issues(ValidationEngine.validate_dimensions(target_width, target_height))

    ref_width, ref_height = source_size if source_size is not None else source.size
    raise_for_issues(ValidationEngine.validate_dimensions(ref_width, ref_height))

    if (ref_width, ref_height) != source.size:
        logger.debug(
            "Resampling %dx%d buffer against nominal size %dx%d",
            source.width, source.height, ref_width, ref_height,
        )

    weights_y = _coverage_weights(source.height, target_height, ref_height)
    weights_x = _coverage_weights(source.width, target_width, ref_width)

    samples = source.pixels.astype(np.float64)
    rows = np.einsum("ys,sxc->yxc", weights_y, samples)
    result = np.einsum("yxc,tx->ytc", rows, weights_x)

    return PixelBuffer(to_channel(result))


def _coverage_weights(src_len: int, dst_len: int, ref_len: int) -> np.ndarray:
    """
    Matrix of normalized overlap weights, shape (dst_len, src_len).

    Destination cell d spans [d*ref/dst, (d+1)*ref/dst) in source space; its
    weight for source cell s is the length of the overlap with [s, s+1),
    divided by the total overlap of the row.
    """
    starts = np.arange(dst_len, dtype=np.float64) * ref_len / dst_len
    ends = np.arange(1, dst_len + 1, dtype=np.float64) * ref_len / dst_len
    cells = np.arange(src_len, dtype=np.float64)

    low = np.maximum(starts[:, np.newaxis], cells[np.newaxis, :])
    high = np.minimum(ends[:, np.newaxis], cells[np.newaxis, :] + 1.0)
    weights = np.clip(high - low, 0.0, None)

    totals = weights.sum(axis=1, keepdims=True)
    return np.divide(weights, totals, out=np.zeros_like(weights), where=totals > 0)
