"""Rounding helpers shared by the pixel algorithms."""

import numpy as np


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def to_channel(values: np.ndarray) -> np.ndarray:
    """Round and clamp float samples into uint8 channel values."""
    return np.clip(round_half_away(values), 0, 255).astype(np.uint8)
