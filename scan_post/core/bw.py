"""Threshold-compress black/white mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from scan_post.core.processor import BwSettings


def compress_curve(settings: BwSettings) -> np.ndarray:
    """Build the 256-entry lookup table for the bw mapping.

    Values above the threshold map to white. Values at or below it are
    scaled by `compress` and lifted by `base`:

        trunc(v / threshold * compress * threshold) + base

    evaluated in single precision in that order, truncated toward zero,
    clamped to 0-255 and added to `base` with saturation at 255.

    A threshold of 0 only lets v == 0 through, and its quotient is taken
    as 0, so those pixels come out as `base`.
    """
    values = np.arange(256, dtype=np.float32)
    threshold = np.float32(settings.threshold)
    compress = np.float32(settings.compress)

    if settings.threshold == 0:
        scaled = np.zeros_like(values)
    else:
        with np.errstate(invalid="ignore", over="ignore"):
            scaled = values / threshold * compress * threshold

    # NaN (e.g. 0 * inf) saturates to 0
    scaled = np.nan_to_num(scaled, nan=0.0)
    compressed = np.clip(np.trunc(scaled), 0, 255).astype(np.int32)
    compressed = np.minimum(compressed + settings.base, 255)

    curve = np.where(values > settings.threshold, 255, compressed)
    return curve.astype(np.uint8)


def threshold_compress(luma: np.ndarray, settings: BwSettings) -> np.ndarray:
    """Apply the bw mapping to a 2D uint8 luma array.

    Returns a new array of the same shape; the input is left untouched.
    """
    if luma.ndim != 2:
        raise ValueError(f"Expected a 2D luma array, got shape {luma.shape}")
    curve = compress_curve(settings)
    return curve[luma.astype(np.uint8, copy=False)]
