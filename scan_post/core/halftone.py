"""Rotated-grid halftone dots rendered into an alpha channel."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from scan_post.core.processor import HalftoneSettings

# Fixed lattice orientation
ANGLE = np.float32(np.pi / 4)


def _rotate(xs: np.ndarray, ys: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Rotate pixel positions by ANGLE about the origin."""
    cos, sin = np.cos(ANGLE), np.sin(ANGLE)
    return cos * xs - sin * ys, sin * xs + cos * ys


def dot_coverage(luma: np.ndarray, settings: HalftoneSettings) -> np.ndarray:
    """Per-pixel dot coverage in [0.0, 1.0] as a float32 array.

    Each pixel is rotated into the halftone lattice, folded into its cell
    and its distance to the cell center compared against a dot radius
    that grows as the pixel gets darker. Dots of neighbouring cells are
    not considered, so the result is only exact for radii up to 0.5.

    A stride of 0 (or any parameter producing NaN) gives no coverage; a
    negative stride mirrors the lattice.
    """
    h, w = luma.shape
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
    stride = np.float32(settings.stride)

    radius = np.float32(settings.radius) + (
        np.float32(1.0) - luma.astype(np.float32) / np.float32(255.0)
    )
    radius_sq = radius * radius

    pos_x, pos_y = _rotate(xs, ys)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        delta_x = pos_x - np.floor(pos_x / stride) * stride
        delta_y = pos_y - np.floor(pos_y / stride) * stride
        delta_x = delta_x / stride * np.float32(2.0) - np.float32(1.0)
        delta_y = delta_y / stride * np.float32(2.0) - np.float32(1.0)
        dist_sq = delta_x * delta_x + delta_y * delta_y
        coverage = np.clip(radius_sq - dist_sq, 0.0, 1.0)

    return np.nan_to_num(coverage, nan=0.0).astype(np.float32)


def halftone(
    luma: np.ndarray,
    settings: HalftoneSettings,
    alpha: np.ndarray | None = None,
) -> np.ndarray:
    """Render a 2D uint8 luma array as a (H, W, 2) luma+alpha array.

    Args:
        luma: 2D uint8 array of source gray values.
        settings: halftone parameters.
        alpha: optional 2D uint8 source alpha; pixels with alpha 0 stay
               transparent whatever their luma.

    Returns:
        uint8 array where channel 0 is `settings.base` everywhere and
        channel 1 holds the dot alpha. Pixels brighter than the threshold
        are fully transparent.
    """
    if luma.ndim != 2:
        raise ValueError(f"Expected a 2D luma array, got shape {luma.shape}")
    if alpha is not None and alpha.shape != luma.shape:
        raise ValueError(
            f"Alpha shape {alpha.shape} does not match luma shape {luma.shape}"
        )

    dark = luma <= settings.threshold
    if alpha is not None:
        dark &= alpha != 0

    coverage = dot_coverage(luma, settings)
    # Truncating conversion, coverage is already within [0, 1]
    dot_alpha = (coverage * np.float32(255.0)).astype(np.uint8)

    out = np.empty(luma.shape + (2,), dtype=np.uint8)
    out[..., 0] = settings.base
    out[..., 1] = np.where(dark, dot_alpha, 0)
    return out
