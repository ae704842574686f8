"""Tests for the rotated-grid halftone."""

import numpy as np
import pytest

from scan_post.core.halftone import dot_coverage, halftone
from scan_post.core.processor import HalftoneSettings


def _gray(value: int, width: int = 24, height: int = 18) -> np.ndarray:
    return np.full((height, width), value, dtype=np.uint8)


class TestDotCoverage:
    def test_range(self):
        luma = np.random.randint(0, 256, size=(30, 30), dtype=np.uint8)
        coverage = dot_coverage(luma, HalftoneSettings())
        assert coverage.dtype == np.float32
        assert coverage.min() >= 0.0
        assert coverage.max() <= 1.0

    def test_origin_is_cell_corner(self):
        """(0, 0) sits on a cell corner: dist_sq = 2 > 1.4²."""
        coverage = dot_coverage(_gray(0, 1, 1), HalftoneSettings(stride=6.0, radius=0.4))
        assert coverage[0, 0] == 0.0

    def test_cell_center_is_covered(self):
        # (4, 0) rotates to about (2.83, 2.83), near the center of a 6px cell
        coverage = dot_coverage(_gray(0, 5, 1), HalftoneSettings(stride=6.0, radius=0.4))
        assert coverage[0, 4] == 1.0

    def test_darker_means_larger_dots(self):
        settings = HalftoneSettings()
        dark = dot_coverage(_gray(10), settings)
        light = dot_coverage(_gray(140), settings)
        assert np.all(dark >= light)


class TestHalftone:
    def test_output_shape(self):
        luma = np.random.randint(0, 256, size=(15, 20), dtype=np.uint8)
        result = halftone(luma, HalftoneSettings())
        assert result.shape == (15, 20, 2)
        assert result.dtype == np.uint8

    def test_luma_is_base_everywhere(self):
        luma = np.random.randint(0, 256, size=(15, 20), dtype=np.uint8)
        result = halftone(luma, HalftoneSettings(base=40))
        assert np.all(result[..., 0] == 40)

    def test_bright_pixels_transparent(self):
        result = halftone(_gray(200), HalftoneSettings(threshold=150, base=40))
        assert np.all(result[..., 0] == 40)
        assert np.all(result[..., 1] == 0)

    def test_origin_pixel_scenario(self):
        result = halftone(_gray(0, 1, 1), HalftoneSettings(threshold=150, base=40))
        assert tuple(result[0, 0]) == (40, 0)

    def test_dark_cell_center_opaque(self):
        result = halftone(_gray(0, 5, 1), HalftoneSettings())
        assert result[0, 4, 1] == 255

    def test_partial_coverage(self):
        # radius 0.4 + (1 - 150/255) ≈ 0.81, dist_sq ≈ 0.0065 near the center
        result = halftone(_gray(150, 5, 1), HalftoneSettings(threshold=150))
        assert 0 < result[0, 4, 1] < 255

    def test_alpha_truncated(self):
        luma = np.random.randint(0, 151, size=(12, 12), dtype=np.uint8)
        settings = HalftoneSettings()
        result = halftone(luma, settings)
        expected = (dot_coverage(luma, settings) * np.float32(255.0)).astype(np.uint8)
        assert np.array_equal(result[..., 1], expected)

    def test_threshold_inclusive(self):
        at = halftone(_gray(150), HalftoneSettings(threshold=150))
        above = halftone(_gray(151), HalftoneSettings(threshold=150))
        assert at[..., 1].max() > 0
        assert above[..., 1].max() == 0

    def test_pattern_repeats_along_diagonal(self):
        """The lattice is rotated 45°, so it is not aligned with the axes."""
        result = halftone(_gray(0, 60, 60), HalftoneSettings(stride=6.0))
        alpha = result[..., 1]
        assert 0 < np.count_nonzero(alpha) < alpha.size
        assert not np.array_equal(alpha[:, :6], alpha[:, 6:12])

    def test_source_alpha_zero_stays_transparent(self):
        luma = _gray(0, 5, 1)
        alpha = np.full_like(luma, 255)
        alpha[0, 4] = 0
        result = halftone(luma, HalftoneSettings(), alpha=alpha)
        assert result[0, 4, 1] == 0
        assert result[0, 4, 0] == 40

    def test_source_alpha_shape_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            halftone(_gray(0, 4, 4), HalftoneSettings(), alpha=np.zeros((2, 2), dtype=np.uint8))

    def test_rejects_multichannel(self):
        with pytest.raises(ValueError, match="2D"):
            halftone(np.zeros((4, 4, 2), dtype=np.uint8), HalftoneSettings())

    def test_zero_stride_transparent(self):
        result = halftone(_gray(0), HalftoneSettings(stride=0.0))
        assert np.all(result[..., 1] == 0)
        assert np.all(result[..., 0] == 40)

    def test_negative_stride_mirrors_lattice(self):
        result = halftone(_gray(0, 60, 60), HalftoneSettings(stride=-6.0))
        alpha = result[..., 1]
        assert 0 < np.count_nonzero(alpha) < alpha.size
