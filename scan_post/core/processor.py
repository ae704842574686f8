"""Image processing pipeline.

Decode → grayscale (+ alpha for halftone) → per-pixel transform → image.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np
from PIL import Image

from scan_post.core.bw import threshold_compress
from scan_post.core.halftone import halftone


class Mode(str, Enum):
    BW = "bw"
    HALFTONE = "halftone"


def _check_u8(name: str, value: int) -> None:
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be between 0 and 255, got {value}")


@dataclass(frozen=True)
class BwSettings:
    """Parameters of the threshold-compress mapping."""

    threshold: int = 150  # pixels above are forced white
    compress: float = 0.4  # linear factor for pixels at or below threshold
    base: int = 20  # gray added to every compressed pixel

    def __post_init__(self) -> None:
        _check_u8("threshold", self.threshold)
        _check_u8("base", self.base)

    @property
    def mode(self) -> Mode:
        return Mode.BW


@dataclass(frozen=True)
class HalftoneSettings:
    """Parameters of the halftone dot pattern."""

    threshold: int = 150  # pixels above are transparent
    stride: float = 6.0  # distance between two dots, in pixels
    radius: float = 0.4  # dot radius relative to half a stride
    base: int = 40  # luma of every output pixel

    def __post_init__(self) -> None:
        _check_u8("threshold", self.threshold)
        _check_u8("base", self.base)

    @property
    def mode(self) -> Mode:
        return Mode.HALFTONE


Settings = Union[BwSettings, HalftoneSettings]


def format_number(value: float) -> str:
    """Shortest single-precision form of a float, without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return str(np.float32(value))


def output_tag(settings: Settings) -> str:
    """Extension used for the default output path."""
    if settings.mode == Mode.BW:
        return "bw.png"
    return (
        f"halftone_{format_number(settings.stride)}"
        f"_{format_number(settings.radius)}_{settings.base}.png"
    )


def describe(settings: Settings) -> list[tuple[str, str]]:
    """Ordered (label, value) pairs for progress output."""
    if settings.mode == Mode.BW:
        return [
            ("Threshold", str(settings.threshold)),
            ("Compress", format_number(settings.compress)),
            ("Base", str(settings.base)),
        ]
    return [
        ("Threshold", str(settings.threshold)),
        ("Stride", format_number(settings.stride)),
        ("Radius", format_number(settings.radius)),
        ("Base", str(settings.base)),
    ]


# sRGB (Rec. 709) luma weights, in ten-thousandths
LUMA_WEIGHTS = (2126, 7152, 722)


def _is_wide_gray(mode: str) -> bool:
    return mode == "I" or mode.startswith("I;16")


def to_luma_alpha(image: Image.Image) -> tuple[np.ndarray, np.ndarray]:
    """Decode any Pillow image into 8-bit luma and alpha arrays.

    16-bit grayscale is scaled down with rounding (v + 128) // 257 rather
    than clipped. Color is reduced with the Rec. 709 weights and truncated.
    Sources without alpha come out fully opaque.
    """
    if _is_wide_gray(image.mode):
        wide = np.clip(np.asarray(image).astype(np.int64), 0, 65535)
        luma = ((wide + 128) // 257).astype(np.uint8)
        return luma, np.full_like(luma, 255)

    if image.mode in ("L", "LA"):
        la = np.array(image.convert("LA"), dtype=np.uint8)
        return la[..., 0], la[..., 1]

    rgba = np.array(image.convert("RGBA"), dtype=np.int64)
    r, g, b = LUMA_WEIGHTS
    luma = (r * rgba[..., 0] + g * rgba[..., 1] + b * rgba[..., 2]) // 10000
    return luma.astype(np.uint8), rgba[..., 3].astype(np.uint8)


def process_image(image: Image.Image, settings: Settings) -> Image.Image:
    """Run the transform selected by the settings type over an image.

    bw returns a mode "L" image, halftone a mode "LA" image, both with the
    size of the input.
    """
    luma, alpha = to_luma_alpha(image)
    if settings.mode == Mode.BW:
        return Image.fromarray(threshold_compress(luma, settings))

    return Image.fromarray(halftone(luma, settings, alpha=alpha))
