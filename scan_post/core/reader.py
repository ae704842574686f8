"""Loading source scans with Pillow."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image


@dataclass
class ImageInfo:
    """Metadata about the input file."""

    path: Path
    format: str | None  # Pillow format name, e.g. "PNG"
    width: int
    height: int
    mode: str  # Pillow mode of the file, e.g. "L" or "RGBA"


def open_image(path: str | Path) -> tuple[Image.Image, ImageInfo]:
    """Open and fully decode an image file.

    Returns:
        The decoded image (detached from the file) and its metadata.

    Raises:
        FileNotFoundError: if the path does not exist.
        ValueError: if the file cannot be decoded as an image.
    """
    local_path = Path(path)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")

    try:
        with Image.open(local_path) as img:
            image = img.copy()
            info = ImageInfo(
                path=local_path,
                format=img.format,
                width=img.width,
                height=img.height,
                mode=img.mode,
            )
    except OSError as e:
        raise ValueError(f"Cannot decode image {local_path}: {e}") from e

    return image, info
