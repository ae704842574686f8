"""Save processed images in the format implied by the output extension."""

from __future__ import annotations

from pathlib import Path

from PIL import Image


def output_format(output_path: Path) -> str:
    """Pillow format name for an output path, based on its extension."""
    suffix = output_path.suffix.lower()
    fmt = Image.registered_extensions().get(suffix)
    if fmt is None or fmt not in Image.SAVE:
        raise ValueError(f"Unsupported output format: {suffix or output_path.name}")
    return fmt


def save_image(image: Image.Image, output_path: Path) -> None:
    """Write an image, creating missing parent directories.

    Raises:
        ValueError: if the extension maps to no writable format.
        OSError: if the format cannot store the image mode or the file
                 cannot be written.
    """
    fmt = output_format(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(output_path, format=fmt)
