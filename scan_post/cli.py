"""Command-line interface for scan_post.

Two subcommands, one per transform. Progress goes to stderr; with --json a
structured result is printed to stdout for scripting.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import NoReturn

from scan_post.core.processor import (
    BwSettings,
    HalftoneSettings,
    Mode,
    Settings,
    describe,
    output_tag,
)


def _u8(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {text!r}")
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError(f"{value} is not in 0..=255")
    return value


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Path of image to post process.")
    parser.add_argument(
        "-o", "--output",
        help="Path of output image. Defaults to the input path with a "
        "mode-specific extension.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scan-post",
        description="Post process drawing scans.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- bw subcommand ---
    bw = subparsers.add_parser(
        Mode.BW.value,
        help="Make an image black and white while erasing bright pixels and "
        "compressing the range of black pixels.",
    )
    _add_common_args(bw)
    bw.add_argument(
        "--threshold",
        type=_u8,
        default=150,
        help="Gray threshold, pixels above are forced white, pixels below or "
        "equal are compressed to black (default: 150).",
    )
    bw.add_argument(
        "--compress",
        type=float,
        default=0.4,
        help="Compress factor applied linearly to pixels below or equal to "
        "the threshold (default: 0.4).",
    )
    bw.add_argument(
        "--base",
        type=_u8,
        default=20,
        help="Base gray added to all black pixels after compression "
        "(default: 20).",
    )

    # --- halftone subcommand ---
    ht = subparsers.add_parser(
        Mode.HALFTONE.value,
        help="Make bright pixels transparent and render dark pixels as a "
        "halftone pattern in the alpha channel.",
    )
    _add_common_args(ht)
    ht.add_argument(
        "--threshold",
        type=_u8,
        default=150,
        help="Gray threshold, pixels above are transparent, pixels below or "
        "equal are halftoned (default: 150).",
    )
    ht.add_argument(
        "--stride",
        type=float,
        default=6.0,
        help="Distance between two halftone dots, in pixels (default: 6.0).",
    )
    ht.add_argument(
        "--radius",
        type=float,
        default=0.4,
        help="Radius of the dots (default: 0.4).",
    )
    ht.add_argument(
        "--base",
        type=_u8,
        default=40,
        help="Base gray of all pixels, the halftone only applies to alpha "
        "(default: 40).",
    )

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    if args.command == Mode.BW.value:
        return BwSettings(
            threshold=args.threshold,
            compress=args.compress,
            base=args.base,
        )
    return HalftoneSettings(
        threshold=args.threshold,
        stride=args.stride,
        radius=args.radius,
        base=args.base,
    )


def _auto_output_path(input_path: Path, settings: Settings) -> Path:
    """Replace the input extension with the mode tag, or append it."""
    return input_path.with_name(f"{input_path.stem}.{output_tag(settings)}")


def _json_error(message: str, code: str) -> NoReturn:
    """Print JSON error to stderr and exit with code 1."""
    err = {"status": "error", "error": message, "code": code}
    print(json.dumps(err), file=sys.stderr)
    sys.exit(1)


def _fail(message: str, code: str, is_json: bool) -> NoReturn:
    if is_json:
        _json_error(message, code)
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _status(message: str, is_json: bool) -> None:
    if not is_json:
        print(message, file=sys.stderr)


def _run(args: argparse.Namespace) -> None:
    """Open, transform and save one image."""
    from scan_post.core.processor import process_image
    from scan_post.core.reader import open_image
    from scan_post.core.writer import save_image

    is_json = args.json
    settings = _settings_from_args(args)
    input_path = Path(args.input)

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = _auto_output_path(input_path, settings)

    _status("Opening image...", is_json)
    _status(f"  Path: {input_path}", is_json)
    try:
        image, info = open_image(input_path)
    except FileNotFoundError as e:
        _fail(str(e), "FILE_NOT_FOUND", is_json)
    except (ValueError, OSError) as e:
        _fail(str(e), "INVALID_INPUT", is_json)
    _status(f"  Size: {info.width}x{info.height}", is_json)

    _status("Processing image...", is_json)
    for label, value in describe(settings):
        _status(f"  {label}: {value}", is_json)
    try:
        result = process_image(image, settings)
    except Exception as e:
        if args.debug:
            import traceback
            traceback.print_exc(file=sys.stderr)
        _fail(str(e), "PROCESSING_ERROR", is_json)

    _status("Saving image", is_json)
    _status(f"  Path: {output_path}", is_json)
    try:
        save_image(result, output_path)
    except (ValueError, OSError) as e:
        if args.debug:
            import traceback
            traceback.print_exc(file=sys.stderr)
        _fail(str(e), "WRITE_FAILED", is_json)

    if is_json:
        summary = {
            "status": "success",
            "mode": settings.mode.value,
            "input": str(input_path),
            "output": str(output_path),
            "settings": asdict(settings),
            "metadata": {
                "width": result.width,
                "height": result.height,
                "input_format": info.format,
                "input_mode": info.mode,
                "output_mode": result.mode,
            },
        }
        print(json.dumps(summary, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      scan-post bw <file> [opts]        → threshold-compress
      scan-post halftone <file> [opts]  → halftone alpha pattern
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _run(args)


if __name__ == "__main__":
    main()
