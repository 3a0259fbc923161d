"""CLI helper to invert or remap the colors of a PDF."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pdf_recolor.core.config import settings
from pdf_recolor.core.errors import RecolorError
from pdf_recolor.core.pdf_recolorer import PDFRecolorer
from pdf_recolor.models.schemas import InvertMode, RemapMode, RGBColor


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("pdf", type=Path, help="Path to the PDF to recolor")
    parser.add_argument("output", type=Path, nargs="?", help="Output path (default: <mode>-<name> next to input)")
    parser.add_argument("--mode", choices=["invert", "remap"], default=settings.default_mode)
    parser.add_argument(
        "--content-color",
        default=settings.default_content_color,
        help="Remap mode: color for all content, as #rrggbb",
    )
    parser.add_argument(
        "--background-color",
        default=settings.default_background_color,
        help="Remap mode: page background color, as #rrggbb",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser.parse_args()


def _print_progress(fraction: float) -> None:
    print(f"\rRecoloring... {fraction * 100:3.0f}%", end="", file=sys.stderr, flush=True)


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.pdf.exists():
        print(f"Error: {args.pdf} does not exist", file=sys.stderr)
        sys.exit(1)

    try:
        if args.mode == "remap":
            mode = RemapMode(
                content_color=RGBColor.from_hex(args.content_color),
                background_color=RGBColor.from_hex(args.background_color),
            )
        else:
            mode = InvertMode()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    prefix = "inverted" if args.mode == "invert" else "recolored"
    output = args.output or args.pdf.with_name(f"{prefix}-{args.pdf.name}")

    recolorer = PDFRecolorer(mode)
    try:
        result = recolorer.transform(args.pdf.read_bytes(), on_progress=_print_progress)
    except RecolorError as e:
        print(f"\nRecolor failed: {e}", file=sys.stderr)
        sys.exit(1)

    output.write_bytes(result)
    stats = recolorer.stats
    print(file=sys.stderr)
    print(f"Output: {output}")
    print(f"  Pages rewritten: {stats.pages_rewritten} (skipped {stats.pages_skipped} blank)")
    print(f"  Color instructions: {stats.color_instructions}")


if __name__ == "__main__":
    main()
