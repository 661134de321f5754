"""chunkpng CLI - inspect and edit PNG files from the shell.

Usage:
    chunkpng inspect <image.png>
    chunkpng palette <image.png>
    chunkpng pixel <image.png> <x> <y>
    chunkpng set-pixel <image.png> <x> <y> <sample>... [--output <path>]
    chunkpng opacities <image.png>

Output formats (before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
"""

import sys
import json
import logging
import argparse
from pathlib import Path

from .png_file import PngImage
from .errors import PngError


def load_png(path: str, strict: bool = False) -> PngImage:
    """Load a PNG file. Exits on failure."""
    try:
        return PngImage.read(path, strict=strict)
    except FileNotFoundError:
        print(f"ERROR: File not found: {path}", file=sys.stderr)
    except PngError as e:
        print(f"ERROR: Failed to load {path}: {e}", file=sys.stderr)
    sys.exit(1)


def describe(png: PngImage) -> dict:
    """Summary of a document as plain data."""
    meta = png.get_metadata()
    info = {
        "width": meta.width,
        "height": meta.height,
        "depth": int(meta.depth),
        "color_type": meta.color_type.name.lower(),
        "chunks": png.get_chunks_used(),
        "transparencies": png.get_transparencies(),
    }
    if png.plte is not None:
        info["palette_size"] = len(png.plte)
    try:
        info["background"] = png.get_background()
    except PngError:
        info["background"] = None
    return info


def format_table(info: dict) -> str:
    lines = [f"{'=' * 50}",
             f"  {info['width']}x{info['height']}  {info['color_type']}  depth {info['depth']}",
             f"{'=' * 50}"]
    lines.append(f"  Chunks:        {' '.join(info['chunks'])}")
    if "palette_size" in info:
        lines.append(f"  Palette:       {info['palette_size']} colors")
    lines.append(f"  Background:    {info['background'] if info['background'] is not None else '-'}")
    transparencies = info["transparencies"]
    lines.append(f"  Transparency:  {transparencies if transparencies else '-'}")
    return "\n".join(lines)


def cmd_inspect(args):
    """Show metadata and chunk summary."""
    png = load_png(args.file, args.strict)
    info = describe(png)
    if args.format == "json":
        print(json.dumps(info, indent=2))
    else:
        print(f"File: {args.file}")
        print(format_table(info))


def cmd_palette(args):
    """List palette entries with their alpha."""
    png = load_png(args.file, args.strict)
    if png.plte is None:
        print(f"ERROR: {args.file} has no palette", file=sys.stderr)
        sys.exit(1)

    entries = []
    for index, color in enumerate(png.get_palette()):
        alpha = png.trns.get_value_of(index) if png.trns is not None else None
        entries.append({"index": index, "color": color, "alpha": 255 if alpha is None else alpha})

    if args.format == "json":
        print(json.dumps(entries, indent=2))
        return
    print(f"Palette ({len(entries)} colors)")
    print("─" * 40)
    for entry in entries:
        r, g, b = entry["color"]
        print(f"  [{entry['index']:>3}]  #{r:02x}{g:02x}{b:02x}  ({r:>3}, {g:>3}, {b:>3})  alpha={entry['alpha']}")


def cmd_pixel(args):
    """Show one pixel."""
    png = load_png(args.file, args.strict)
    try:
        pixel = png.get_pixel_at((args.x, args.y))
    except PngError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if args.format == "json":
        print(json.dumps({"x": args.x, "y": args.y, "samples": pixel}))
    else:
        print(f"({args.x}, {args.y}): {' '.join(str(s) for s in pixel)}")


def cmd_set_pixel(args):
    """Write one pixel and save."""
    png = load_png(args.file, args.strict)
    try:
        png.set_pixel_at((args.x, args.y), args.samples)
    except PngError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output or args.file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    size = png.write(output_path)
    print(f"Wrote {output_path} ({size} bytes)")


def cmd_opacities(args):
    """Print per-pixel opacity, one row per line."""
    png = load_png(args.file, args.strict)
    opacities = png.get_opacities()
    rows = [opacities[y * png.width:(y + 1) * png.width] for y in range(png.height)]
    if args.format == "json":
        print(json.dumps(rows))
    else:
        for row in rows:
            print(" ".join(f"{value:>3}" for value in row))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="chunkpng",
        description="Inspect and edit PNG files chunk by chunk.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--format", choices=["table", "json"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("--strict", action="store_true", help="Reject chunks with bad CRCs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # inspect
    p = sub.add_parser("inspect", help="Show metadata and chunks")
    p.add_argument("file", help="Path to PNG")

    # palette
    p = sub.add_parser("palette", help="List palette entries")
    p.add_argument("file", help="Path to PNG")

    # pixel
    p = sub.add_parser("pixel", help="Show the pixel at x, y")
    p.add_argument("file", help="Path to PNG")
    p.add_argument("x", type=int)
    p.add_argument("y", type=int)

    # set-pixel
    p = sub.add_parser("set-pixel", help="Set the pixel at x, y")
    p.add_argument("file", help="Path to PNG")
    p.add_argument("x", type=int)
    p.add_argument("y", type=int)
    p.add_argument("samples", type=int, nargs="+", help="Color samples, optional trailing opacity")
    p.add_argument("--output", "-o", help="Output file path (default: overwrite input)")

    # opacities
    p = sub.add_parser("opacities", help="Show per-pixel opacity")
    p.add_argument("file", help="Path to PNG")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "inspect": cmd_inspect,
        "palette": cmd_palette,
        "pixel": cmd_pixel,
        "set-pixel": cmd_set_pixel,
        "opacities": cmd_opacities,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        cmd_func(args)
    else:
        parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
