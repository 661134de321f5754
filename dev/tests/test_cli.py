"""
chunkpng - CLI Tests

Runs the chunkpng commands in-process against files in a temp directory.

Can be run standalone: python test_cli.py
Or via main runner: python tests.py
"""

import io
import sys
import json
import tempfile
from contextlib import redirect_stdout, redirect_stderr
from pathlib import Path

from harness import TestResults, section, run_module

from chunkpng import PngImage
from chunkpng.cli import main as cli_main, build_parser
from chunkpng.constants import ColorType


# Global results instance
results = TestResults("CLI")


def run_cli(*argv):
    """Run the CLI; returns (exit_code, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    code = 0
    with redirect_stdout(out), redirect_stderr(err):
        try:
            code = cli_main(list(argv))
        except SystemExit as e:
            code = e.code
    return code, out.getvalue(), err.getvalue()


def write_sample(directory: Path) -> Path:
    png = PngImage(width=2, height=1, color_type=ColorType.INDEXED)
    png.set_pixel_at((0, 0), [255, 0, 0, 128])
    png.set_pixel_at((1, 0), [0, 0, 255])
    path = directory / "sample.png"
    png.write(path)
    return path


def test_parser():
    section("PARSER")

    parser = build_parser()
    args = parser.parse_args(["--format", "json", "pixel", "a.png", "1", "2"])
    results.record("Global format option", args.format == "json")
    results.record("Pixel coordinates are ints", (args.x, args.y) == (1, 2))
    args = parser.parse_args(["set-pixel", "a.png", "0", "0", "1", "2", "3", "-o", "b.png"])
    results.record("Samples collected", args.samples == [1, 2, 3] and args.output == "b.png")

    code, out, _ = run_cli()
    results.record("No command prints help", code == 0 and "usage" in out.lower())


def test_read_commands():
    section("READ COMMANDS")

    with tempfile.TemporaryDirectory() as tmp:
        path = str(write_sample(Path(tmp)))

        code, out, _ = run_cli("--format", "json", "inspect", path)
        info = json.loads(out)
        results.record("inspect exit code", code == 0)
        results.record("inspect size", info["width"] == 2 and info["height"] == 1)
        results.record("inspect color type", info["color_type"] == "indexed")
        results.record("inspect chunks", info["chunks"] == ["IHDR", "PLTE", "tRNS", "IDAT", "IEND"])
        results.record("inspect background falls back to palette", info["background"] == [255, 0, 0])

        code, out, _ = run_cli("inspect", path)
        results.record("Table output", code == 0 and "2x1" in out and "indexed" in out)

        code, out, _ = run_cli("--format", "json", "palette", path)
        entries = json.loads(out)
        results.record("palette entries", [e["color"] for e in entries] == [[255, 0, 0], [0, 0, 255]])
        results.record("palette alpha", [e["alpha"] for e in entries] == [128, 255])

        code, out, _ = run_cli("--format", "json", "pixel", path, "1", "0")
        results.record("pixel samples", json.loads(out)["samples"] == [0, 0, 255, 255])

        code, out, _ = run_cli("pixel", path, "0", "0")
        results.record("pixel table", out.strip() == "(0, 0): 255 0 0 128", out)

        code, out, _ = run_cli("--format", "json", "opacities", path)
        results.record("opacities rows", json.loads(out) == [[255, 255]])


def test_set_pixel():
    section("SET PIXEL")

    with tempfile.TemporaryDirectory() as tmp:
        path = write_sample(Path(tmp))
        output = Path(tmp) / "out" / "edited.png"

        code, out, _ = run_cli("set-pixel", str(path), "1", "0", "0", "255", "0", "--output", str(output))
        results.record("set-pixel exit code", code == 0)
        results.record("Output written", output.exists() and "Wrote" in out)
        edited = PngImage.read(output)
        results.record("Pixel changed", edited.get_pixel_at((1, 0)) == [0, 255, 0, 255])
        results.record("Input untouched", PngImage.read(path).get_pixel_at((1, 0)) == [0, 0, 255, 255])


def test_errors():
    section("ERRORS")

    with tempfile.TemporaryDirectory() as tmp:
        missing = str(Path(tmp) / "missing.png")
        code, _, err = run_cli("inspect", missing)
        results.record("Missing file exits 1", code == 1 and err.startswith("ERROR:"), err)

        junk = Path(tmp) / "junk.png"
        junk.write_bytes(b"not an image")
        code, _, err = run_cli("inspect", str(junk))
        results.record("Bad file exits 1", code == 1 and "ERROR:" in err, err)

        corrupt = Path(tmp) / "corrupt.png"
        data = bytearray(write_sample(Path(tmp)).read_bytes())
        idat_at = data.index(b"IDAT")
        data[idat_at + 4:idat_at + 6] = b"\x00\x00"  # break the zlib header
        corrupt.write_bytes(bytes(data))
        code, _, err = run_cli("inspect", str(corrupt))
        results.record("Corrupt image data exits 1", code == 1 and err.startswith("ERROR:"), err)

        path = str(write_sample(Path(tmp)))
        code, _, err = run_cli("pixel", path, "5", "5")
        results.record("Out of range pixel exits 1", code == 1 and "ERROR:" in err, err)

        gray = PngImage(width=1, height=1, color_type=ColorType.GRAYSCALE)
        gray_path = Path(tmp) / "gray.png"
        gray.write(gray_path)
        code, _, err = run_cli("palette", str(gray_path))
        results.record("palette without PLTE exits 1", code == 1 and "no palette" in err, err)


def run_all_tests(tracker: TestResults = None) -> TestResults:
    global results
    if tracker is not None:
        results = tracker
    return run_module(results, [
        test_parser,
        test_read_commands,
        test_set_pixel,
        test_errors,
    ])


def main():
    print("CHUNKPNG - CLI TESTS")
    run_all_tests()
    return 0 if results.summary() else 1


if __name__ == "__main__":
    sys.exit(main())
