"""
chunkpng - Pillow Interop Tests

Files written here must open in Pillow with the same pixels, and files
Pillow writes (adaptive filtering, packed palettes, 1-bit) must load here.

Can be run standalone: python test_interop.py
Or via main runner: python tests.py
"""

import sys
from io import BytesIO

from harness import TestResults, section, run_module

from PIL import Image

from chunkpng import PngImage
from chunkpng.constants import BitDepth, ColorType
from chunkpng.interop import to_pil_image, from_pil_image


# Global results instance
results = TestResults("INTEROP")


def pil_open(data: bytes) -> Image.Image:
    image = Image.open(BytesIO(data))
    image.load()
    return image


def pil_save(image: Image.Image, **params) -> bytes:
    out = BytesIO()
    image.save(out, format="PNG", **params)
    return out.getvalue()


def gradient(mode: str, size=(16, 16)) -> Image.Image:
    image = Image.new(mode, size)
    width, height = size
    for y in range(height):
        for x in range(width):
            if mode == "RGB":
                image.putpixel((x, y), (x * 16, y * 16, (x * y) % 256))
            else:
                image.putpixel((x, y), (x * 16, y * 16, (x * y) % 256, 255 - x))
    return image


# ═══════════════════════════════════════════════════════════════════════════════
# WRITTEN HERE, READ BY PILLOW
# ═══════════════════════════════════════════════════════════════════════════════

def test_pillow_reads_output():
    section("PILLOW READS OUTPUT")

    png = PngImage(width=2, height=1, color_type=ColorType.INDEXED)
    png.set_pixel_at((0, 0), [255, 0, 0, 128])
    png.set_pixel_at((1, 0), [0, 0, 255])
    image = pil_open(png.save())
    results.record("Indexed opens as P", image.mode == "P", image.mode)
    rgba = image.convert("RGBA")
    results.record("Palette alpha honored", rgba.getpixel((0, 0)) == (255, 0, 0, 128), str(rgba.getpixel((0, 0))))
    results.record("Opaque entry", rgba.getpixel((1, 0)) == (0, 0, 255, 255))

    png = PngImage(width=2, height=1, color_type=ColorType.TRUECOLOR_AND_ALPHA)
    png.set_pixel_at((1, 0), [10, 20, 30, 40])
    image = pil_open(png.save())
    results.record("RGBA pixel", image.getpixel((1, 0)) == (10, 20, 30, 40))

    png = PngImage(width=3, height=1, depth=2, color_type=ColorType.GRAYSCALE)
    png.set_raw_data([3, 1, 0])
    image = pil_open(png.save()).convert("L")
    results.record("2-bit gray scaled by Pillow", list(image.getdata()) == [255, 85, 0], str(list(image.getdata())))

    png = PngImage(width=1, height=1, color_type=ColorType.GRAYSCALE)
    png.set_transparency(7)
    image = pil_open(png.save())
    results.record("Gray color key", image.info.get("transparency") == 7, str(image.info.get("transparency")))


# ═══════════════════════════════════════════════════════════════════════════════
# WRITTEN BY PILLOW, READ HERE
# ═══════════════════════════════════════════════════════════════════════════════

def test_reads_pillow_output():
    section("READS PILLOW OUTPUT")

    for mode, color_type in (("RGB", ColorType.TRUECOLOR), ("RGBA", ColorType.TRUECOLOR_AND_ALPHA)):
        image = gradient(mode)
        png = PngImage.from_bytes(pil_save(image))
        results.record(f"{mode} color type", png.color_type == color_type)
        results.record(f"{mode} filtered rows decoded", png.get_raw_data() == image.tobytes())

    image = Image.new("1", (10, 2))
    image.putpixel((3, 0), 255)
    image.putpixel((9, 1), 255)
    png = PngImage.from_bytes(pil_save(image))
    expected = [1 if value else 0 for value in image.convert("L").tobytes()]
    results.record("1-bit depth", png.depth == BitDepth.ONE and png.is_grayscale())
    results.record("1-bit pixels", list(png.get_raw_data()) == expected)

    image = Image.new("P", (4, 2))
    image.putpalette([0, 0, 0, 255, 0, 0, 0, 255, 0, 0, 0, 255])
    for x in range(4):
        image.putpixel((x, 0), x)
        image.putpixel((x, 1), 3 - x)
    png = PngImage.from_bytes(pil_save(image, transparency=bytes([0, 128, 255, 255])))
    results.record("Palette indices", list(png.get_raw_data()) == list(image.tobytes()))
    results.record("Palette colors", png.get_palette()[:4] == [[0, 0, 0], [255, 0, 0], [0, 255, 0], [0, 0, 255]])
    results.record("Palette alpha", png.get_transparencies()[:2] == [0, 128], str(png.get_transparencies()))
    results.record("Pixel with alpha", png.get_pixel_at((1, 0)) == [255, 0, 0, 128])


# ═══════════════════════════════════════════════════════════════════════════════
# CONVERSION HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def test_to_pil_image():
    section("TO PIL IMAGE")

    png = PngImage(width=2, height=1, color_type=ColorType.INDEXED)
    png.set_pixel_at((0, 0), [255, 0, 0, 128])
    png.set_pixel_at((1, 0), [0, 0, 255])
    image = to_pil_image(png)
    results.record("Mode P", image.mode == "P" and image.size == (2, 1))
    results.record("Alpha carried", image.convert("RGBA").getpixel((0, 0)) == (255, 0, 0, 128))

    png = PngImage(width=2, height=1, depth=2, color_type=ColorType.GRAYSCALE)
    png.set_raw_data([3, 1])
    results.record("Low depth gray scaled", list(to_pil_image(png).getdata()) == [255, 85])

    png = PngImage(width=1, height=1, color_type=ColorType.TRUECOLOR)
    png.set_transparency([1, 2, 3])
    results.record("Color key carried", to_pil_image(png).info.get("transparency") == (1, 2, 3))


def test_from_pil_image():
    section("FROM PIL IMAGE")

    image = gradient("RGBA", (4, 3))
    png = from_pil_image(image)
    results.record("RGBA color type", png.color_type == ColorType.TRUECOLOR_AND_ALPHA)
    results.record("RGBA pixel", png.get_pixel_at((1, 2)) == list(image.getpixel((1, 2))))
    results.record("Survives save", pil_open(png.save()).tobytes() == image.tobytes())

    image = Image.new("P", (2, 1))
    image.putpalette([10, 20, 30, 40, 50, 60])
    image.putpixel((1, 0), 1)
    image.info["transparency"] = 0
    png = from_pil_image(image)
    results.record("Palette copied", png.get_palette()[:2] == [[10, 20, 30], [40, 50, 60]])
    results.record("Transparent index", png.get_pixel_at((0, 0)) == [10, 20, 30, 0])
    results.record("Indices copied", png.get_raw_data() == b"\x00\x01")

    image = Image.new("1", (3, 1))
    image.putpixel((2, 0), 255)
    png = from_pil_image(image)
    results.record("Mode 1 becomes 1-bit gray", png.depth == BitDepth.ONE and png.get_raw_data() == b"\x00\x00\x01")

    png = from_pil_image(Image.new("CMYK", (1, 1)))
    results.record("Other modes become RGBA", png.color_type == ColorType.TRUECOLOR_AND_ALPHA)


def run_all_tests(tracker: TestResults = None) -> TestResults:
    global results
    if tracker is not None:
        results = tracker
    return run_module(results, [
        test_pillow_reads_output,
        test_reads_pillow_output,
        test_to_pil_image,
        test_from_pil_image,
    ])


def main():
    print("CHUNKPNG - PILLOW INTEROP TESTS")
    run_all_tests()
    return 0 if results.summary() else 1


if __name__ == "__main__":
    sys.exit(main())
