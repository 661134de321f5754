"""
chunkpng - Scanline and Codec Tests

Bit packing, filter-byte framing, defiltering and the stored deflate codec.

Can be run standalone: python test_scanlines.py
Or via main runner: python tests.py
"""

import sys
import zlib

from harness import TestResults, section, run_module

from chunkpng.scanlines import (
    pack_row,
    unpack_row,
    pack_samples,
    unpack_samples,
    add_filter_fields,
    remove_filter_fields,
    paeth_predictor,
    undo_filter,
    defilter,
)
from chunkpng.codec import (
    StoredDeflateCodec,
    ZlibCodec,
    validate_codec,
    count_stored_blocks,
    predict_stored_size,
)
from chunkpng.constants import ColorType, FilterType
from chunkpng.errors import NotAPng, InvalidCodec
from chunkpng.pixels import determine_data_row_length, determine_filter_unit


# Global results instance
results = TestResults("SCANLINE")


# ═══════════════════════════════════════════════════════════════════════════════
# BIT PACKING
# ═══════════════════════════════════════════════════════════════════════════════

def test_bit_packing():
    """Samples pack MSB first and rows pad to a byte."""
    section("BIT PACKING")

    results.record("1-bit row", pack_row([1, 0, 1, 1, 0, 0, 0, 1, 1], 1) == b"\xb1\x80")
    results.record("2-bit row", pack_row([3, 0, 2, 1, 3], 2) == b"\xc9\xc0")
    results.record("4-bit row", pack_row([15, 1, 7], 4) == b"\xf1\x70")
    results.record("8-bit row is identity", pack_row([1, 2, 250], 8) == b"\x01\x02\xfa")

    results.record("Unpack 1-bit", unpack_row(b"\xb1\x80", 1, 9) == bytes([1, 0, 1, 1, 0, 0, 0, 1, 1]))
    results.record("Unpack 2-bit ignores padding", unpack_row(b"\xc9\xc0", 2, 5) == bytes([3, 0, 2, 1, 3]))
    results.record("Unpack 4-bit", unpack_row(b"\xf1\x70", 4, 3) == bytes([15, 1, 7]))

    # 3 samples per row at 1 bit: every row starts on a fresh byte
    packed = pack_samples([1, 1, 1, 0, 0, 1], 1, 3, 2)
    results.record("Rows are byte aligned", packed == b"\xe0\x20", packed.hex())
    results.record("Unpack whole raster", unpack_samples(packed, 1, 3, 1, 2) == bytes([1, 1, 1, 0, 0, 1]))


def test_row_geometry():
    """Row length and filter unit follow depth and color type."""
    section("ROW GEOMETRY")

    results.record("1-bit gray, 9 wide -> 2 bytes", determine_data_row_length(1, ColorType.GRAYSCALE, 9) == 2)
    results.record("RGB 8-bit, 2 wide -> 6 bytes", determine_data_row_length(8, ColorType.TRUECOLOR, 2) == 6)
    results.record("RGBA filter unit 4", determine_filter_unit(8, ColorType.TRUECOLOR_AND_ALPHA) == 4)
    results.record("Sub-byte filter unit 1", determine_filter_unit(2, ColorType.INDEXED) == 1)


# ═══════════════════════════════════════════════════════════════════════════════
# FILTERS
# ═══════════════════════════════════════════════════════════════════════════════

def test_filter_fields():
    section("FILTER FIELDS")

    framed = add_filter_fields(b"abcdef", 3, 2)
    results.record("Filter byte per row", framed == b"\x00abc\x00def", framed.hex())
    results.record("Strip filter bytes", remove_filter_fields(framed, 3, 2) == b"abcdef")


def test_undo_filter():
    """Each filter type reconstructs the expected row."""
    section("UNDO FILTER")

    row = bytearray([10, 5, 5])
    undo_filter(FilterType.SUB, row, bytes(3), 1)
    results.record("Sub", list(row) == [10, 15, 20], str(list(row)))

    row = bytearray([200, 100])
    undo_filter(FilterType.SUB, row, bytes(2), 1)
    results.record("Sub wraps modulo 256", list(row) == [200, 44], str(list(row)))

    row = bytearray([1, 1, 1])
    undo_filter(FilterType.UP, row, bytes([1, 2, 3]), 1)
    results.record("Up", list(row) == [2, 3, 4], str(list(row)))

    row = bytearray([5, 3])
    undo_filter(FilterType.AVERAGE, row, bytes([10, 20]), 1)
    results.record("Average", list(row) == [10, 18], str(list(row)))

    row = bytearray([1, 2])
    undo_filter(FilterType.PAETH, row, bytes([10, 20]), 1)
    results.record("Paeth", list(row) == [11, 22], str(list(row)))

    results.record("Paeth predictor picks a", paeth_predictor(5, 0, 0) == 5)
    results.record("Paeth predictor tie prefers a", paeth_predictor(3, 3, 3) == 3)

    results.expect_error("Unknown filter type rejected", NotAPng,
                         undo_filter, 5, bytearray(2), bytes(2), 1)


def test_defilter():
    """Whole-buffer defiltering with a multi-byte filter unit."""
    section("DEFILTER")

    # Two RGB pixels per row; Sub works on whole pixels
    data = bytearray([FilterType.SUB, 10, 20, 30, 1, 2, 3,
                      FilterType.UP, 1, 1, 1, 1, 1, 1])
    defilter(data, 6, 2, 3)
    results.record("Sub row uses pixel distance",
                   list(data[1:7]) == [10, 20, 30, 11, 22, 33], str(list(data[1:7])))
    results.record("Up row uses reconstructed row",
                   list(data[8:14]) == [11, 21, 31, 12, 23, 34], str(list(data[8:14])))
    results.record("Filter bytes reset", data[0] == 0 and data[7] == 0)


# ═══════════════════════════════════════════════════════════════════════════════
# CODEC
# ═══════════════════════════════════════════════════════════════════════════════

def test_stored_codec():
    """Stored deflate output is valid zlib and exactly the predicted size."""
    section("STORED DEFLATE CODEC")

    codec = StoredDeflateCodec()
    for size in (0, 1, 3, 65535, 65536, 200000):
        data = bytes(i % 251 for i in range(size))
        encoded = codec.deflate(data)
        results.record(f"Size {size} predicted", len(encoded) == predict_stored_size(size),
                       f"{len(encoded)} != {predict_stored_size(size)}")
        results.record(f"Size {size} inflates", zlib.decompress(encoded) == data)

    results.record("Empty input still has one block", count_stored_blocks(0) == 1)
    results.record("Block boundary", count_stored_blocks(65535) == 1 and count_stored_blocks(65536) == 2)
    results.record("Empty container is 11 bytes", predict_stored_size(0) == 11)


def test_codec_validation():
    section("CODEC VALIDATION")

    results.record("Stored codec accepted", validate_codec(StoredDeflateCodec()) is not None)
    results.expect_error("Object without methods rejected", InvalidCodec, validate_codec, object())
    results.expect_error("Bad zlib level rejected", ValueError, ZlibCodec, 10)

    codec = ZlibCodec(9)
    data = b"\x00" * 1000
    encoded = codec.deflate(data)
    results.record("Zlib codec compresses", len(encoded) < len(data))
    results.record("Zlib codec round trip", codec.inflate(encoded) == data)


def run_all_tests(tracker: TestResults = None) -> TestResults:
    global results
    if tracker is not None:
        results = tracker
    return run_module(results, [
        test_bit_packing,
        test_row_geometry,
        test_filter_fields,
        test_undo_filter,
        test_defilter,
        test_stored_codec,
        test_codec_validation,
    ])


def main():
    print("CHUNKPNG - SCANLINE AND CODEC TESTS")
    run_all_tests()
    return 0 if results.summary() else 1


if __name__ == "__main__":
    sys.exit(main())
