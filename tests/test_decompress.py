import pytest

from qpdlkit.decompress import DecompressionError, decompress_0x11, read16, read32


def build(literal, rest=b"", table=None, big_endian=True):
    order = "big" if big_endian else "little"
    table = table or {}
    header = len(literal).to_bytes(4, order)
    for i in range(0x40):
        header += table.get(i, 0).to_bytes(2, order)
    return header + bytes(literal) + bytes(rest)


def test_read_helpers():
    data = b"\x01\x02\x03\x04"
    assert read32(data, 0, True) == 0x01020304
    assert read32(data, 0, False) == 0x04030201
    assert read16(data, 1, True) == 0x0203
    assert read16(data, 1, False) == 0x0302


def test_read_out_of_range():
    with pytest.raises(DecompressionError):
        read32(b"\x00\x01", 0, True)


def test_literals_are_inverted_and_rotated():
    a, b, c, d = 0x01, 0x02, 0x04, 0x08
    # Literal a, b, c in the header part, then a one-byte literal run with d.
    data = build([a, b, c], rest=[0x00, d])
    out = decompress_0x11(data, 16, 2, True)
    assert out == bytes(~v & 0xFF for v in (a, c, b, d))


def test_single_column_keeps_order():
    values = [0x10, 0x20, 0x30, 0x40]
    data = build(values[:1], rest=[0x02] + values[1:])
    out = decompress_0x11(data, 8, 4, True)
    assert out == bytes(~v & 0xFF for v in values)


def test_compressed_repeat_of_previous_byte():
    # Table entry 0 set to 1 makes each copy read the byte just before it.
    data = build([0x12], rest=[0x80, 0x00], table={0: 1})
    out = decompress_0x11(data, 8, 4, True)
    assert out == bytes([~0x12 & 0xFF] * 4)


def test_little_endian_matches_big_endian():
    big = decompress_0x11(build([0x55], [0x80, 0x00], {0: 1}, True), 8, 4, True)
    little = decompress_0x11(build([0x55], [0x80, 0x00], {0: 1}, False), 8, 4, False)
    assert big == little


def test_output_size_matches_band():
    data = build([0xAA], rest=[0x80, 0x00], table={0: 1})
    out = decompress_0x11(data, 8, 4, True)
    assert len(out) == (8 * 4 + 7) // 8


def test_too_short():
    with pytest.raises(DecompressionError, match="bad band size"):
        decompress_0x11(b"\x00" * 10, 8, 4, True)


def test_literal_longer_than_data():
    data = build([1, 2])[:-1]
    with pytest.raises(DecompressionError, match="invalid band size"):
        decompress_0x11(data, 8, 4, True)


def test_truncated_compressed_sequence():
    data = build([0x12], rest=[0x80])
    with pytest.raises(DecompressionError):
        decompress_0x11(data, 8, 4, True)


def test_reference_before_start():
    data = build([0x12], rest=[0x80, 0x00], table={0: 0x100})
    with pytest.raises(DecompressionError, match="out of range"):
        decompress_0x11(data, 8, 4, True)