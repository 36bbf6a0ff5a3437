"""Decoder for bands compressed with QPDL algorithm 0x11."""

from __future__ import annotations

TABLE_SIZE = 0x40
_HEADER_SIZE = 4 + TABLE_SIZE * 2


class DecompressionError(ValueError):
    """Raised when a compressed band is malformed."""


def _check(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise DecompressionError(f"read of {size} byte(s) at {offset} out of range")


def read32(data: bytes, offset: int, big_endian: bool) -> int:
    """Read an unsigned 32-bit integer."""
    _check(data, offset, 4)
    return int.from_bytes(data[offset:offset + 4], "big" if big_endian else "little")


def read16(data: bytes, offset: int, big_endian: bool) -> int:
    """Read an unsigned 16-bit integer."""
    _check(data, offset, 2)
    return int.from_bytes(data[offset:offset + 2], "big" if big_endian else "little")


def _occurrence(value: int) -> int:
    inverted = ~value & 0xFFFF
    return inverted - 0x10000 if inverted >= 0x8000 else inverted


def _store(buffer: bytearray, index: int, value: int) -> None:
    if index >= len(buffer):
        buffer.extend(b"\x00" * (index + 1 - len(buffer)))
    buffer[index] = value


def decompress_0x11(data: bytes, width: int, height: int, big_endian: bool) -> bytes:
    """Decompress a 0x11 band into a row-major 1-bit bitmap (1 = black)."""
    if len(data) < _HEADER_SIZE:
        raise DecompressionError("Algo0x11: bad band size")
    if height <= 0:
        raise DecompressionError("Algo0x11: invalid band height")

    band_size = (width * height + 7) >> 3
    decoded = bytearray(b"\xff" * band_size)

    last_occur = read32(data, 0, big_endian)
    table = [
        _occurrence(read16(data, 4 + i * 2, big_endian)) for i in range(TABLE_SIZE)
    ]
    idx = _HEADER_SIZE

    if len(data) <= idx + last_occur:
        raise DecompressionError("Algo0x11: invalid band size")
    for w, value in enumerate(data[idx:idx + last_occur]):
        _store(decoded, w, value)
    w = last_occur
    idx += last_occur

    while idx < len(data):
        counter = data[idx]
        idx += 1
        if counter & 0x80:
            if idx >= len(data):
                raise DecompressionError("Algo0x11: truncated compressed sequence")
            number = data[idx]
            idx += 1
            to_read = ((number & 0xC0) << 1) + (counter & 0x7F) + 3
            start = w + 1 + table[number & 0x3F]
            for i in range(to_read):
                source = start + i
                if not 0 <= source < len(decoded):
                    raise DecompressionError(
                        f"Algo0x11: reference to byte {source} out of range"
                    )
                _store(decoded, w, decoded[source])
                w += 1
        else:
            count = counter + 1
            if idx + count > len(data):
                raise DecompressionError("Algo0x11: truncated literal sequence")
            for value in data[idx:idx + count]:
                _store(decoded, w, value)
                w += 1
            idx += count

    output = bytearray(band_size)
    row_bytes = width // 8
    for i in range(band_size):
        x, y = divmod(i, height)
        _store(output, x + y * row_bytes, ~decoded[i] & 0xFF)
    return bytes(output)