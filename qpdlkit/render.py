"""Render compressed pages into the QPDL printer language."""

from __future__ import annotations

import math
import sys
from typing import BinaryIO, Optional

from .job import Duplex, Request
from .model import BIH_SIZE, Band, BandPlane, Endian, Page

JBIG_COMPRESSION = 0x15
SUBHEADER_V3_COMPRESSION = 0x13
RAW_COMPRESSIONS = frozenset({0x0D, 0x0E})

BAND_SIGNATURE = 0x0C
PAGE_SIGNATURE = 0x00
PAGE_FOOTER_SIGNATURE = 0x01
MULTI_PAPER_SOURCE = 3

_JBIG_COLOR_ORDER = (4, 1, 2, 3)  # black, cyan, magenta, yellow
_AUX_MARKER = bytes(
    (0x13, 0, 0, 0, 0x23, 0x15, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0x14)
)
_SUBHEADER_SIGNATURE = 0x09ABCDEF

_STATE_FIRST_BAND = 0x00000000
_STATE_NEXT_BAND = 0x01000000
_STATE_LAST_BAND = 0x02000000


class RenderError(Exception):
    """Raised when a page or band cannot be rendered."""


def _u8(value: int) -> int:
    return value & 0xFF


def _be16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _u32(value: int, byteorder: str) -> bytes:
    return (value & 0xFFFFFFFF).to_bytes(4, byteorder)  # type: ignore[arg-type]


def _byteorder(endian: Endian) -> str:
    if endian is Endian.BIG_ENDIAN:
        return "big"
    if endian is Endian.LITTLE_ENDIAN:
        return "little"
    return sys.byteorder


def aux_records(page: Page) -> bytes:
    """Return the auxiliary records that precede the bands of a 0x15 page."""
    band = page.first_band
    if band is None:
        return b""
    if page.bih is None or len(page.bih) < BIH_SIZE:
        raise RenderError(f"No BIH data available for page {page.page_nr}")
    tail = bytes((0, 0, 1, _u8((band.width >> 8) + 65)))
    return _AUX_MARKER + bytes(page.bih[:BIH_SIZE]) + tail


def _find_plane(band: Band, color: int) -> Optional[BandPlane]:
    return next((p for p in band.planes if p.color_nr == color), None)


def render_jbig_band(band: Band, mono: bool) -> bytes:
    """Render a band of JBIG (0x15) planes, black first, then C, M, Y."""
    colors = _JBIG_COLOR_ORDER[:1] if mono else _JBIG_COLOR_ORDER
    line_bytes = (band.width + 7) // 8
    chunks = []
    for color in colors:
        plane = _find_plane(band, color)
        if plane is None:
            continue
        header = bytes((BAND_SIGNATURE, _u8(band.band_nr)))
        header += _be16(line_bytes) + _be16(band.height)
        header += bytes((_u8(color), _u8(plane.compression)))
        header += _u32(plane.data_size + 4, "big")
        chunks.append(header)
        chunks.append(plane.data)
        chunks.append(_u32(plane.checksum, "big"))
    return b"".join(chunks)


def _has_next_band(band: Band, color: int) -> bool:
    following = band.sibling
    if following is None:
        return False
    return any(p.color_nr == color for p in following.planes)


def _sub_header(
    band: Band, plane: BandPlane, sub_version: int, next_band: bool
) -> tuple[bytes, int]:
    """Build the plane sub-header; return it with its checksum contribution."""
    order = _byteorder(plane.endian)
    signature = _u32(_SUBHEADER_SIGNATURE + (sub_version << 28), order)
    if sub_version != 3:
        return signature, sum(signature)

    extra = 0x39 + 0xAB + 0xCD + 0xEF
    if not band.band_nr:
        state = _STATE_FIRST_BAND
    elif next_band:
        state = _STATE_NEXT_BAND
        extra += 0x01
    else:
        state = _STATE_LAST_BAND
        extra += 0x02
    size_field = _u32(plane.data_size, order)
    extra += sum(size_field)
    return signature + size_field + _u32(state, order) + bytes(5 * 4), extra


def render_band(request: Request, band: Band, mono: bool) -> bytes:
    """Render every plane of a band using the QPDL band layout."""
    if band.parent is None:
        raise RenderError("Inconsistent data: band has no parent page")
    version = request.printer.qpdl_version
    color = request.printer.color
    sub_version = 3 if band.parent.compression == SUBHEADER_V3_COMPRESSION else 0

    chunks = []
    header_sent = False
    for index in range(band.planes_nr):
        plane = band.plane(index)
        if plane is None:
            raise RenderError("Inconsistent data. Operation aborted")
        compression = plane.compression
        checksum = plane.checksum
        raw = compression in RAW_COMPRESSIONS

        next_band = bool(sub_version) and _has_next_band(band, plane.color_nr)

        data_size = plane.data_size
        if not raw:
            data_size += 4
        if version > 0:
            data_size += 4
            if sub_version == 3:
                data_size += 7 * 4

        header = b""
        if not header_sent or version == 2:
            header = bytes((BAND_SIGNATURE, _u8(band.band_nr)))
            header += _be16(band.width) + _be16(band.height)
            header_sent = True
        if color:
            header += bytes((4 if mono else _u8(plane.color_nr),))
        header += bytes((_u8(compression),)) + _u32(data_size, "big")
        chunks.append(header)

        if not raw:
            sub_header, extra = _sub_header(band, plane, sub_version, next_band)
            checksum += extra
            chunks.append(sub_header)

        chunks.append(plane.data)

        trailer = _u32(checksum, "big")
        if color and version in (1, 5) and index + 1 == band.planes_nr:
            trailer += b"\x00"
        chunks.append(trailer)
    return b"".join(chunks)


def _duplex_values(
    request: Request, page: Page, last_page: bool
) -> tuple[int, int, int]:
    paper_source = request.printer.paper_source
    mode = request.duplex
    tumble = page.page_nr % 2
    if mode is Duplex.SIMPLEX:
        duplex = 0 if page.compression == JBIG_COMPRESSION else 1
        tumble = 0
    elif mode is Duplex.LONG_EDGE:
        duplex = 1
    elif mode is Duplex.SHORT_EDGE:
        duplex = 0
    else:
        duplex = 0
        if tumble and not last_page:
            paper_source = MULTI_PAPER_SOURCE
    return duplex, tumble, paper_source


def render_page(
    request: Request, page: Optional[Page], out: BinaryIO, last_page: bool = False
) -> None:
    """Write a whole page (header, bands, footer) to the binary stream ``out``."""
    if page is None:
        raise RenderError("Try to render a NULL page")

    printer = request.printer
    duplex, tumble, paper_source = _duplex_values(request, page, last_page)

    jbig = page.compression == JBIG_COMPRESSION
    if jbig:
        width = math.ceil(300 * (printer.page_width / 72.0))
        height = math.ceil(300 * (printer.page_height / 72.0))
    else:
        width = page.width
        height = page.height

    header = bytes((PAGE_SIGNATURE, _u8(page.y_resolution // 100)))
    header += _be16(page.copies_nr)
    header += bytes((_u8(printer.paper_type),))
    header += _be16(width) + _be16(height)
    header += bytes(
        (
            _u8(paper_source),
            _u8(printer.unknown_byte1),
            _u8(duplex),
            _u8(tumble),
            _u8(printer.unknown_byte2),
            _u8(printer.qpdl_version),
            _u8(printer.unknown_byte3),
            _u8(page.x_resolution // 100),
        )
    )

    mono = page.colors_nr == 1
    try:
        out.write(header)
        if jbig:
            out.write(aux_records(page))
        band = page.first_band
        while band is not None:
            if jbig:
                out.write(render_jbig_band(band, mono))
            else:
                out.write(render_band(request, band, mono))
            band = band.sibling
        out.write(bytes((PAGE_FOOTER_SIGNATURE,)) + _be16(page.copies_nr))
    except OSError as exc:
        raise RenderError(f"Error while sending data to the printer ({exc})") from exc