"""Analysis of QPDL print streams: page headers, bands and their checksums."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from .bandpage import PageDecoder
from .decompress import DecompressionError

PAGE_HEADER_SIZE = 0x11
END_OF_DOCUMENT = 0x09
BAND_SIGNATURE = 0x0C
END_OF_PAGE = 0x01

_PAPER_TYPE_NAMES = (
    "Letter", "Legal", "A4", "Executive", "Ledger",
    "A3", "Com10", "Monarch", "C5", "DL",
    "JB4", "JB5", "B5", "Not listed", "JPost",
    "JDouble", "A5", "A6", "JB6", "*Unknown*",
    "*Unknown*", "Custom", "*Unknown", "C6", "Folio",
)

_PAPER_SOURCE_NAMES = (
    "*Unknown*", "Auto", "Manual", "Multi", "Top", "Lower", "Envelopes", "Third",
)


class DocumentType(enum.Enum):
    """Family of the printer language: monochrome SPL2 or colour SPLc."""

    SPL2 = "spl2"
    SPLC = "splc"


class AnalysisError(ValueError):
    """Raised when a QPDL stream is malformed."""


@dataclass(frozen=True)
class PageInfo:
    """Values read from the header and footer of one page."""

    page_nr: int
    qpdl_version: int
    copies_nr: int
    x_resolution: int
    y_resolution: int
    paper_type: int
    paper_source: int
    width: int
    height: int
    duplex: int
    tumble: int
    unknown: tuple[int, int, int]
    footer_copies: int = 0


def _name(names: tuple[str, ...], value: int) -> str:
    if value < len(names):
        return names[value]
    return f"*Unknown* ({value})"


def _read(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise AnalysisError(f"QPDL: truncated {what}")
    return data


def _band_record(stream: BinaryIO) -> tuple[int, bytes]:
    header = _read(stream, 5, "band record")
    size = int.from_bytes(header[1:5], "big")
    return header[0], _read(stream, size, "band data")


class QPDLAnalyzer:
    """Walks a QPDL stream page by page, checking and optionally decoding bands.

    With ``decompression`` set, decoded bands are written to files in
    ``directory``; with ``dump`` set, the raw band data is written instead.
    """

    def __init__(
        self,
        doc_type: DocumentType = DocumentType.SPL2,
        quiet: bool = False,
        decompression: bool = False,
        dump: bool = False,
        directory: Union[str, Path] = ".",
        err: Optional[TextIO] = None,
    ) -> None:
        self.doc_type = doc_type
        self.quiet = quiet
        self.decompression = decompression
        self.dump = dump
        self.directory = Path(directory)
        self.err = err if err is not None else sys.stderr
        self.page_nr = 0
        self.current_band_nr = 0
        self._qpdl = 0

    def parse(self, stream: BinaryIO, out: Optional[TextIO] = None) -> list[PageInfo]:
        """Analyse every page of ``stream``; return what was read of each page."""
        if out is None:
            out = sys.stdout
        colors = 4 if self.doc_type is DocumentType.SPLC else 1
        decoder = PageDecoder(colors, self.directory, self.err)
        pages: list[PageInfo] = []
        with decoder:
            while True:
                header = stream.read(PAGE_HEADER_SIZE)
                if not header:
                    break
                self.page_nr += 1
                decoder.clear()
                decoder.page_nr = self.page_nr
                info = self._read_page_header(header, out)
                if info is None:
                    break
                self._read_page_content(stream, decoder, out)
                footer = _read(stream, 2, "page footer")
                copies = int.from_bytes(footer, "big")
                if not self.quiet:
                    out.write(f"Page {self.page_nr} done ({copies} copie(s)).\n\n")
                try:
                    decoder.flush()
                except DecompressionError as exc:
                    raise AnalysisError(str(exc)) from exc
                pages.append(
                    PageInfo(**{**info.__dict__, "footer_copies": copies})
                )
        return pages

    def _read_page_header(self, header: bytes, out: TextIO) -> Optional[PageInfo]:
        if header[0] == END_OF_DOCUMENT:
            return None
        if header[0] != 0:
            raise AnalysisError(f"QPDL: bad page header signature ({header[0]})")
        if len(header) != PAGE_HEADER_SIZE:
            raise AnalysisError("QPDL: truncated page header")

        y_res = header[0x01] * 100
        x_res = header[0x10] * 100 if header[0x10] else y_res
        info = PageInfo(
            page_nr=self.page_nr,
            qpdl_version=header[0x0E],
            copies_nr=int.from_bytes(header[0x02:0x04], "big"),
            x_resolution=x_res,
            y_resolution=y_res,
            paper_type=header[0x04],
            paper_source=header[0x09],
            width=int.from_bytes(header[0x05:0x07], "big"),
            height=int.from_bytes(header[0x07:0x09], "big"),
            duplex=header[0x0B],
            tumble=header[0x0C],
            unknown=(header[0x0A], header[0x0D], header[0x0F]),
        )
        self._qpdl = info.qpdl_version

        if not self.quiet:
            lines = [
                f"Page {self.page_nr} header:",
                f"    QPDL version..... = {info.qpdl_version}",
                f"    Number of copies. = {info.copies_nr}",
                f"    Resolution....... = {info.x_resolution}×{info.y_resolution}",
                f"    Paper type....... = {_name(_PAPER_TYPE_NAMES, info.paper_type)}",
                "    Paper source..... = "
                f"{_name(_PAPER_SOURCE_NAMES, info.paper_source)}",
                f"    Printable area... = {info.width}×{info.height}",
                f"    Duplex - Tumble.. = {info.duplex} {info.tumble}",
                "    Unknown bytes.... = " + " ".join(str(b) for b in info.unknown),
            ]
            out.write("\n".join(lines) + "\n")
        return info

    def _read_page_content(
        self, stream: BinaryIO, decoder: PageDecoder, out: TextIO
    ) -> None:
        if not self.quiet:
            out.write(
                "    Analysing and decompression" if self.decompression
                else "    Analysing"
            )
        compression = 0
        while True:
            signature = stream.read(1)
            if not signature:
                raise AnalysisError("QPDL: unexpected end of data inside a page")
            if signature[0] == END_OF_PAGE:
                if not self.quiet:
                    out.write(f"(0x{compression:x})\n")
                return
            if signature[0] != BAND_SIGNATURE:
                raise AnalysisError(
                    f"QPDL: bad band header signature ({signature[0]})"
                )

            header = _read(stream, 5, "band header")
            self.current_band_nr = header[0]
            decoder.current_band_nr = header[0]
            width = int.from_bytes(header[1:3], "big")
            height = int.from_bytes(header[3:5], "big")
            if not self.quiet:
                out.write(".")
                out.flush()

            splc = self.doc_type is DocumentType.SPLC
            if splc and (self._qpdl <= 1 or self._qpdl == 5):
                while True:
                    raw = stream.read(1)
                    if not raw or raw[0] == 0:
                        break
                    color = raw[0]
                    if color > 4:
                        raise AnalysisError(
                            f"QPDL: bad color value ({color}) in band "
                            f"{self.current_band_nr}"
                        )
                    compression, content = _band_record(stream)
                    self._process_band(
                        decoder, color, width, height, compression, content
                    )
            elif splc and self._qpdl == 2:
                color = _read(stream, 1, "band colour")[0]
                if color == 0 or color > 4:
                    raise AnalysisError(
                        f"QPDL: bad color value ({color}) in band "
                        f"{self.current_band_nr}"
                    )
                compression, content = _band_record(stream)
                self._process_band(decoder, color, width, height, compression, content)
            else:
                compression, content = _band_record(stream)
                self._process_band(decoder, 1, width, height, compression, content)

    def _process_band(
        self,
        decoder: PageDecoder,
        color: int,
        width: int,
        height: int,
        compression: int,
        content: bytes,
    ) -> None:
        if len(content) < 4:
            raise AnalysisError("QPDL: band data too short for a signature")
        b0, b1, b2, b3 = content[:4]
        if b0 & 0xF == 0x9 and (b1, b2, b3) == (0xAB, 0xCD, 0xEF):
            big_endian, version = True, b0 >> 4
        elif b3 & 0xF == 0x9 and (b2, b1, b0) == (0xAB, 0xCD, 0xEF):
            big_endian, version = False, b3 >> 4
        else:
            raise AnalysisError(
                f"QPDL: Invalid signature (0x{b0:x}{b1:x}{b2:x}{b3:x})"
            )
        decoder.sub_header_version = version
        decoder.big_endian = big_endian

        if self._qpdl > 0:
            given = int.from_bytes(content[-4:], "big")
            computed = sum(content[:-4]) & 0xFFFFFFFF
            if given != computed:
                raise AnalysisError(
                    f"QPDL: band checksum invalid! (0x{given:08x}-0x{computed:08x})"
                )
            content = content[:-4]
        content = content[4:]

        if self.decompression or self.dump:
            try:
                decoder.process(
                    color, width, height, 0 if self.dump else compression, content
                )
            except DecompressionError as exc:
                raise AnalysisError(str(exc)) from exc