"""Collect decoded QPDL bands of a page and save them as image files."""

from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from .decompress import DecompressionError, decompress_0x11, read32

COLOR_NAMES = ("cyan", "magenta", "yellow", "black")
MAX_SUB_HEADER_VERSION = 3

_EXTENSIONS = {0x00: "dump", 0x11: "pbm", 0x13: "jbg"}


class PageDecoder:
    """Receives the bands of one page and writes one file per colour layer.

    Files are named ``page<NNN>-<colour>.<ext>`` inside ``directory``; the
    extension depends on the compression of the first band of the page.
    Bands compressed with algorithm 0x11 are decoded and written as PBM
    images by :meth:`flush`; other bands are stored as they arrive.
    """

    def __init__(
        self,
        color_count: int = 1,
        directory: Union[str, Path] = ".",
        err: Optional[TextIO] = None,
    ) -> None:
        if not 1 <= color_count <= len(COLOR_NAMES):
            raise ValueError(f"invalid number of colours {color_count}")
        self.color_count = color_count
        self.directory = Path(directory)
        self.err = err if err is not None else sys.stderr
        self.page_nr = 0
        self.current_band_nr = 0
        self.sub_header_version = 0
        self.big_endian = True
        self._files: list[BinaryIO] = []
        self._reset_layers()

    def _reset_layers(self) -> None:
        self._layers = [bytearray() for _ in COLOR_NAMES]
        self._last_band = [0] * len(COLOR_NAMES)
        self._width = [0] * len(COLOR_NAMES)
        self._height = [0] * len(COLOR_NAMES)

    @property
    def layers(self) -> tuple[bytes, ...]:
        """The decoded bitmap of each colour layer gathered so far."""
        return tuple(bytes(layer) for layer in self._layers)

    @property
    def is_open(self) -> bool:
        """True while the output files of the current page are open."""
        return bool(self._files)

    def _file_path(self, color: int, extension: str) -> Path:
        return self.directory / f"page{self.page_nr:03d}-{COLOR_NAMES[color]}.{extension}"

    def _close_files(self) -> None:
        files, self._files = self._files, []
        for handle in files:
            handle.close()

    def _open_files(self, extension: str) -> None:
        if self._files:
            return
        try:
            for color in range(self.color_count):
                self._files.append(open(self._file_path(color, extension), "wb"))
        except OSError:
            self._close_files()
            raise

    def clear(self) -> None:
        """Close the files and forget every layer, ready for a new page."""
        self._close_files()
        self._reset_layers()

    def __enter__(self) -> "PageDecoder":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._close_files()

    def _strip_sub_header(self, content: bytes) -> bytes:
        if self.sub_header_version < 2:
            return content
        size = read32(content, 0, self.big_endian)
        content = content[4:]
        if self.sub_header_version == 3:
            for i in range(5):
                value = read32(content, (i + 1) * 4, self.big_endian)
                if value:
                    self.err.write(
                        f"Page: invalid header value in sub-header band ({value})\n"
                    )
            content = content[6 * 4:]
        if len(content) != size:
            raise DecompressionError(
                f"Page: content data is {len(content)} bytes long whereas it "
                f"should be {size} bytes long"
            )
        return content

    def process(
        self, color: int, width: int, height: int, compression: int, content: bytes
    ) -> None:
        """Handle one band of colour ``color`` (1 to 4)."""
        extension = _EXTENSIONS.get(compression)
        if extension is None:
            raise DecompressionError(
                f"Page: Unsupported compression algorithm (0x{compression:x})"
            )
        if self.sub_header_version > MAX_SUB_HEADER_VERSION:
            raise DecompressionError(
                "Page: unsupported band sub-header version "
                f"({self.sub_header_version})"
            )
        index = color - 1
        if not 0 <= index < self.color_count:
            raise DecompressionError(f"Page: invalid colour number {color}")

        self._open_files(extension)
        content = self._strip_sub_header(bytes(content))

        if compression == 0x00:
            self._files[index].write(content)
        elif compression == 0x11:
            self._add_0x11_band(index, width, height, content)
        else:
            self._files[index].write(struct.pack("@L", len(content)))
            self._files[index].write(content)

    def _add_0x11_band(self, index: int, width: int, height: int, data: bytes) -> None:
        self._width[index] = width
        self._height[index] += height
        if self._last_band[index] < self.current_band_nr:
            blank = bytes((width * height + 7) >> 3)
            while self._last_band[index] < self.current_band_nr:
                self._layers[index] += blank
                self._last_band[index] += 1
        band = decompress_0x11(data, width, height, self.big_endian)
        self._layers[index] += band
        self._last_band[index] += 1

    def flush(self) -> None:
        """Write the gathered PBM layers, if any, and close the files."""
        if any(self._last_band) and self._files:
            for color, handle in enumerate(self._files):
                header = (
                    f"P4\n# Page {self.page_nr} - layer {color + 1}\n"
                    f"{self._width[color]} {self._height[color]}\n"
                )
                handle.write(header.encode("latin-1"))
                handle.write(bytes(self._layers[color]))
        self._close_files()