"""In-memory representation of pages, bands and band planes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

MAX_PLANES = 4
BIH_SIZE = 20


class Endian(enum.Enum):
    """Byte order used for the sub-header of a band plane."""

    DEPENDANT = "dependant"
    BIG_ENDIAN = "big"
    LITTLE_ENDIAN = "little"


@dataclass
class BandPlane:
    """Compressed data of one colour of one band."""

    color_nr: int = 0
    data: bytes = b""
    endian: Endian = Endian.DEPENDANT
    compression: int = 0
    checksum: int = 0

    def __post_init__(self) -> None:
        self.data = bytes(self.data)

    @property
    def data_size(self) -> int:
        """Number of bytes of compressed data."""
        return len(self.data)


@dataclass(eq=False)
class Band:
    """A horizontal slice of a page holding up to four colour planes."""

    band_nr: int = 0
    width: int = 0
    height: int = 0
    parent: Optional["Page"] = None
    sibling: Optional["Band"] = None
    planes: list[BandPlane] = field(default_factory=list)

    def register_plane(self, plane: BandPlane) -> None:
        """Add a plane; planes beyond the fourth are ignored."""
        if len(self.planes) < MAX_PLANES:
            self.planes.append(plane)

    def plane(self, nr: int) -> Optional[BandPlane]:
        """Return plane number ``nr`` or None if there is no such plane."""
        if 0 <= nr < len(self.planes):
            return self.planes[nr]
        return None

    @property
    def planes_nr(self) -> int:
        """Number of registered planes."""
        return len(self.planes)


@dataclass(eq=False)
class Page:
    """A page: first as bitmap planes, then as a chain of compressed bands."""

    x_resolution: int = 0
    y_resolution: int = 0
    width: int = 0
    height: int = 0
    colors_nr: int = 0
    page_nr: int = 0
    copies_nr: int = 0
    compression: int = 0
    empty: bool = True
    bih: Optional[bytes] = None
    _planes: list[Optional[bytes]] = field(
        default_factory=lambda: [None] * MAX_PLANES, repr=False
    )
    _bands: list[Band] = field(default_factory=list, repr=False)

    def convert_to_x_resolution(self, f: float) -> float:
        """Convert a length given at 72 DPI to the X resolution."""
        return f * self.x_resolution / 72.0

    def convert_to_y_resolution(self, f: float) -> float:
        """Convert a length given at 72 DPI to the Y resolution."""
        return f * self.y_resolution / 72.0

    def set_plane_buffer(self, color: int, buffer: bytes) -> None:
        """Register the bitmap of a colour plane."""
        if not 0 <= color < MAX_PLANES:
            raise IndexError(f"invalid colour plane number {color}")
        self._planes[color] = buffer
        self.empty = False

    def plane_buffer(self, color: int) -> Optional[bytes]:
        """Return the bitmap of a colour plane, or None if out of range or unset."""
        if 0 <= color < min(self.colors_nr, MAX_PLANES):
            return self._planes[color]
        return None

    def flush_planes(self) -> None:
        """Drop every bitmap plane to release its memory."""
        self._planes = [None] * MAX_PLANES

    def set_empty(self) -> None:
        """Mark the page as empty, e.g. after a compression error."""
        self.empty = True

    def register_band(self, band: Band) -> None:
        """Append a band, making it the sibling of the previous last band."""
        band.parent = self
        band.sibling = None
        if self._bands:
            self._bands[-1].sibling = band
        self._bands.append(band)

    @property
    def first_band(self) -> Optional[Band]:
        """The first registered band, or None."""
        return self._bands[0] if self._bands else None

    @property
    def bands(self) -> tuple[Band, ...]:
        """All registered bands in order."""
        return tuple(self._bands)

    @property
    def bands_nr(self) -> int:
        """Number of registered bands."""
        return len(self._bands)

    def set_bih(self, bih: bytes) -> None:
        """Store an independent copy of the 20-byte JBIG header."""
        if len(bih) < BIH_SIZE:
            raise ValueError(f"BIH must hold {BIH_SIZE} bytes, got {len(bih)}")
        self.bih = bytes(bih[:BIH_SIZE])