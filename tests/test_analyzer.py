import io

import pytest

from qpdlkit.analyzer import AnalysisError, DocumentType, QPDLAnalyzer
from qpdlkit.job import Printer, Request
from qpdlkit.model import Band, BandPlane, Endian, Page
from qpdlkit.render import render_page


def _stream(planes, *, qpdl_version=1, color=False, compression=0x11,
            colors_nr=1, copies=2):
    printer = Printer(qpdl_version=qpdl_version, color=color, paper_type=2)
    request = Request(options={}, printer=printer)
    page = Page(x_resolution=600, y_resolution=600, width=4960, height=7016,
                colors_nr=colors_nr, page_nr=1, copies_nr=copies,
                compression=compression)
    band = Band(band_nr=0, width=16, height=8)
    for plane in planes:
        band.register_plane(plane)
    page.register_band(band)
    buf = io.BytesIO()
    render_page(request, page, buf)
    return io.BytesIO(buf.getvalue())


def _plane(data, color_nr=1, endian=Endian.BIG_ENDIAN, compression=0x11,
           checksum=None):
    return BandPlane(color_nr=color_nr, data=data, endian=endian,
                     compression=compression,
                     checksum=sum(data) if checksum is None else checksum)


def test_round_trip_page_header():
    stream = _stream([_plane(b"abc")])
    pages = QPDLAnalyzer(DocumentType.SPL2, quiet=True).parse(stream)
    assert len(pages) == 1
    info = pages[0]
    assert info.copies_nr == 2
    assert info.footer_copies == 2
    assert info.x_resolution == 600
    assert info.y_resolution == 600
    assert info.width == 4960
    assert info.height == 7016
    assert info.qpdl_version == 1
    assert info.paper_type == 2


def test_little_endian_band_is_accepted():
    stream = _stream([_plane(b"xyz", endian=Endian.LITTLE_ENDIAN)])
    pages = QPDLAnalyzer(DocumentType.SPL2, quiet=True).parse(stream)
    assert [p.page_nr for p in pages] == [1]


def test_empty_stream_has_no_pages():
    assert QPDLAnalyzer(quiet=True).parse(io.BytesIO(b"")) == []


def test_end_marker_stops_parsing():
    data = bytes([0x09]) + bytes(16)
    assert QPDLAnalyzer(quiet=True).parse(io.BytesIO(data)) == []


def test_bad_page_signature():
    data = bytes([0x05]) + bytes(16)
    with pytest.raises(AnalysisError, match="bad page header signature"):
        QPDLAnalyzer(quiet=True).parse(io.BytesIO(data))


def test_bad_checksum():
    stream = _stream([_plane(b"abc", checksum=1)])
    with pytest.raises(AnalysisError, match="checksum"):
        QPDLAnalyzer(quiet=True).parse(stream)


def test_missing_footer_is_an_error():
    full = _stream([_plane(b"abc")]).getvalue()
    with pytest.raises(AnalysisError):
        QPDLAnalyzer(quiet=True).parse(io.BytesIO(full[:-3]))


def test_bad_band_signature():
    full = bytearray(_stream([_plane(b"abc")]).getvalue())
    full[0x11] = 0x07
    with pytest.raises(AnalysisError, match="bad band header signature"):
        QPDLAnalyzer(quiet=True).parse(io.BytesIO(bytes(full)))


def test_verbose_output():
    out = io.StringIO()
    QPDLAnalyzer(DocumentType.SPL2).parse(_stream([_plane(b"abc")]), out)
    text = out.getvalue()
    assert "Page 1 header:" in text
    assert "Paper type....... = A4" in text
    assert "Page 1 done (2 copie(s))." in text
    assert "(0x11)" in text


def test_dump_writes_band_data(tmp_path):
    stream = _stream([_plane(b"abc")])
    analyzer = QPDLAnalyzer(DocumentType.SPL2, quiet=True, dump=True,
                            directory=tmp_path)
    analyzer.parse(stream)
    assert (tmp_path / "page001-cyan.dump").read_bytes() == b"abc"


def test_splc_multiple_colors_dump(tmp_path):
    planes = [_plane(b"cc", color_nr=1), _plane(b"kkk", color_nr=4)]
    stream = _stream(planes, color=True, colors_nr=4)
    analyzer = QPDLAnalyzer(DocumentType.SPLC, quiet=True, dump=True,
                            directory=tmp_path)
    pages = analyzer.parse(stream)
    assert len(pages) == 1
    assert (tmp_path / "page001-cyan.dump").read_bytes() == b"cc"
    assert (tmp_path / "page001-black.dump").read_bytes() == b"kkk"
    assert (tmp_path / "page001-magenta.dump").read_bytes() == b""


def test_sub_header_version_3_is_stripped(tmp_path):
    stream = _stream([_plane(b"jbigdata", compression=0x13)], compression=0x13)
    analyzer = QPDLAnalyzer(DocumentType.SPL2, quiet=True, dump=True,
                            directory=tmp_path)
    analyzer.parse(stream)
    assert (tmp_path / "page001-cyan.dump").read_bytes() == b"jbigdata"


def test_splc_version2_bad_color():
    stream = _stream([_plane(b"abc", color_nr=5)], qpdl_version=2, color=True,
                     colors_nr=4)
    with pytest.raises(AnalysisError, match="bad color value"):
        QPDLAnalyzer(DocumentType.SPLC, quiet=True).parse(stream)


def test_unsupported_compression_when_decompressing(tmp_path):
    stream = _stream([_plane(b"abc", compression=0x42)])
    analyzer = QPDLAnalyzer(DocumentType.SPL2, quiet=True, decompression=True,
                            directory=tmp_path)
    with pytest.raises(AnalysisError, match="Unsupported compression"):
        analyzer.parse(stream)


def test_page_numbers_keep_counting_across_pages():
    one = _stream([_plane(b"abc")]).getvalue()
    pages = QPDLAnalyzer(quiet=True).parse(io.BytesIO(one + one))
    assert [p.page_nr for p in pages] == [1, 2]