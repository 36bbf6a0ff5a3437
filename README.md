# qpdlkit

qpdlkit handles QPDL, the page description language used by SPL2 and SPLc
laser printers. It works on print streams in both directions:

- **Rendering.** It turns already-compressed page bands into the binary
  QPDL records a printer expects. These are the page header, the band
  headers and sub-headers, the checksums and the page footer. For pages
  whose bands use JBIG (0x15), it also writes the auxiliary records.
- **Analysis.** It reads an existing QPDL stream back. This covers the PJL
  header, the page headers and the band records. It verifies band
  signatures and checksums. Bands compressed with algorithm 0x11 can be
  decoded into PBM bitmaps.

The package uses only the standard library.

## Modules

| Module | Contents |
| --- | --- |
| `qpdlkit.model` | `Page`, `Band`, `BandPlane` and `Endian`: the containers that are rendered |
| `qpdlkit.job` | `Printer`, `Request`, `Duplex`, `is_true`, `resolve_duplex`, `VERSION` |
| `qpdlkit.render` | `render_page`, `render_band`, `render_jbig_band`, `aux_records`, `RenderError` |
| `qpdlkit.semaphore` | `CountingSemaphore`: a counting semaphore that can also be used as a mutex |
| `qpdlkit.pjl` | `parse_pjl_header`, `PJLError` |
| `qpdlkit.decompress` | `decompress_0x11`, `read16`, `read32`, `DecompressionError` |
| `qpdlkit.bandpage` | `PageDecoder`, which collects the bands of one page and writes one file per colour |
| `qpdlkit.analyzer` | `QPDLAnalyzer`, `DocumentType`, `PageInfo`, `AnalysisError` |
| `qpdlkit.cmdline` | `CommandLine`, `ArgError`: a long/short option parser that counts parameters |

## Building a page and rendering it

A `Page` holds its bands as a chain:

- `Page.register_band` sets the band's parent page and links the band as
  the sibling of the band registered before it.
- A `Band` holds up to four `BandPlane` objects. Each plane carries its
  colour number, compressed data, compression number, checksum and
  `Endian`.

```python
import io
from qpdlkit.job import Printer, Request
from qpdlkit.model import Band, BandPlane, Endian, Page
from qpdlkit.render import render_page

printer = Printer(qpdl_version=1, color=False, paper_type=2)
request = Request.load({"Duplex": "None"}, printer, "job", "user", "title", 1)

page = Page(x_resolution=600, y_resolution=600, width=4960, height=7016,
            colors_nr=1, page_nr=1, copies_nr=1, compression=0x11)
band = Band(band_nr=0, width=4960, height=128)
band.register_plane(BandPlane(color_nr=4, data=b"...", compression=0x11,
                              endian=Endian.BIG_ENDIAN))
page.register_band(band)

out = io.BytesIO()
render_page(request, page, out, False)
```

`render_page(request, page, out, last_page=False)` writes to the binary
stream `out`, in this order:

1. the 17-byte page header;
2. the auxiliary records, for 0x15 pages only;
3. every band in the chain;
4. the 3-byte page footer.

It raises `RenderError` in these cases:

- the page is `None`;
- a band has no parent page;
- a 0x15 page lacks its 20-byte JBIG header (`Page.set_bih`);
- writing to `out` fails.

`render_band` and `render_jbig_band` return the bytes of a single band, and
`aux_records` returns the auxiliary records of a 0x15 page.

### Job options and duplex

`Request.load(options, printer, job_name, user_name, job_title, copies)`
takes a mapping of PPD keywords to string values. A keyword that belongs to
a group is looked up under the key `(keyword, group)`, as in
`("ManualDuplex", "QPDL")`.

If `job_name` or `job_title` is `None`, a default placeholder is used. If
`user_name` is `None`, it is taken from the `USER` environment variable.

`resolve_duplex(duplex, jcl_duplex, manual_duplex)` works out the duplex
mode:

- `DuplexNoTumble` selects long-edge duplex.
- `DuplexTumble` selects short-edge duplex.
- When `manual_duplex` is true, these become the manual variants.
- Any other value means simplex.
- `jcl_duplex` is used only when `duplex` is `None`.
- The comparison ignores case.

`is_true` accepts `true`, `enable`, `enabled`, `yes`, `1` and `on`.

## Analysing a stream

First read the PJL preamble, then hand the rest of the stream to the
analyzer:

```python
import sys
from qpdlkit.analyzer import DocumentType, QPDLAnalyzer
from qpdlkit.pjl import parse_pjl_header

with open("job.prn", "rb") as stream:
    commands = parse_pjl_header(stream, quiet=True)
    analyzer = QPDLAnalyzer(DocumentType.SPL2, decompression=True,
                            directory="out")
    pages = analyzer.parse(stream, sys.stdout)
```

### The PJL header

`parse_pjl_header` reads `@PJL` lines up to `ENTER LANGUAGE = QPDL`. It
returns the `(command, argument)` pairs it read before that line. It raises
`PJLError` in these cases:

- a line does not start with `@PJL `;
- another language is selected;
- the header ends before `ENTER LANGUAGE`.

### The page analysis

`QPDLAnalyzer.parse` does the following:

- It prints a summary of each page header unless `quiet` is set.
- It checks the signature of every band. It also checks the checksum when
  the QPDL version is above 0.
- It returns one `PageInfo` per page.
- It raises `AnalysisError` on malformed input.

Files are written only when `decompression` or `dump` is set. Each file is
named `page<NNN>-<colour>.<ext>` and goes into `directory`.

- **0x11 bands** are decoded and saved as PBM (`.pbm`) images when the page
  ends.
- **0x13 bands** are stored as they arrive (`.jbg`), each prefixed with its
  length.
- **With `dump`**, the raw band data is written instead (`.dump`).

### Decoding a single band

```python
from qpdlkit.decompress import decompress_0x11

bitmap = decompress_0x11(band_bytes, width, height, True)
```

The result is the band's 1-bit bitmap in row order, with 1 meaning black.
`DecompressionError` is raised when the band is too short, truncated, or
refers outside the data already decoded.

## Option parsing

`CommandLine` takes option specifications of the form `"name=N,s"`. Here
`N` is the number of values the option takes and `s` is its short letter.
A leading `~` marks an option, such as `--help`, that may stand in for the
required positional parameters.

```python
from qpdlkit.cmdline import CommandLine

cmd = CommandLine(["~help,h", "output=1,o"])
if not cmd.parse(["prog", "-o", "file.pbm", "input.jbg"], 1):
    print("\n".join(cmd.error_messages()))
```

## What the package does not do

- It provides no command-line programs. `CommandLine` is a parser only.
- It does not read raster input, PPD files or page bitmaps. It has no
  compression encoders. Bands must be supplied already compressed, with
  their checksums.
- It does not write the PJL job header or footer. The `begin_pjl` and
  `end_pjl` fields of `Printer` are only stored.
- It does not decode JBIG data. The analyzer stores 0x13 bands as they are.