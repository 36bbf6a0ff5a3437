"""Reading of the PJL header that precedes QPDL data."""

from __future__ import annotations

import sys
from typing import IO, Optional, TextIO, Union

_PREFIX = "@PJL "
_NAME_WIDTH = 30


class PJLError(ValueError):
    """Raised when the PJL header is malformed or selects another language."""


def _simplified(text: str) -> str:
    return " ".join(text.split())


def _decode(line: Union[str, bytes]) -> str:
    return line.decode("latin-1") if isinstance(line, bytes) else line


def parse_pjl_header(
    stream: IO, quiet: bool = False, out: Optional[TextIO] = None
) -> list[tuple[str, str]]:
    """Read PJL lines up to ``ENTER LANGUAGE = QPDL``.

    Returns the (command, argument) pairs read before it. The stream is left
    positioned on the first byte after that line.
    """
    if out is None:
        out = sys.stdout
    if not quiet:
        out.write("PJL header: \n")

    commands: list[tuple[str, str]] = []
    while True:
        raw = stream.readline()
        if not raw:
            raise PJLError("PJL header ended before ENTER LANGUAGE")
        line = _decode(raw)
        if not line.startswith(_PREFIX):
            raise PJLError(f"Unknown PJL argument: {line.rstrip(chr(10) + chr(13))}")
        body = line[len(_PREFIX):]
        name, _, value = body.partition("=")
        command = _simplified(name)
        arg = _simplified(value)
        if command == "ENTER LANGUAGE":
            if arg != "QPDL":
                raise PJLError(f"Unsupported printer language: {arg}")
            if not quiet:
                out.write("\n")
            return commands
        commands.append((command, arg))
        if not quiet:
            dots = "." * max(0, _NAME_WIDTH - len(command))
            out.write(f"    {command}{dots} = {arg}\n")