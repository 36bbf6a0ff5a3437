"""Command-line option parsing for the QPDL inspection tools."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import Optional


class ArgError(LookupError):
    """Raised when a parsed option value or parameter is not available."""


class _ErrorKind(enum.IntEnum):
    INTERNAL = 0
    UNKNOWN_OPTION = 1
    NOT_ENOUGH_PARAMETERS = 2
    NOT_ENOUGH_ALONE_PARAMETERS = 3
    TOO_MUCH_PARAMETERS = 4


_MESSAGES = {
    _ErrorKind.INTERNAL: "Invalid argument number",
    _ErrorKind.UNKNOWN_OPTION: "Unknown option {}",
    _ErrorKind.NOT_ENOUGH_PARAMETERS: "Not enough parameter(s) for option {}",
    _ErrorKind.NOT_ENOUGH_ALONE_PARAMETERS: "Not enough parameter(s)",
    _ErrorKind.TOO_MUCH_PARAMETERS: "Too much parameter(s)",
}


def _collect(
    argv: Sequence[str], start: int, wanted: int
) -> tuple[list[str], int, int]:
    """Take up to ``wanted`` non-option arguments from ``start``."""
    params: list[str] = []
    index = start
    while index < len(argv) and wanted:
        if argv[index].startswith("-"):
            break
        params.append(argv[index])
        index += 1
        wanted -= 1
    return params, index, wanted


class CommandLine:
    """Parses long (``--name``) and short (``-n``) options and parameters.

    An option whose long name starts with ``~`` may stand in for the
    required positional parameters (e.g. ``--help``).
    """

    def __init__(self, specs: Optional[Iterable[str]] = None) -> None:
        self._nr_values: dict[str, int] = {}
        self._short: dict[str, str] = {}
        self._can_alter: set[str] = set()
        self.application_name = ""
        self._values: dict[str, list[str]] = {}
        self._alone: list[str] = []
        self._errors: list[tuple[_ErrorKind, str]] = []
        if specs is not None:
            self.add_supported_specs(specs)

    def add_supported(
        self, long_arg: str, short_arg: Optional[str] = None, nr_values: int = 0
    ) -> None:
        """Register an option taking ``nr_values`` values."""
        name = long_arg
        if name.startswith("~"):
            name = name[1:]
            self._can_alter.add(name)
        self._nr_values[name] = nr_values
        if short_arg:
            self._short[short_arg[0]] = name

    def add_supported_specs(self, specs: Iterable[str]) -> None:
        """Register options described as ``"long=nrValues,s"`` strings."""
        for spec in specs:
            first, _, rest = spec.partition(",")
            long_arg = first.split("=")[0]
            parts = first.split("=")
            count = parts[1] if len(parts) > 1 else ""
            nr_values = int(count) if count.isdigit() else 0
            short = rest.split(",")[0][:1] or None
            self.add_supported(long_arg, short, nr_values)

    def _take_option(
        self, argv: Sequence[str], name: str, shown: str, index: int
    ) -> tuple[int, bool]:
        """Read the values of a known option; return next index and alter flag."""
        params, index, missing = _collect(argv, index, self._nr_values[name])
        if missing:
            self._errors.append((_ErrorKind.NOT_ENOUGH_PARAMETERS, shown))
        else:
            self._values[name] = params
        return index, name in self._can_alter

    def parse(self, argv: Sequence[str], max_params: int) -> bool:
        """Parse ``argv`` (program name first); return True if there is no error."""
        self.application_name = ""
        self._values = {}
        self._alone = []
        self._errors = []

        if not argv:
            self._errors.append((_ErrorKind.INTERNAL, ""))
            return False
        self.application_name = argv[0]

        can_alter = False
        notified = False
        i = 1
        while i < len(argv):
            arg = argv[i]
            j = i + 1
            if len(arg) > 1 and arg[0] == "-":
                if arg[1] == "-":
                    name = arg[2:]
                    if name not in self._nr_values:
                        self._errors.append((_ErrorKind.UNKNOWN_OPTION, f"--{name}"))
                    else:
                        j, alters = self._take_option(argv, name, f"--{name}", j)
                        can_alter = can_alter or alters
                else:
                    for ch in arg[1:]:
                        name = self._short.get(ch)
                        if name is None:
                            self._errors.append((_ErrorKind.UNKNOWN_OPTION, f"-{ch}"))
                            continue
                        j, alters = self._take_option(argv, name, f"-{ch}", j)
                        can_alter = can_alter or alters
            elif not max_params and not notified and not can_alter:
                self._errors.append((_ErrorKind.TOO_MUCH_PARAMETERS, ""))
                notified = True
            elif max_params:
                self._alone.append(arg)
                max_params -= 1
            i = j

        if max_params and not can_alter:
            self._errors.append((_ErrorKind.NOT_ENOUGH_ALONE_PARAMETERS, ""))
        return not self._errors

    def error_messages(self) -> list[str]:
        """Human-readable messages for the errors of the last parse."""
        return [_MESSAGES[kind].format(detail) for kind, detail in self._errors]

    def is_option_set(self, name: str) -> bool:
        """True if option ``name`` was given with all its values."""
        return name in self._values

    def option_arg(self, name: str, nr: int) -> str:
        """Return value number ``nr`` of option ``name``."""
        values = self._values.get(name)
        if values is None or not 0 <= nr < len(values):
            raise ArgError(f"option {name} has no value number {nr}")
        return values[nr]

    def parameter(self, nr: int) -> str:
        """Return positional parameter number ``nr``."""
        if not 0 <= nr < len(self._alone):
            raise ArgError(f"no parameter number {nr}")
        return self._alone[nr]