"""Job request and printer description used when rendering a document."""

from __future__ import annotations

import enum
import os
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Optional

VERSION = "2.0.0"
PPD_VERSION = "2.0.0"

UNKNOWN_JOB_NAME = "Unknown"
UNKNOWN_JOB_TITLE = "Unknown job title"

_TRUE_WORDS = frozenset({"true", "enable", "enabled", "yes", "1", "on"})


class Duplex(enum.Enum):
    """Duplex modes of a job."""

    SIMPLEX = "simplex"
    LONG_EDGE = "long-edge"
    SHORT_EDGE = "short-edge"
    MANUAL_LONG_EDGE = "manual-long-edge"
    MANUAL_SHORT_EDGE = "manual-short-edge"

    @property
    def is_manual(self) -> bool:
        """True for the manual duplex modes."""
        return self in (Duplex.MANUAL_LONG_EDGE, Duplex.MANUAL_SHORT_EDGE)


def is_true(value: Optional[str]) -> bool:
    """Return True if ``value`` is true, enable, enabled, yes, 1 or on."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_WORDS


def _same(value: Optional[str], expected: str) -> bool:
    return value is not None and value.lower() == expected.lower()


def resolve_duplex(
    duplex: Optional[str], jcl_duplex: Optional[str], manual_duplex: bool
) -> Duplex:
    """Work out the duplex mode from the Duplex and JCLDuplex settings.

    ``jcl_duplex`` is only consulted when ``duplex`` is not set.
    """
    value = duplex if duplex is not None else jcl_duplex
    if _same(value, "DuplexNoTumble"):
        return Duplex.MANUAL_LONG_EDGE if manual_duplex else Duplex.LONG_EDGE
    if _same(value, "DuplexTumble"):
        return Duplex.MANUAL_SHORT_EDGE if manual_duplex else Duplex.SHORT_EDGE
    return Duplex.SIMPLEX


@dataclass
class Printer:
    """Everything the renderer needs to know about the target printer."""

    manufacturer: str = ""
    model: str = ""
    begin_pjl: str = ""
    end_pjl: str = ""
    color: bool = False
    qpdl_version: int = 0
    band_height: int = 0
    packet_size: int = 0
    paper_type: int = 0
    paper_source: int = 1
    paper_width: float = 0.0
    paper_height: float = 0.0
    unknown_byte1: int = 0
    unknown_byte2: int = 0
    unknown_byte3: int = 0
    page_width: float = 0.0
    page_height: float = 0.0
    hard_margin_x: float = 0.0
    hard_margin_y: float = 0.0


OptionKey = Hashable


@dataclass
class Request:
    """A print job: who asked for it, how many copies, and how to print it.

    ``options`` maps PPD keywords to their string values. A keyword that
    belongs to a group is looked up with the key ``(keyword, group)``.
    """

    options: Mapping[OptionKey, str]
    printer: Printer
    job_name: str = UNKNOWN_JOB_NAME
    user_name: Optional[str] = None
    job_title: str = UNKNOWN_JOB_TITLE
    copies_nr: int = 1
    duplex: Duplex = Duplex.SIMPLEX
    reverse_duplex: bool = False
    extra: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(
        cls,
        options: Optional[Mapping[OptionKey, str]],
        printer: Optional[Printer],
        job_name: Optional[str],
        user_name: Optional[str],
        job_title: Optional[str],
        copies: int,
    ) -> "Request":
        """Build a request from the PPD options and the job arguments."""
        if options is None:
            raise ValueError("Request: no PPD options given")
        if printer is None:
            raise ValueError("Request: cannot load printer information")
        if copies < 0:
            raise ValueError(f"Request: invalid number of copies {copies}")

        manual = is_true(options.get(("ManualDuplex", "QPDL")))
        duplex = resolve_duplex(
            options.get("Duplex"), options.get("JCLDuplex"), manual
        )
        return cls(
            options=options,
            printer=printer,
            job_name=job_name if job_name is not None else UNKNOWN_JOB_NAME,
            user_name=user_name if user_name is not None else os.environ.get("USER"),
            job_title=job_title if job_title is not None else UNKNOWN_JOB_TITLE,
            copies_nr=copies,
            duplex=duplex,
            reverse_duplex=is_true(options.get("ReverseDuplex")),
        )