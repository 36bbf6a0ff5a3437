"""Rendering and analysis of QPDL print streams for SPL2/SPLc laser printers."""

__version__ = "2.0.0"