"""Verbosity levels and their mapping onto the standard logging module."""

from __future__ import annotations

import logging
from enum import IntEnum


class Verbosity(IntEnum):
    """How chatty the command is."""

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEAFENING = 3

    @classmethod
    def from_int(cls, value: int) -> Verbosity:
        """Clamp an integer such as a ``-v`` count into the known levels."""
        return cls(max(cls.SILENT, min(cls.DEAFENING, value)))


_LEVELS = {
    Verbosity.SILENT: logging.ERROR,
    Verbosity.NORMAL: logging.WARNING,
    Verbosity.VERBOSE: logging.INFO,
    Verbosity.DEAFENING: logging.DEBUG,
}


def configure_logging(verbosity: Verbosity) -> None:
    """Send pkg_outdated log records to stderr at the level ``verbosity`` implies."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", force=True)
    logging.getLogger("pkg_outdated").setLevel(_LEVELS[verbosity])


__all__ = ["Verbosity", "configure_logging"]
