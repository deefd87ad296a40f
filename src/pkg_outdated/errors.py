"""Exception hierarchy for the outdated command.

Purpose
-------
Give every fatal condition a named type so the command line can report it
and exit with a failure status, while library callers can catch precisely
what they care about.

Contents
--------
* :class:`OutdatedError` - root of the hierarchy
* :class:`VersionParseError` - malformed version or version range text
* :class:`DescriptionError` - package description absent, ambiguous or malformed
* :class:`FinalizationError` - package description cannot be finalized
* :class:`FreezeFileError` - freeze file cannot be read or parsed
* :class:`ProjectRootNotFoundError` - no project marker above the working dir
* :class:`IndexLoadError` - package index snapshot cannot be loaded
"""

from __future__ import annotations


class OutdatedError(Exception):
    """Base class for all fatal errors raised by pkg_outdated."""


class VersionParseError(OutdatedError, ValueError):
    """Raised when a version or version range cannot be parsed."""


class DescriptionError(OutdatedError):
    """Raised when the package description cannot be located or read."""


class FinalizationError(OutdatedError):
    """Raised when a package description cannot be finalized."""


class FreezeFileError(OutdatedError):
    """Raised when a freeze file is unreadable or malformed."""


class ProjectRootNotFoundError(OutdatedError):
    """Raised when no project marker exists above the working directory."""


class IndexLoadError(OutdatedError):
    """Raised when the package index snapshot cannot be loaded."""


__all__ = [
    "DescriptionError",
    "FinalizationError",
    "FreezeFileError",
    "IndexLoadError",
    "OutdatedError",
    "ProjectRootNotFoundError",
    "VersionParseError",
]
