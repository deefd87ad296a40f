"""Read-only package index query surface.

Purpose
-------
Describe how the analyzer asks which versions of a package are published,
and provide the in-memory index loaded from a local snapshot file.

Contents
--------
* :class:`PackageIndex` - protocol consumed by the analyzer
* :class:`InMemoryPackageIndex` - mapping-backed implementation
* :func:`load_package_index` - build an index from a JSON snapshot

System Role
-----------
The index is loaded once per invocation, before the analyzer runs, and is
never mutated afterwards. Fetching the snapshot from a remote repository is
somebody else's job.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from .errors import IndexLoadError
from .schemas import PackageIndexSchema
from .version import Version
from .version_range import VersionRange, as_version_intervals

logger = logging.getLogger(__name__)


class PackageIndex(Protocol):
    """Look up published versions of packages."""

    def versions_of(self, name: str) -> frozenset[Version]:
        ...

    def versions_matching(self, name: str, version_range: VersionRange) -> frozenset[Version]:
        ...


class InMemoryPackageIndex:
    """Package index held in a dictionary of name to versions."""

    def __init__(self, packages: Mapping[str, Iterable[Version]] | None = None) -> None:
        self._packages: dict[str, frozenset[Version]] = {
            name: frozenset(versions) for name, versions in (packages or {}).items()
        }

    def __repr__(self) -> str:
        return f"InMemoryPackageIndex(packages={len(self._packages)})"

    def __len__(self) -> int:
        return len(self._packages)

    def versions_of(self, name: str) -> frozenset[Version]:
        """Return every published version of ``name``; empty if unknown."""
        return self._packages.get(name, frozenset())

    def versions_matching(self, name: str, version_range: VersionRange) -> frozenset[Version]:
        """Return published versions of ``name`` that lie in ``version_range``."""
        intervals = as_version_intervals(version_range)
        return frozenset(v for v in self.versions_of(name) if intervals.contains(v))

    @classmethod
    def from_strings(cls, packages: Mapping[str, Iterable[str]]) -> InMemoryPackageIndex:
        """Build an index from version strings.

        Example:
            >>> index = InMemoryPackageIndex.from_strings({"foo": ["1.0", "1.1"]})
            >>> sorted(str(v) for v in index.versions_of("foo"))
            ['1.0', '1.1']
        """
        return cls({name: [Version.parse(v) for v in versions] for name, versions in packages.items()})


def load_package_index(path: Path | str) -> InMemoryPackageIndex:
    """Load a package index snapshot from a JSON file.

    Args:
        path: Path to a file shaped like ``{"packages": {"foo": ["1.0"]}}``.

    Returns:
        The loaded index.

    Raises:
        IndexLoadError: If the file is missing, not JSON, or not a valid
            snapshot.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as exc:
        msg = f"Cannot read package index {path}: {exc.strerror or exc}"
        raise IndexLoadError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Package index {path} is not valid JSON: {exc}"
        raise IndexLoadError(msg) from exc

    try:
        schema = PackageIndexSchema.model_validate(raw)
    except ValidationError as exc:
        msg = f"Package index {path} is malformed: {exc}"
        raise IndexLoadError(msg) from exc

    index = InMemoryPackageIndex.from_strings(schema.packages)
    logger.debug("Loaded %d packages from %s", len(index), path)
    return index


__all__ = [
    "InMemoryPackageIndex",
    "PackageIndex",
    "load_package_index",
]
