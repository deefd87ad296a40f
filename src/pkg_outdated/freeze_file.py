"""Readers for legacy and project-level freeze files.

Purpose
-------
Read the version constraints recorded by a previous successful solve, either
from the legacy ``cabal.config`` of the working directory or from the
``cabal.project.freeze`` next to the project marker.

Contents
--------
* :func:`parse_user_constraint` - parse one constraint like ``any.foo ==1.2``
* :func:`parse_constraints` - collect all ``constraints:`` of a field file
* :func:`load_legacy_freeze_file` - constraints of ``<cwd>/cabal.config``
* :func:`find_project_root` - search upward for ``cabal.project``
* :func:`load_project_freeze_file` - constraints of ``<root>/cabal.project.freeze``

File Format
-----------
A field starts at column zero as ``name:``; indented lines continue it;
lines starting with ``--`` are comments. Unindented lines that are not
fields open a section whose body is skipped.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import FreezeFileError, ProjectRootNotFoundError, VersionParseError
from .models import UserConstraint
from .version_range import parse_version_range

logger = logging.getLogger(__name__)

LEGACY_FREEZE_FILE = "cabal.config"
PROJECT_MARKER = "cabal.project"
PROJECT_FREEZE_FILE = "cabal.project.freeze"

_RE_FIELD = re.compile(r"^([A-Za-z][A-Za-z0-9-]*)\s*:(.*)$")
_RE_CONSTRAINT = re.compile(
    r"^(?:(?P<qualifier>any|setup|[A-Za-z0-9][A-Za-z0-9-]*:setup)\.)?"
    r"(?P<name>[A-Za-z0-9][A-Za-z0-9-]*)\s*(?P<rest>.*)$",
    re.ASCII | re.DOTALL,
)
_RE_PROPERTY = re.compile(r"^(?:installed|source|test|bench|[+-][A-Za-z0-9_][A-Za-z0-9_-]*)$", re.ASCII)
_RANGE_STARTS = ("=", "<", ">", "^", "!", "(")
_RANGE_KEYWORDS = ("-any", "-none")


def _iter_fields(text: str) -> list[tuple[str, str]]:
    """Split field-file text into ``(field name, value)`` pairs in file order."""
    fields: list[tuple[str, list[str]]] = []
    in_field = False
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        if line[0].isspace():
            if in_field:
                fields[-1][1].append(stripped)
            continue
        match = _RE_FIELD.match(line)
        if match:
            fields.append((match.group(1).lower(), [match.group(2).strip()]))
            in_field = True
        else:
            in_field = False
    return [(name, " ".join(part for part in parts if part)) for name, parts in fields]


def parse_user_constraint(text: str) -> UserConstraint:
    """Parse a single constraint such as ``any.foo ==1.2`` or ``bar +debug``.

    Raises:
        FreezeFileError: If the constraint is malformed.
    """
    match = _RE_CONSTRAINT.match(text.strip())
    rest = match.group("rest").strip() if match else ""
    if not match or not rest:
        msg = f"Invalid constraint: {text.strip()!r}"
        raise FreezeFileError(msg)

    name = match.group("name")
    qualifier = match.group("qualifier")
    if rest.startswith(_RANGE_STARTS) or rest.split()[0] in _RANGE_KEYWORDS:
        try:
            return UserConstraint(name, parse_version_range(rest), qualifier)
        except VersionParseError as exc:
            msg = f"Invalid constraint {text.strip()!r}: {exc}"
            raise FreezeFileError(msg) from exc

    properties = tuple(rest.split())
    unknown = [p for p in properties if not _RE_PROPERTY.match(p)]
    if unknown:
        msg = f"Invalid constraint {text.strip()!r}: unknown property {unknown[0]!r}"
        raise FreezeFileError(msg)
    return UserConstraint(name, None, qualifier, properties)


def parse_constraints(text: str) -> list[UserConstraint]:
    """Return every constraint of every ``constraints:`` field, in order."""
    constraints: list[UserConstraint] = []
    for name, value in _iter_fields(text):
        if name != "constraints":
            continue
        constraints.extend(parse_user_constraint(item) for item in value.split(",") if item.strip())
    return constraints


def _read_constraints(path: Path) -> list[UserConstraint]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read freeze file {path}: {exc.strerror or exc}"
        raise FreezeFileError(msg) from exc
    constraints = parse_constraints(text)
    logger.debug("Read %d constraints from %s", len(constraints), path)
    return constraints


def load_legacy_freeze_file(working_dir: Path) -> list[UserConstraint]:
    """Load the constraints saved in the working directory's ``cabal.config``.

    Raises:
        FreezeFileError: If the file is missing or malformed.
    """
    return _read_constraints(working_dir / LEGACY_FREEZE_FILE)


def find_project_root(working_dir: Path) -> Path:
    """Return the nearest directory at or above ``working_dir`` holding ``cabal.project``.

    Raises:
        ProjectRootNotFoundError: If no ancestor has the marker file.
    """
    start = working_dir.resolve()
    for candidate in (start, *start.parents):
        if (candidate / PROJECT_MARKER).is_file():
            logger.debug("Project root is %s", candidate)
            return candidate
    msg = f"No {PROJECT_MARKER} found in {start} or any parent directory"
    raise ProjectRootNotFoundError(msg)


def load_project_freeze_file(project_root: Path) -> list[UserConstraint]:
    """Load the constraints of ``cabal.project.freeze`` in ``project_root``.

    Raises:
        FreezeFileError: If the file is missing or malformed.
    """
    return _read_constraints(project_root / PROJECT_FREEZE_FILE)


__all__ = [
    "LEGACY_FREEZE_FILE",
    "PROJECT_FREEZE_FILE",
    "PROJECT_MARKER",
    "find_project_root",
    "load_legacy_freeze_file",
    "load_project_freeze_file",
    "parse_constraints",
    "parse_user_constraint",
]
