"""Dependency source stories: exactly one input is consulted per run."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from pkg_outdated.dependency_source import (
    SourceContext,
    SourceKind,
    deps_from_freeze_file,
    deps_from_new_freeze_file,
    resolve_dependencies,
    select_source,
    user_constraints_to_dependencies,
)
from pkg_outdated.errors import DescriptionError, FreezeFileError
from pkg_outdated.freeze_file import parse_user_constraint
from pkg_outdated.models import CompilerId, Dependency, OutdatedFlags, Platform, UserConstraint
from pkg_outdated.package_description import default_flags


def _context(working_dir: Path, **kwargs: Any) -> SourceContext:
    return SourceContext(
        working_dir=working_dir,
        compiler=CompilerId.from_string("ghc-9.4.8"),
        platform=Platform.from_string("x86_64-linux"),
        **kwargs,
    )


# ════════════════════════════════════════════════════════════════════════════
# select_source
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_package_description_is_the_default_source() -> None:
    assert select_source(OutdatedFlags()) is SourceKind.DESCRIPTION


@pytest.mark.os_agnostic
def test_new_freeze_flag_selects_the_project_freeze_file() -> None:
    assert select_source(OutdatedFlags(new_freeze_file=True)) is SourceKind.NEW_STYLE


@pytest.mark.os_agnostic
def test_legacy_freeze_file_wins_when_both_flags_are_set() -> None:
    assert select_source(OutdatedFlags(freeze_file=True, new_freeze_file=True)) is SourceKind.LEGACY


# ════════════════════════════════════════════════════════════════════════════
# Strategies with injected loaders
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_property_constraints_are_dropped() -> None:
    constraints = [parse_user_constraint("any.foo ==1.2.0"), parse_user_constraint("bar +debug")]

    assert user_constraints_to_dependencies(constraints) == [Dependency.from_string("foo ==1.2.0")]


@pytest.mark.os_agnostic
def test_legacy_strategy_reads_from_the_working_directory(tmp_path: Path) -> None:
    seen: list[Path] = []

    def load(path: Path) -> list[UserConstraint]:
        seen.append(path)
        return [parse_user_constraint("any.foo ==1.0")]

    deps = deps_from_freeze_file(_context(tmp_path), load=load)

    assert seen == [tmp_path]
    assert [str(d) for d in deps] == ["foo ==1.0"]


@pytest.mark.os_agnostic
def test_new_style_strategy_reads_from_the_project_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    seen: list[Path] = []

    def load(path: Path) -> list[UserConstraint]:
        seen.append(path)
        return [parse_user_constraint("setup.Cabal ==3.10")]

    deps = deps_from_new_freeze_file(_context(tmp_path), find_root=lambda _: root, load=load)

    assert seen == [root]
    assert [d.name for d in deps] == ["Cabal"]


# ════════════════════════════════════════════════════════════════════════════
# resolve_dependencies on real files
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_legacy_source_does_not_fall_back_to_the_description(tmp_path: Path) -> None:
    (tmp_path / "demo.cabal").write_text("name: demo\nlibrary\n  build-depends: base\n", encoding="utf-8")

    with pytest.raises(FreezeFileError):
        resolve_dependencies(SourceKind.LEGACY, _context(tmp_path))


@pytest.mark.os_agnostic
def test_description_source_ignores_freeze_files(tmp_path: Path) -> None:
    (tmp_path / "cabal.config").write_text("constraints: any.foo ==1.0\n", encoding="utf-8")

    with pytest.raises(DescriptionError):
        resolve_dependencies(SourceKind.DESCRIPTION, _context(tmp_path))


@pytest.mark.os_agnostic
def test_description_source_applies_the_flag_policy(tmp_path: Path) -> None:
    text = (
        "name: demo\n"
        "flag fast\n  default: False\n"
        "library\n  build-depends: base\n  if flag(fast)\n    build-depends: vector\n"
    )
    (tmp_path / "demo.cabal").write_text(text, encoding="utf-8")

    everything = resolve_dependencies(SourceKind.DESCRIPTION, _context(tmp_path))
    defaults = resolve_dependencies(SourceKind.DESCRIPTION, _context(tmp_path, flag_predicate=default_flags))

    assert [d.name for d in everything] == ["base", "vector"]
    assert [d.name for d in defaults] == ["base"]


@pytest.mark.os_agnostic
def test_new_style_source_finds_the_root_from_a_subdirectory(tmp_path: Path) -> None:
    (tmp_path / "cabal.project").write_text("packages: pkg\n", encoding="utf-8")
    (tmp_path / "cabal.project.freeze").write_text("constraints: any.foo ==1.2.0\n", encoding="utf-8")
    package_dir = tmp_path / "pkg"
    package_dir.mkdir()

    deps = resolve_dependencies(SourceKind.NEW_STYLE, _context(package_dir))

    assert [str(d) for d in deps] == ["foo ==1.2.0"]
