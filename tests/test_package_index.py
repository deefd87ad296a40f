"""Package index stories: loading snapshots and answering version queries."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pkg_outdated.errors import IndexLoadError
from pkg_outdated.package_index import InMemoryPackageIndex, load_package_index
from pkg_outdated.version import Version
from pkg_outdated.version_range import parse_version_range


def _write_index(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ════════════════════════════════════════════════════════════════════════════
# InMemoryPackageIndex
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_versions_of_unknown_package_is_empty() -> None:
    assert InMemoryPackageIndex().versions_of("foo") == frozenset()


@pytest.mark.os_agnostic
def test_versions_matching_filters_by_range() -> None:
    index = InMemoryPackageIndex.from_strings({"foo": ["1.0", "1.2.0", "1.2.5", "2.0"]})

    matching = index.versions_matching("foo", parse_version_range("^>=1.2"))

    assert matching == frozenset({Version.parse("1.2.0"), Version.parse("1.2.5")})


@pytest.mark.os_agnostic
def test_index_length_counts_packages() -> None:
    assert len(InMemoryPackageIndex.from_strings({"foo": ["1"], "bar": []})) == 2


# ════════════════════════════════════════════════════════════════════════════
# load_package_index
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_load_package_index_reads_a_snapshot(tmp_path: Path) -> None:
    path = _write_index(tmp_path / "index.json", {"packages": {"foo": ["1.0", "1.1"]}})

    index = load_package_index(path)

    assert max(index.versions_of("foo")) == Version.parse("1.1")


@pytest.mark.os_agnostic
def test_load_package_index_ignores_unknown_top_level_keys(tmp_path: Path) -> None:
    path = _write_index(tmp_path / "index.json", {"generated": "today", "packages": {}})

    assert len(load_package_index(path)) == 0


@pytest.mark.os_agnostic
def test_load_package_index_reports_missing_file(tmp_path: Path) -> None:
    with pytest.raises(IndexLoadError, match="Cannot read package index"):
        load_package_index(tmp_path / "absent.json")


@pytest.mark.os_agnostic
def test_load_package_index_reports_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "index.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(IndexLoadError, match="not valid JSON"):
        load_package_index(path)


@pytest.mark.os_agnostic
def test_load_package_index_reports_unparseable_versions(tmp_path: Path) -> None:
    path = _write_index(tmp_path / "index.json", {"packages": {"foo": ["1.x"]}})

    with pytest.raises(IndexLoadError, match="malformed"):
        load_package_index(path)
