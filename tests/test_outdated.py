"""End-to-end stories for the outdated command on real files in a temp dir."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkg_outdated.errors import ProjectRootNotFoundError
from pkg_outdated.logging_setup import Verbosity
from pkg_outdated.models import CompilerId, OutdatedFlags, Platform
from pkg_outdated.outdated import outdated
from pkg_outdated.package_index import InMemoryPackageIndex
from pkg_outdated.reporter import UP_TO_DATE

GHC = CompilerId.from_string("ghc-9.4.8")
LINUX = Platform.from_string("x86_64-linux")


@pytest.fixture
def index() -> InMemoryPackageIndex:
    return InMemoryPackageIndex.from_strings(
        {
            "foo": ["1.2.0", "1.2.5", "1.4.0"],
            "base": ["4.17.0.0", "4.18.0.0"],
        }
    )


@pytest.fixture
def legacy_project(tmp_path: Path) -> Path:
    text = "constraints: any.foo ==1.2.0,\n             any.base ==4.18.0.0\n"
    (tmp_path / "cabal.config").write_text(text, encoding="utf-8")
    return tmp_path


def _run(flags: OutdatedFlags, index: InMemoryPackageIndex, working_dir: Path) -> int:
    return outdated(Verbosity.NORMAL, flags, index, GHC, LINUX, working_dir=working_dir)


@pytest.mark.os_agnostic
def test_outdated_reports_stale_freeze_file_entries(
    index: InMemoryPackageIndex,
    legacy_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    status = _run(OutdatedFlags(freeze_file=True), index, legacy_project)

    assert status == 0
    assert capsys.readouterr().out == "Outdated dependencies:\nfoo ==1.2.0 (latest: 1.4.0)\n"


@pytest.mark.os_agnostic
def test_outdated_minor_flag_limits_the_latest_version(
    index: InMemoryPackageIndex,
    legacy_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _run(OutdatedFlags(freeze_file=True, minor=frozenset({"foo"})), index, legacy_project)

    assert "foo ==1.2.0 (latest: 1.2.5)" in capsys.readouterr().out


@pytest.mark.os_agnostic
def test_quiet_prints_nothing_and_fails_when_outdated(
    index: InMemoryPackageIndex,
    legacy_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    status = _run(OutdatedFlags(freeze_file=True, quiet=True), index, legacy_project)

    assert status == 1
    assert capsys.readouterr().out == ""


@pytest.mark.os_agnostic
def test_quiet_with_no_exit_code_succeeds(index: InMemoryPackageIndex, legacy_project: Path) -> None:
    assert _run(OutdatedFlags(freeze_file=True, quiet=True, exit_code=False), index, legacy_project) == 0


@pytest.mark.os_agnostic
def test_exit_code_flag_fails_only_when_something_is_outdated(
    index: InMemoryPackageIndex,
    legacy_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    flags = OutdatedFlags(freeze_file=True, exit_code=True, ignore=frozenset({"foo"}))

    assert _run(flags, index, legacy_project) == 0
    assert capsys.readouterr().out == f"{UP_TO_DATE}\n"


@pytest.mark.os_agnostic
def test_simple_output_prints_nothing_when_up_to_date(
    index: InMemoryPackageIndex,
    legacy_project: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _run(OutdatedFlags(freeze_file=True, simple_output=True, ignore=frozenset({"foo"})), index, legacy_project)

    assert capsys.readouterr().out == ""


@pytest.mark.os_agnostic
def test_outdated_reads_the_package_description_by_default(
    index: InMemoryPackageIndex,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    (tmp_path / "demo.cabal").write_text(
        "name: demo\nlibrary\n  build-depends: base ^>=4.17, foo >=1.4\n",
        encoding="utf-8",
    )

    _run(OutdatedFlags(simple_output=True), index, tmp_path)

    assert capsys.readouterr().out == "base\n"


@pytest.mark.os_agnostic
def test_new_freeze_file_without_project_is_an_error(index: InMemoryPackageIndex, tmp_path: Path) -> None:
    with pytest.raises(ProjectRootNotFoundError):
        _run(OutdatedFlags(new_freeze_file=True), index, tmp_path)
