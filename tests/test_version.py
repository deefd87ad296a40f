"""Version stories: numbers in a row, compared one column at a time."""

from __future__ import annotations

import pytest

from pkg_outdated.errors import OutdatedError, VersionParseError
from pkg_outdated.version import Version


# ════════════════════════════════════════════════════════════════════════════
# Parsing
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_version_parse_keeps_every_component() -> None:
    assert Version.parse("1.2.3").components == (1, 2, 3)


@pytest.mark.os_agnostic
def test_version_parse_ignores_surrounding_whitespace() -> None:
    assert Version.parse("  4.0 ").components == (4, 0)


@pytest.mark.os_agnostic
def test_version_renders_exactly_as_written() -> None:
    assert str(Version.parse("1.2.0")) == "1.2.0"


@pytest.mark.os_agnostic
@pytest.mark.parametrize("text", ["", "1..2", "a.b", "1.2-beta", "v1.0", "1.-2", "١.2"])
def test_version_parse_rejects_malformed_text(text: str) -> None:
    with pytest.raises(VersionParseError):
        Version.parse(text)


@pytest.mark.os_agnostic
def test_version_parse_error_is_both_value_error_and_outdated_error() -> None:
    with pytest.raises(ValueError):
        Version.parse("x")
    with pytest.raises(OutdatedError):
        Version.parse("x")


@pytest.mark.os_agnostic
def test_version_rejects_negative_components() -> None:
    with pytest.raises(VersionParseError):
        Version((1, -1))


# ════════════════════════════════════════════════════════════════════════════
# Ordering
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_versions_compare_numerically_not_textually() -> None:
    assert Version.parse("1.10") > Version.parse("1.9")


@pytest.mark.os_agnostic
def test_missing_trailing_components_count_as_zero() -> None:
    assert Version.parse("1.2") == Version.parse("1.2.0")
    assert hash(Version.parse("1.2")) == hash(Version.parse("1.2.0.0"))


@pytest.mark.os_agnostic
def test_shorter_version_sorts_before_its_extension() -> None:
    assert Version.parse("1.2") < Version.parse("1.2.1")
    assert Version.parse("1.2.1") >= Version.parse("1.2")
    assert Version.parse("1.2") <= Version.parse("1.2.0")


@pytest.mark.os_agnostic
def test_max_of_versions_picks_the_newest() -> None:
    versions = [Version.parse(v) for v in ("1.2.0", "1.10", "1.4.0", "0.9")]

    assert str(max(versions)) == "1.10"


@pytest.mark.os_agnostic
def test_version_does_not_equal_other_types() -> None:
    assert Version.parse("1") != "1"


# ════════════════════════════════════════════════════════════════════════════
# Major line arithmetic
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_component_returns_zero_beyond_the_end() -> None:
    version = Version.parse("3.1")

    assert version.component(1) == 1
    assert version.component(5) == 0


@pytest.mark.os_agnostic
def test_major_upper_bound_bumps_the_second_component() -> None:
    assert str(Version.parse("1.2.3").major_upper_bound()) == "1.3"


@pytest.mark.os_agnostic
def test_major_upper_bound_of_single_component_version() -> None:
    assert str(Version.parse("4").major_upper_bound()) == "4.1"
