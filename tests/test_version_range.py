"""Version range stories: predicates, their intervals, and how they relax.

Every range is a predicate first. Its interval decomposition must agree
with the predicate on every version, so the grid tests below evaluate both
side by side.
"""

from __future__ import annotations

import pytest

from pkg_outdated.errors import VersionParseError
from pkg_outdated.version import Version
from pkg_outdated.version_range import (
    AnyVersion,
    ComplementVersionRange,
    IntersectVersionRanges,
    NoVersion,
    ThisVersion,
    UnionVersionRanges,
    VersionRange,
    as_version_intervals,
    parse_version_range,
    relax_minor,
    simplify_version_range,
)

VERSION_GRID = [
    Version.parse(v)
    for v in (
        "0",
        "0.0.1",
        "0.1",
        "1",
        "1.0.1",
        "1.2",
        "1.2.0",
        "1.2.5",
        "1.3",
        "1.10",
        "2",
        "2.0.1",
        "3",
        "10",
    )
]

RANGE_TEXTS = [
    "",
    "-any",
    "-none",
    "==1.2",
    ">1",
    ">=1",
    "<2",
    "<=2",
    "^>=1.2",
    "==1.*",
    "==1.2.*",
    ">=1 && <2",
    ">1 && <=2",
    "<1 || >=2",
    "<1 || >1",
    "<=1 || >2",
    ">2 && <1",
    ">=1 && <=1",
    "!(>=1 && <2)",
    "!>1",
    "!==1.2",
    "(==1 || ==2) && <3",
    "==1 || >=2 && <3",
    ">=1 && >=1.2 && <2 && <3",
]


def _range(text: str) -> VersionRange:
    return parse_version_range(text)


# ════════════════════════════════════════════════════════════════════════════
# Parsing and rendering
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_empty_text_means_any_version() -> None:
    assert isinstance(_range(""), AnyVersion)
    assert isinstance(_range("   "), AnyVersion)


@pytest.mark.os_agnostic
def test_keywords_parse_to_any_and_none() -> None:
    assert isinstance(_range("-any"), AnyVersion)
    assert isinstance(_range("-none"), NoVersion)


@pytest.mark.os_agnostic
def test_and_binds_tighter_than_or() -> None:
    parsed = _range("==1 || >=2 && <3")

    assert isinstance(parsed, UnionVersionRanges)
    assert isinstance(parsed.right, IntersectVersionRanges)


@pytest.mark.os_agnostic
def test_rendering_keeps_needed_parentheses_only() -> None:
    assert str(_range("(==1 || ==2) && <3")) == "(==1 || ==2) && <3"
    assert str(_range("(==1) || (>=2 && <3)")) == "==1 || >=2 && <3"


@pytest.mark.os_agnostic
def test_rendering_tolerates_missing_spaces() -> None:
    assert str(_range(">=1.2&&<1.3")) == ">=1.2 && <1.3"


@pytest.mark.os_agnostic
def test_complement_parses_as_its_own_node() -> None:
    parsed = _range("!(==1.2)")

    assert parsed == ComplementVersionRange(ThisVersion(Version.parse("1.2")))
    assert str(parsed) == "!==1.2"


@pytest.mark.os_agnostic
@pytest.mark.parametrize("text", [">=", ">= 1.2 &&", "foo", ">=1.*", "(==1", "==1 ==2", "1.2"])
def test_malformed_ranges_are_rejected(text: str) -> None:
    with pytest.raises(VersionParseError):
        parse_version_range(text)


# ════════════════════════════════════════════════════════════════════════════
# Membership
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_major_bound_admits_patches_but_not_next_line() -> None:
    caret = _range("^>=1.2.3")

    assert caret.contains(Version.parse("1.2.9"))
    assert not caret.contains(Version.parse("1.3"))
    assert not caret.contains(Version.parse("1.2.2"))


@pytest.mark.os_agnostic
def test_wildcard_admits_the_whole_prefix() -> None:
    wildcard = _range("==1.2.*")

    assert wildcard.contains(Version.parse("1.2"))
    assert wildcard.contains(Version.parse("1.2.7"))
    assert not wildcard.contains(Version.parse("1.3"))
    assert not wildcard.contains(Version.parse("1.20"))


@pytest.mark.os_agnostic
@pytest.mark.parametrize("text", RANGE_TEXTS)
def test_intervals_agree_with_the_predicate_on_every_version(text: str) -> None:
    version_range = _range(text)
    intervals = as_version_intervals(version_range)

    for version in VERSION_GRID:
        assert intervals.contains(version) == version_range.contains(version), (text, str(version))


@pytest.mark.os_agnostic
@pytest.mark.parametrize("text", RANGE_TEXTS)
def test_simplification_matches_the_same_versions(text: str) -> None:
    version_range = _range(text)
    simplified = simplify_version_range(version_range)

    for version in VERSION_GRID:
        assert simplified.contains(version) == version_range.contains(version), (text, str(version))


@pytest.mark.os_agnostic
@pytest.mark.parametrize("text", RANGE_TEXTS)
def test_intervals_are_sorted_and_never_touch(text: str) -> None:
    intervals = as_version_intervals(_range(text)).intervals

    for left, right in zip(intervals, intervals[1:]):
        assert left.upper is not None
        assert left.upper.version <= right.lower.version


# ════════════════════════════════════════════════════════════════════════════
# Simplification
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (">=1 && >=1.2 && <2 && <3", ">=1.2 && <2"),
        (">=1 || >=2", ">=1"),
        ("^>=1.2", ">=1.2 && <1.3"),
        ("==1.2.*", ">=1.2 && <1.3"),
        ("<1 || >=1", "-any"),
        (">2 && <1", "-none"),
        (">=1 && <=1", "==1"),
        ("<=1 || >=3", "<=1 || >=3"),
        (">=0", "-any"),
        ("!>1", "<=1"),
    ],
)
def test_simplification_drops_redundant_clauses(text: str, expected: str) -> None:
    assert str(simplify_version_range(_range(text))) == expected


# ════════════════════════════════════════════════════════════════════════════
# Minor relaxation
# ════════════════════════════════════════════════════════════════════════════


@pytest.mark.os_agnostic
def test_relax_minor_widens_a_pin_to_its_major_line() -> None:
    assert str(relax_minor(_range("==1.2.0"))) == ">=1.2.0 && <1.3"


@pytest.mark.os_agnostic
def test_relax_minor_leaves_unbounded_ranges_alone() -> None:
    unbounded = _range(">=1.2")

    assert relax_minor(unbounded) is unbounded


@pytest.mark.os_agnostic
def test_relax_minor_uses_the_last_interval() -> None:
    assert str(relax_minor(_range("==1.2.3 || ==2.0.1"))) == ">=2.0.1 && <2.1"


@pytest.mark.os_agnostic
def test_relax_minor_keeps_a_range_already_spanning_its_line() -> None:
    assert str(relax_minor(_range(">=1.2 && <1.3"))) == ">=1.2 && <1.3"


@pytest.mark.os_agnostic
def test_relax_minor_of_empty_range_is_unchanged() -> None:
    nothing = _range("-none")

    assert relax_minor(nothing) is nothing


@pytest.mark.os_agnostic
def test_simplify_keeps_trailing_zeros_of_each_range_it_sees() -> None:
    assert str(simplify_version_range(_range(">=1.2.0 && <1.3"))) == ">=1.2.0 && <1.3"
    assert str(simplify_version_range(_range(">=1.2 && <1.3"))) == ">=1.2 && <1.3"
