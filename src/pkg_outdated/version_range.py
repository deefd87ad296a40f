"""Version ranges, their interval decomposition and minor relaxation.

Purpose
-------
Model version constraints such as ``>=1.2 && <1.3`` as a predicate tree,
reduce any range to a canonical list of disjoint intervals, and build the
relaxed range used when only minor and patch upgrades are of interest.

Contents
--------
* :class:`VersionRange` and its node types - the predicate tree
* :func:`parse_version_range` - parse range text like ``^>=1.2 || ==2.*``
* :class:`LowerBound`, :class:`UpperBound`, :class:`Interval` - interval parts
* :class:`VersionIntervals` - canonical interval decomposition
* :func:`as_version_intervals` - decompose a range
* :func:`simplify_version_range` - rebuild a range from its intervals
* :func:`relax_minor` - widen a range up to the next major line

System Role
-----------
The arithmetic layer beneath the analyzer. Everything here is pure and
immutable, so ranges can be hashed, cached and compared freely.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache, reduce
from typing import NoReturn

from .errors import VersionParseError
from .version import Version

MIN_VERSION = Version((0,))


# ════════════════════════════════════════════════════════════════════════════
# Intervals
# ════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LowerBound:
    """Lower edge of an interval; always present."""

    version: Version
    inclusive: bool = True

    @property
    def sort_key(self) -> tuple[tuple[int, ...], int]:
        # At the same version an inclusive edge starts earlier.
        return (self.version.key, 0 if self.inclusive else 1)

    def admits(self, version: Version) -> bool:
        return version >= self.version if self.inclusive else version > self.version


@dataclass(frozen=True, slots=True)
class UpperBound:
    """Finite upper edge of an interval. ``None`` stands for unbounded."""

    version: Version
    inclusive: bool = False

    @property
    def sort_key(self) -> tuple[int, tuple[int, ...], int]:
        return (0, self.version.key, 1 if self.inclusive else 0)

    def admits(self, version: Version) -> bool:
        return version <= self.version if self.inclusive else version < self.version


def _upper_key(upper: UpperBound | None) -> tuple[int, tuple[int, ...], int]:
    return (1, (), 0) if upper is None else upper.sort_key


@dataclass(frozen=True, slots=True)
class Interval:
    """A single contiguous run of versions.

    Attributes:
        lower: Lower edge, inclusive or exclusive.
        upper: Upper edge, or None when unbounded above.
    """

    lower: LowerBound
    upper: UpperBound | None = None

    def contains(self, version: Version) -> bool:
        if not self.lower.admits(version):
            return False
        return self.upper is None or self.upper.admits(version)

    def is_empty(self) -> bool:
        if self.upper is None:
            return False
        if self.lower.version < self.upper.version:
            return False
        if self.lower.version == self.upper.version:
            return not (self.lower.inclusive and self.upper.inclusive)
        return True

    def __str__(self) -> str:
        left = "[" if self.lower.inclusive else "("
        if self.upper is None:
            return f"{left}{self.lower.version}, inf)"
        right = "]" if self.upper.inclusive else ")"
        return f"{left}{self.lower.version}, {self.upper.version}{right}"


def _touches(upper: UpperBound | None, lower: LowerBound) -> bool:
    """Return True when an interval ending at ``upper`` meets one starting at ``lower``."""
    if upper is None:
        return True
    if lower.version < upper.version:
        return True
    if lower.version == upper.version:
        return upper.inclusive or lower.inclusive
    return False


def _normalize(intervals: list[Interval]) -> tuple[Interval, ...]:
    """Sort, drop empty intervals and merge overlapping or adjacent ones."""
    pending = sorted(
        (i for i in intervals if not i.is_empty()),
        key=lambda i: i.lower.sort_key,
    )
    merged: list[Interval] = []
    for interval in pending:
        if merged and _touches(merged[-1].upper, interval.lower):
            last = merged[-1]
            upper = max(last.upper, interval.upper, key=_upper_key)
            merged[-1] = Interval(last.lower, upper)
        else:
            merged.append(interval)
    return tuple(merged)


def _intersect_pair(a: Interval, b: Interval) -> Interval:
    lower = max(a.lower, b.lower, key=lambda bound: bound.sort_key)
    upper = min(a.upper, b.upper, key=_upper_key)
    return Interval(lower, upper)


@dataclass(frozen=True, slots=True)
class VersionIntervals:
    """Canonical decomposition of a version range.

    Intervals are sorted by lower bound, never overlap and never touch, so
    two ranges matching the same versions have equal decompositions.
    """

    intervals: tuple[Interval, ...] = ()

    @classmethod
    def from_intervals(cls, intervals: list[Interval]) -> VersionIntervals:
        return cls(_normalize(intervals))

    @classmethod
    def everything(cls) -> VersionIntervals:
        return cls((Interval(LowerBound(MIN_VERSION, True), None),))

    def contains(self, version: Version) -> bool:
        return any(i.contains(version) for i in self.intervals)

    def is_empty(self) -> bool:
        return not self.intervals

    def last(self) -> Interval | None:
        """Return the interval with the greatest lower bound, if any."""
        return self.intervals[-1] if self.intervals else None

    def union(self, other: VersionIntervals) -> VersionIntervals:
        return VersionIntervals.from_intervals([*self.intervals, *other.intervals])

    def intersect(self, other: VersionIntervals) -> VersionIntervals:
        return VersionIntervals.from_intervals(
            [_intersect_pair(a, b) for a in self.intervals for b in other.intervals]
        )

    def complement(self) -> VersionIntervals:
        gaps: list[Interval] = []
        start: LowerBound | None = LowerBound(MIN_VERSION, True)
        for interval in self.intervals:
            if start is None:
                break
            gaps.append(Interval(start, UpperBound(interval.lower.version, not interval.lower.inclusive)))
            upper = interval.upper
            start = None if upper is None else LowerBound(upper.version, not upper.inclusive)
        if start is not None:
            gaps.append(Interval(start, None))
        return VersionIntervals.from_intervals(gaps)

    def to_range(self) -> VersionRange:
        """Rebuild the simplest range expression matching these intervals."""
        if not self.intervals:
            return NoVersion()
        return reduce(UnionVersionRanges, (_interval_to_range(i) for i in self.intervals))

    def __str__(self) -> str:
        return " u ".join(str(i) for i in self.intervals) or "{}"


def _interval_to_range(interval: Interval) -> VersionRange:
    lower, upper = interval.lower, interval.upper
    if upper is not None and upper.inclusive and lower.inclusive and lower.version == upper.version:
        return ThisVersion(lower.version)

    clauses: list[VersionRange] = []
    if lower.version != MIN_VERSION or not lower.inclusive:
        clauses.append(OrLaterVersion(lower.version) if lower.inclusive else LaterVersion(lower.version))
    if upper is not None:
        clauses.append(OrEarlierVersion(upper.version) if upper.inclusive else EarlierVersion(upper.version))
    if not clauses:
        return AnyVersion()
    return reduce(IntersectVersionRanges, clauses)


# ════════════════════════════════════════════════════════════════════════════
# Range expressions
# ════════════════════════════════════════════════════════════════════════════


class VersionRange(ABC):
    """A predicate over versions built from comparisons and combinators."""

    @abstractmethod
    def contains(self, version: Version) -> bool:
        """Evaluate the predicate directly, without interval decomposition."""

    @abstractmethod
    def to_intervals(self) -> VersionIntervals:
        """Decompose into canonical intervals."""

    @abstractmethod
    def render(self, precedence: int = 0) -> str:
        """Render as range text, parenthesizing below ``precedence``."""

    def __str__(self) -> str:
        return self.render()


_PREC_OR = 0
_PREC_AND = 1
_PREC_ATOM = 2


def _parenthesize(text: str, own: int, required: int) -> str:
    return f"({text})" if own < required else text


@dataclass(frozen=True, slots=True)
class AnyVersion(VersionRange):
    def contains(self, version: Version) -> bool:
        return True

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals.everything()

    def render(self, precedence: int = 0) -> str:
        return "-any"


@dataclass(frozen=True, slots=True)
class NoVersion(VersionRange):
    def contains(self, version: Version) -> bool:
        return False

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals()

    def render(self, precedence: int = 0) -> str:
        return "-none"


@dataclass(frozen=True, slots=True)
class ThisVersion(VersionRange):
    """``==v``"""

    version: Version

    def contains(self, version: Version) -> bool:
        return version == self.version

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals((Interval(LowerBound(self.version, True), UpperBound(self.version, True)),))

    def render(self, precedence: int = 0) -> str:
        return f"=={self.version}"


@dataclass(frozen=True, slots=True)
class LaterVersion(VersionRange):
    """``>v``"""

    version: Version

    def contains(self, version: Version) -> bool:
        return version > self.version

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals((Interval(LowerBound(self.version, False), None),))

    def render(self, precedence: int = 0) -> str:
        return f">{self.version}"


@dataclass(frozen=True, slots=True)
class OrLaterVersion(VersionRange):
    """``>=v``"""

    version: Version

    def contains(self, version: Version) -> bool:
        return version >= self.version

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals((Interval(LowerBound(self.version, True), None),))

    def render(self, precedence: int = 0) -> str:
        return f">={self.version}"


@dataclass(frozen=True, slots=True)
class EarlierVersion(VersionRange):
    """``<v``"""

    version: Version

    def contains(self, version: Version) -> bool:
        return version < self.version

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals.from_intervals(
            [Interval(LowerBound(MIN_VERSION, True), UpperBound(self.version, False))]
        )

    def render(self, precedence: int = 0) -> str:
        return f"<{self.version}"


@dataclass(frozen=True, slots=True)
class OrEarlierVersion(VersionRange):
    """``<=v``"""

    version: Version

    def contains(self, version: Version) -> bool:
        return version <= self.version

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals((Interval(LowerBound(MIN_VERSION, True), UpperBound(self.version, True)),))

    def render(self, precedence: int = 0) -> str:
        return f"<={self.version}"


@dataclass(frozen=True, slots=True)
class MajorBoundVersion(VersionRange):
    """``^>=v``: at least ``v`` and below the next major line."""

    version: Version

    def contains(self, version: Version) -> bool:
        return self.version <= version < self.version.major_upper_bound()

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals(
            (Interval(LowerBound(self.version, True), UpperBound(self.version.major_upper_bound(), False)),)
        )

    def render(self, precedence: int = 0) -> str:
        return f"^>={self.version}"


@dataclass(frozen=True, slots=True)
class WildcardVersion(VersionRange):
    """``==1.2.*``: any version starting with the given components."""

    prefix: Version

    @property
    def _upper(self) -> Version:
        *head, tail = self.prefix.components
        return Version((*head, tail + 1))

    def contains(self, version: Version) -> bool:
        return self.prefix <= version < self._upper

    def to_intervals(self) -> VersionIntervals:
        return VersionIntervals((Interval(LowerBound(self.prefix, True), UpperBound(self._upper, False)),))

    def render(self, precedence: int = 0) -> str:
        return f"=={self.prefix}.*"


@dataclass(frozen=True, slots=True)
class UnionVersionRanges(VersionRange):
    """``a || b``"""

    left: VersionRange
    right: VersionRange

    def contains(self, version: Version) -> bool:
        return self.left.contains(version) or self.right.contains(version)

    def to_intervals(self) -> VersionIntervals:
        return self.left.to_intervals().union(self.right.to_intervals())

    def render(self, precedence: int = 0) -> str:
        text = f"{self.left.render(_PREC_OR)} || {self.right.render(_PREC_OR)}"
        return _parenthesize(text, _PREC_OR, precedence)


@dataclass(frozen=True, slots=True)
class IntersectVersionRanges(VersionRange):
    """``a && b``"""

    left: VersionRange
    right: VersionRange

    def contains(self, version: Version) -> bool:
        return self.left.contains(version) and self.right.contains(version)

    def to_intervals(self) -> VersionIntervals:
        return self.left.to_intervals().intersect(self.right.to_intervals())

    def render(self, precedence: int = 0) -> str:
        text = f"{self.left.render(_PREC_AND)} && {self.right.render(_PREC_AND)}"
        return _parenthesize(text, _PREC_AND, precedence)


@dataclass(frozen=True, slots=True)
class ComplementVersionRange(VersionRange):
    """``!a``"""

    inner: VersionRange

    def contains(self, version: Version) -> bool:
        return not self.inner.contains(version)

    def to_intervals(self) -> VersionIntervals:
        return self.inner.to_intervals().complement()

    def render(self, precedence: int = 0) -> str:
        return f"!{self.inner.render(_PREC_ATOM)}"


# ════════════════════════════════════════════════════════════════════════════
# Parsing
# ════════════════════════════════════════════════════════════════════════════

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<op>\^>=|==|>=|<=|>|<|&&|\|\||!|\(|\))"
    r"|(?P<kw>-any|-none)"
    r"|(?P<ver>\d+(?:\.\d+)*(?:\.\*)?)"
    r")",
    re.ASCII,
)

_COMPARATORS: dict[str, type[VersionRange]] = {
    "==": ThisVersion,
    ">": LaterVersion,
    ">=": OrLaterVersion,
    "<": EarlierVersion,
    "<=": OrEarlierVersion,
    "^>=": MajorBoundVersion,
}


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if not match or match.end() == pos:
            msg = f"Invalid version range {text!r} at position {pos}"
            raise VersionParseError(msg)
        tokens.append(match.group(match.lastgroup or "op"))
        pos = match.end()
    return tokens


class _RangeParser:
    """Recursive-descent parser; ``&&`` binds tighter than ``||``."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            self._fail("unexpected end of input")
        self.pos += 1
        return token

    def _fail(self, reason: str) -> NoReturn:
        msg = f"Invalid version range {self.text!r}: {reason}"
        raise VersionParseError(msg)

    def parse(self) -> VersionRange:
        if not self.tokens:
            return AnyVersion()
        result = self._union()
        if self._peek() is not None:
            self._fail(f"unexpected {self._peek()!r}")
        return result

    def _union(self) -> VersionRange:
        result = self._intersection()
        while self._peek() == "||":
            self._take()
            result = UnionVersionRanges(result, self._intersection())
        return result

    def _intersection(self) -> VersionRange:
        result = self._factor()
        while self._peek() == "&&":
            self._take()
            result = IntersectVersionRanges(result, self._factor())
        return result

    def _factor(self) -> VersionRange:
        token = self._take()
        if token == "!":
            return ComplementVersionRange(self._factor())
        if token == "(":
            inner = self._union()
            if self._take() != ")":
                self._fail("missing ')'")
            return inner
        if token == "-any":
            return AnyVersion()
        if token == "-none":
            return NoVersion()
        if token in _COMPARATORS:
            return self._comparison(token, self._take())
        self._fail(f"unexpected {token!r}")

    def _comparison(self, operator: str, operand: str) -> VersionRange:
        if operand.endswith(".*"):
            if operator != "==":
                self._fail(f"wildcard only allowed with '==', got {operator!r}")
            return WildcardVersion(Version.parse(operand[:-2]))
        if not operand[:1].isdigit():
            self._fail(f"expected a version after {operator!r}, got {operand!r}")
        return _COMPARATORS[operator](Version.parse(operand))


@lru_cache(maxsize=1024)
def parse_version_range(text: str) -> VersionRange:
    """Parse range text such as ``>=1.2 && <1.3`` or ``^>=2.0 || ==3.*``.

    Empty text means any version.

    Raises:
        VersionParseError: If the text is not a valid range.

    Example:
        >>> str(parse_version_range(">=1.2 && <1.3"))
        '>=1.2 && <1.3'
    """
    return _RangeParser(text).parse()


# ════════════════════════════════════════════════════════════════════════════
# Operations used by the analyzer
# ════════════════════════════════════════════════════════════════════════════


def as_version_intervals(version_range: VersionRange) -> VersionIntervals:
    """Return the canonical interval decomposition of ``version_range``."""
    return version_range.to_intervals()


def simplify_version_range(version_range: VersionRange) -> VersionRange:
    """Rebuild ``version_range`` from its intervals.

    Redundant clauses disappear; the set of matched versions is unchanged.

    Example:
        >>> str(simplify_version_range(parse_version_range(">=1 && >=1.2 && <2 && <3")))
        '>=1.2 && <2'
    """
    return as_version_intervals(version_range).to_range()


def relax_minor(version_range: VersionRange) -> VersionRange:
    """Widen a range to admit newer minor and patch releases of its last line.

    Takes the interval with the greatest lower bound ``v0``. When it has no
    upper bound the range is returned unchanged; otherwise the result is
    ``>=v0 && <a.(b+1)`` where ``a.b`` are the first two components of
    ``v0``.

    Example:
        >>> str(relax_minor(parse_version_range("==1.2.0")))
        '>=1.2.0 && <1.3'
    """
    last = as_version_intervals(version_range).last()
    if last is None or last.upper is None:
        return version_range
    lower = last.lower.version
    return IntersectVersionRanges(OrLaterVersion(lower), EarlierVersion(lower.major_upper_bound()))


__all__ = [
    "AnyVersion",
    "ComplementVersionRange",
    "EarlierVersion",
    "IntersectVersionRanges",
    "Interval",
    "LaterVersion",
    "LowerBound",
    "MIN_VERSION",
    "MajorBoundVersion",
    "NoVersion",
    "OrEarlierVersion",
    "OrLaterVersion",
    "ThisVersion",
    "UnionVersionRanges",
    "UpperBound",
    "VersionIntervals",
    "VersionRange",
    "WildcardVersion",
    "as_version_intervals",
    "parse_version_range",
    "relax_minor",
    "simplify_version_range",
]
