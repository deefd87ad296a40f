"""Package versions as ordered sequences of non-negative integers.

Purpose
-------
Provide the :class:`Version` value type used by version ranges, the package
index and the analyzer.

Ordering is lexicographic and component-wise. Missing trailing components
count as zero, so ``1.2`` equals ``1.2.0`` and sorts before ``1.2.1``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from .errors import VersionParseError


def _strip_trailing_zeros(components: tuple[int, ...]) -> tuple[int, ...]:
    """Drop trailing zero components so equal versions share one key."""
    end = len(components)
    while end > 0 and components[end - 1] == 0:
        end -= 1
    return components[:end]


@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """A dotted numeric version such as ``1.2.3``.

    Attributes:
        components: The numeric components exactly as written.
    """

    components: tuple[int, ...]

    def __post_init__(self) -> None:
        """Reject negative components."""
        if any(c < 0 for c in self.components):
            msg = f"Version components must be non-negative: {self.components}"
            raise VersionParseError(msg)

    @property
    def key(self) -> tuple[int, ...]:
        """Comparison key with trailing zeros removed."""
        return _strip_trailing_zeros(self.components)

    def __str__(self) -> str:
        """Return version as dotted string like '1.2.3'."""
        return ".".join(str(c) for c in self.components) or "0"

    def __repr__(self) -> str:
        return f"Version('{self}')"

    def __hash__(self) -> int:
        return hash(self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other: object) -> bool:
        """Compare versions for sorting."""
        if not isinstance(other, Version):
            return NotImplemented
        return self.key < other.key

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key <= other.key

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key > other.key

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.key >= other.key

    def component(self, index: int) -> int:
        """Return the component at ``index``, zero when absent."""
        return self.components[index] if index < len(self.components) else 0

    def major_upper_bound(self) -> Version:
        """Return the first version of the next major line.

        The major line is identified by the first two components, so
        ``1.2.3`` gives ``1.3`` and ``4`` gives ``4.1``.

        Example:
            >>> str(Version.parse("1.2.3").major_upper_bound())
            '1.3'
        """
        return Version((self.component(0), self.component(1) + 1))

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a dotted version string like '1.2.3'.

        Raises:
            VersionParseError: If the text is not a dotted list of
                non-negative integers.
        """
        return _parse_version(text.strip())


@lru_cache(maxsize=1024)
def _parse_version(text: str) -> Version:
    parts = text.split(".")
    if not text or not all(p.isascii() and p.isdigit() for p in parts):
        msg = f"Invalid version: {text!r}"
        raise VersionParseError(msg)
    return Version(tuple(int(p) for p in parts))


__all__ = ["Version"]
