"""Pydantic schemas for external data boundaries.

Purpose
-------
Define Pydantic models for data that crosses system boundaries:
- Input: the package index snapshot file
- Output: JSON serialization of findings

These models handle validation, coercion, and serialization at the edges
while internal business logic uses lightweight dataclasses.

Data Flow Pattern
-----------------
External Input → Pydantic (validate) → Dataclass (domain) → Pydantic (serialize) → External Output
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Finding
from .version import Version


def _empty_packages() -> dict[str, list[str]]:
    """Return empty package mapping for default factory."""
    return {}


class PackageIndexSchema(BaseModel):
    """Schema for a package index snapshot.

    Example document::

        {"packages": {"foo": ["1.2.0", "1.2.5"], "bar": ["0.1"]}}
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    packages: dict[str, list[str]] = Field(default_factory=_empty_packages)

    @field_validator("packages")
    @classmethod
    def _versions_are_parseable(cls, packages: dict[str, list[str]]) -> dict[str, list[str]]:
        for name, versions in packages.items():
            for text in versions:
                try:
                    Version.parse(text)
                except ValueError as exc:
                    msg = f"package {name!r}: {exc}"
                    raise ValueError(msg) from exc
        return packages


class FindingSchema(BaseModel):
    """Pydantic schema for serializing a finding to JSON."""

    model_config = ConfigDict(frozen=True)

    package: str = Field(description="The name of the package")
    version_range: str = Field(description="The declared (simplified) version range")
    latest_version: str = Field(description="Latest version the policy allows")

    @classmethod
    def from_finding(cls, finding: Finding) -> FindingSchema:
        return cls(
            package=finding.dependency.name,
            version_range=str(finding.dependency.version_range),
            latest_version=str(finding.latest),
        )


__all__ = [
    "FindingSchema",
    "PackageIndexSchema",
]
