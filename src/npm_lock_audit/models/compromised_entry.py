"""Compromised package entry model."""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Iterable


@dataclass(frozen=True)
class CompromisedEntry:
    """Represent a compromised package and its known malicious versions."""

    name: str
    compromised_versions: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must be non-empty")
        if any(not isinstance(version, str) for version in self.compromised_versions):
            raise ValueError(f"Versions of '{self.name}' must be strings")

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "compromisedVersions": list(self.compromised_versions),
        }

    @classmethod
    def from_iterable(cls, name: str, versions: Iterable[str]) -> CompromisedEntry:
        return cls(name=name, compromised_versions=tuple(versions))

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> CompromisedEntry:
        name = data.get("name")
        versions = data.get("compromisedVersions")
        if not isinstance(name, str):
            raise ValueError("Compromised entry is missing a string 'name'")
        if not isinstance(versions, list):
            raise ValueError(f"Compromised entry '{name}' is missing 'compromisedVersions'")
        return cls.from_iterable(name, versions)
