"""Finding model for a dependency matching a compromised package."""

from __future__ import annotations

from dataclasses import dataclass

from .dependency import Dependency

CRITICAL = "critical"
HIGH = "high"
WARNING = "warning"

SEVERITIES = (CRITICAL, HIGH, WARNING)


@dataclass(frozen=True)
class Finding:
    """Classification of one dependency whose name is known to be compromised."""

    dependency: Dependency
    severity: str
    exact_match: bool
    compromised_versions: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity}")
        if self.exact_match and self.severity != CRITICAL:
            raise ValueError("Only critical findings can be exact matches")

    @property
    def name(self) -> str:
        return self.dependency.name

    @property
    def installed_version(self) -> str:
        return self.dependency.version

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.dependency.name,
            "version": self.dependency.version,
            "path": self.dependency.path,
            "severity": self.severity,
            "exactMatch": self.exact_match,
            "compromisedVersions": list(self.compromised_versions),
        }
