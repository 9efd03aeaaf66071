"""Aggregated outcome of scanning one lockfile."""

from __future__ import annotations

from dataclasses import dataclass

from .finding import CRITICAL, HIGH, WARNING, Finding


@dataclass(frozen=True)
class ScanResult:
    """Counts and findings produced by a single scan."""

    safe_count: int
    findings: tuple[Finding, ...]
    total_count: int

    def __post_init__(self) -> None:
        if self.safe_count < 0:
            raise ValueError("safe_count must be non-negative")
        if self.safe_count + len(self.findings) != self.total_count:
            raise ValueError(
                f"Inconsistent scan counts: {self.safe_count} safe + "
                f"{len(self.findings)} findings != {self.total_count} total"
            )

    def _count(self, severity: str) -> int:
        return sum(1 for finding in self.findings if finding.severity == severity)

    @property
    def critical_count(self) -> int:
        return self._count(CRITICAL)

    @property
    def high_count(self) -> int:
        return self._count(HIGH)

    @property
    def warning_count(self) -> int:
        return self._count(WARNING)

    @property
    def has_findings(self) -> bool:
        return bool(self.findings)

    @property
    def is_empty(self) -> bool:
        """True when the lockfile declared no dependencies at all."""
        return self.total_count == 0

    def to_dict(self) -> dict[str, object]:
        return {
            "safeCount": self.safe_count,
            "totalCount": self.total_count,
            "hasFindings": self.has_findings,
            "totals": {
                "critical": self.critical_count,
                "high": self.high_count,
                "warning": self.warning_count,
            },
            "findings": [finding.to_dict() for finding in self.findings],
        }
