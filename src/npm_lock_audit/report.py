"""Scan aggregation over extracted dependencies."""

from __future__ import annotations

from collections.abc import Iterable

from .classifier import classify_dependency
from .models import Dependency, Finding, ReferenceDataset, ScanResult


def scan_dependencies(
    dependencies: Iterable[Dependency], dataset: ReferenceDataset
) -> ScanResult:
    """Classify every dependency and accumulate counts and findings.

    Each occurrence is scored independently: a package installed at several
    paths contributes one finding (or one safe count) per path. Findings keep
    the input order.
    """

    safe = 0
    total = 0
    findings: list[Finding] = []

    for dependency in dependencies:
        total += 1
        finding = classify_dependency(dependency, dataset)
        if finding is None:
            safe += 1
        else:
            findings.append(finding)

    return ScanResult(safe_count=safe, findings=tuple(findings), total_count=total)
