"""Severity classification of installed packages against the reference dataset."""

from __future__ import annotations

from .models import CRITICAL, HIGH, WARNING, Dependency, Finding, ReferenceDataset
from .parsers.semver import compare_versions

_DESCRIPTIONS = {
    CRITICAL: "CRITICAL - Exact compromised version detected in {attack} attack",
    HIGH: "HIGH - This package has compromised versions. Your version is higher but stay vigilant.",
    WARNING: "MEDIUM - Package known as compromised but your version differs.",
}


def classify_dependency(dependency: Dependency, dataset: ReferenceDataset) -> Finding | None:
    """Return a Finding when the dependency name is known to be compromised.

    Severity tiers, first match wins:
    - critical: the installed version is listed as compromised
    - high: the installed version is higher than at least one listed version
    - warning: any other version of a compromised package
    """
    entry = dataset.lookup(dependency.name)
    if entry is None:
        return None

    versions = entry.compromised_versions

    if dependency.version in versions:
        return Finding(
            dependency=dependency,
            severity=CRITICAL,
            exact_match=True,
            compromised_versions=versions,
        )

    if any(compare_versions(dependency.version, version) > 0 for version in versions):
        severity = HIGH
    else:
        severity = WARNING

    return Finding(
        dependency=dependency,
        severity=severity,
        exact_match=False,
        compromised_versions=versions,
    )


def classify(name: str, version: str, dataset: ReferenceDataset) -> Finding | None:
    return classify_dependency(Dependency(name=name, version=version, path=name), dataset)


def describe(finding: Finding, attack_name: str) -> str:
    """Human-readable one-line explanation of a finding's severity."""
    return _DESCRIPTIONS[finding.severity].format(attack=attack_name)
