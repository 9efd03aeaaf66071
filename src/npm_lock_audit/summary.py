"""Human-readable Markdown rendering of a scan result."""

from __future__ import annotations

from datetime import date

from .classifier import describe
from .models import CRITICAL, HIGH, WARNING, ReferenceDataset, ScanResult

SEVERITY_LABELS = {
    CRITICAL: "CRITICAL",
    HIGH: "HIGH",
    WARNING: "MEDIUM",
}


def format_date(value: date) -> str:
    """Format like ``November 25, 2025``."""
    return f"{value:%B} {value.day}, {value.year}"


def _percent(part: int, total: int) -> str:
    if total == 0:
        return "0.0%"
    return f"{part / total * 100:.1f}%"


def removal_command(name: str) -> str:
    return f"npm uninstall {name}"


def render_summary(result: ScanResult, dataset: ReferenceDataset) -> str:
    """Return a Markdown report with counts, findings and statistics."""
    lines = []
    lines.append("# npm-lock-audit Summary")
    lines.append("")
    lines.append(
        f"Reference data: {dataset.package_count} compromised packages - {dataset.attack_name} "
        f"(last update: {format_date(dataset.last_update)})"
    )
    lines.append("")
    lines.append(
        f"Safe: {result.safe_count} | "
        f"Warnings: {result.high_count + result.warning_count} | "
        f"Critical: {result.critical_count}"
    )
    lines.append("")

    if result.is_empty:
        lines.append(
            "> **Warning:** No dependencies found. Make sure the input is a "
            "package-lock.json file."
        )
        return "\n".join(lines) + "\n"

    if not result.has_findings:
        lines.append("No threats detected. All your packages are safe according to our database.")
    else:
        lines.append("| Package | Severity | Installed | Compromised | Path | Removal |")
        lines.append("| --- | --- | --- | --- | --- | --- |")
        for finding in result.findings:
            label = SEVERITY_LABELS[finding.severity]
            versions = ", ".join(finding.compromised_versions)
            lines.append(
                f"| {finding.name} | {label} | {finding.installed_version} | {versions} | "
                f"{finding.dependency.path} | `{removal_command(finding.name)}` |"
            )
        lines.append("")
        for finding in result.findings:
            lines.append(f"- **{finding.name}**: {describe(finding, dataset.attack_name)}")

    threats = len(result.findings)
    lines.append("")
    lines.append("## Statistics")
    lines.append("")
    lines.append(f"- Total packages analyzed: {result.total_count}")
    lines.append(
        f"- Safe packages: {result.safe_count} ({_percent(result.safe_count, result.total_count)})"
    )
    lines.append(f"- Threats detected: {threats} ({_percent(threats, result.total_count)})")

    return "\n".join(lines) + "\n"
