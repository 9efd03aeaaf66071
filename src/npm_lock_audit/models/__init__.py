"""Data models for compromised package detection."""

from __future__ import annotations

from .compromised_entry import CompromisedEntry
from .dependency import Dependency
from .finding import CRITICAL, HIGH, SEVERITIES, WARNING, Finding
from .reference_dataset import ReferenceDataset
from .scan_result import ScanResult

__all__ = [
    "CRITICAL",
    "HIGH",
    "SEVERITIES",
    "WARNING",
    "CompromisedEntry",
    "Dependency",
    "Finding",
    "ReferenceDataset",
    "ScanResult",
]
