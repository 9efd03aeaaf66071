"""Shared test fixtures for npm-lock-audit tests."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from npm_lock_audit.models import CompromisedEntry, ReferenceDataset

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> Any:
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def dataset() -> ReferenceDataset:
    """Small in-memory dataset with a single compromised version of ``X``."""
    return ReferenceDataset.from_entries(
        attack_name="Test Attack",
        last_update=date(2025, 11, 25),
        source="https://example.invalid/iocs.csv",
        entries=[
            CompromisedEntry.from_iterable("X", ["1.0.0"]),
            CompromisedEntry.from_iterable("posthog-node", ["4.18.1", "5.11.3", "5.13.3"]),
        ],
    )


@pytest.fixture
def fixture_dataset() -> ReferenceDataset:
    return ReferenceDataset.from_dict(load_fixture("compromised-packages.json"))


@pytest.fixture
def lockfile_v1() -> dict[str, Any]:
    return load_fixture("package-lock-v1.json")


@pytest.fixture
def lockfile_v3() -> dict[str, Any]:
    return load_fixture("package-lock-v3.json")
