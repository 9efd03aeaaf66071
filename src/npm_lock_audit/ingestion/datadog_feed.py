"""DataDog indicators-of-compromise feed ingestion helpers.

The feed is a CSV with a header row and the columns
``package_name,package_versions,sources``; ``package_versions`` is a quoted,
comma-joined list of compromised versions.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from collections.abc import Iterable

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

from ..models import ReferenceDataset

logger = logging.getLogger(__name__)

DATADOG_FEED_URL = (
    "https://raw.githubusercontent.com/DataDog/"
    "indicators-of-compromise/main/shai-hulud-2.0/consolidated_iocs.csv"
)
DATADOG_SOURCE_URL = (
    "https://github.com/DataDog/"
    "indicators-of-compromise/blob/main/shai-hulud-2.0/consolidated_iocs.csv"
)
DEFAULT_ATTACK_NAME = "Shai Hulud 2.0"

USER_AGENT = "npm-lock-audit (+https://github.com/DataDog/indicators-of-compromise)"


class DataDogFeedError(RuntimeError):
    """Raised when the DataDog IOC feed cannot be fetched or parsed."""


@dataclass(slots=True)
class DataDogFeedAggregation:
    """Aggregated DataDog IOC feed content, in feed order."""

    packages: dict[str, list[str]]
    total_records: int
    skipped_records: list[str]

    @property
    def package_count(self) -> int:
        return len(self.packages)

    @property
    def version_count(self) -> int:
        return sum(len(versions) for versions in self.packages.values())


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:
    return requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=30)


def fetch_datadog_feed(url: str = DATADOG_FEED_URL) -> bytes:
    """Return the raw DataDog IOC CSV payload."""

    try:
        response = _http_get(url)
    except requests.RequestException as exc:  # pragma: no cover - network failure path
        raise DataDogFeedError(f"Failed to fetch DataDog feed: {exc}") from exc

    if response.status_code != 200:
        raise DataDogFeedError(
            f"Unexpected status code {response.status_code} fetching DataDog feed"
        )

    return response.content


def _split_versions(raw: str) -> list[str]:
    return [version.strip() for version in raw.split(",") if version.strip()]


def _iter_rows(payload: bytes) -> Iterable[tuple[int, list[str]]]:
    text = payload.decode("utf-8-sig", errors="replace")
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    header = next(reader, None)
    if not header:
        raise DataDogFeedError("DataDog feed payload is empty")
    for index, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue
        yield index, row


def aggregate_datadog_payload(payload: bytes) -> DataDogFeedAggregation:
    """Aggregate the DataDog CSV payload into mapping of package -> versions.

    Rows repeating a package name are merged into the first occurrence.
    """

    packages: dict[str, list[str]] = {}
    skipped: list[str] = []
    total = 0

    for index, row in _iter_rows(payload):
        total += 1
        if len(row) < 2:
            skipped.append(f"row {index}: expected at least 2 columns, got {len(row)}")
            continue

        name = row[0].strip()
        versions = _split_versions(row[1])

        if not name:
            skipped.append(f"row {index}: missing package name")
            continue
        if not versions:
            skipped.append(f"row {index}: no versions for '{name}'")
            continue

        known = packages.setdefault(name, [])
        for version in versions:
            if version not in known:
                known.append(version)

    if not packages:
        raise DataDogFeedError("DataDog feed returned no valid package entries")

    for reason in skipped:
        logger.warning("Skipped DataDog feed %s", reason)

    return DataDogFeedAggregation(
        packages=packages,
        total_records=total,
        skipped_records=skipped,
    )


def build_dataset(
    aggregation: DataDogFeedAggregation,
    *,
    attack_name: str = DEFAULT_ATTACK_NAME,
    source: str = DATADOG_SOURCE_URL,
    last_update: date | None = None,
) -> ReferenceDataset:
    return ReferenceDataset.from_mapping(
        attack_name=attack_name,
        last_update=last_update or date.today(),
        source=source,
        mapping=aggregation.packages,
    )


def write_dataset(dataset: ReferenceDataset, path: Path) -> None:
    """Write ``dataset`` as pretty-printed JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dataset.to_dict(), indent=2) + "\n", encoding="utf-8")
