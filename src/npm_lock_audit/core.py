"""Core scanning entrypoints.

This module has no CLI or presentation concerns so it can back both the
command line tool and any other front end that feeds it a lockfile.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

from .models import ReferenceDataset, ScanResult
from .parsers.package_lock import extract_dependencies, load_lockfile_text, read_lockfile
from .report import scan_dependencies
from .validators.dataset import DatasetValidationError, validate_document

logger = logging.getLogger(__name__)


class DatasetError(RuntimeError):
    """Raised when the reference dataset cannot be loaded.

    There is no degraded mode: without a dataset every package would look safe.
    """


# ---- Reference dataset loading ----------------------------------------------------------


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:  # pragma: no cover - patched in tests
    return requests.get(url, timeout=30)


def _fetch_text(url: str) -> str:
    try:
        response = _http_get(url)
    except requests.RequestException as exc:
        raise DatasetError(f"Failed to fetch dataset from {url}: {exc}") from exc
    if response.status_code != 200:
        raise DatasetError(f"Unexpected status code {response.status_code} fetching {url}")
    return response.text


def _read_source(source: str | Path) -> str:
    text_source = str(source)
    if text_source.startswith(("http://", "https://")):
        return _fetch_text(text_source)

    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DatasetError(f"Dataset file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise DatasetError(f"Dataset file {path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise DatasetError(f"Failed to read dataset file {path}: {exc}") from exc


def parse_dataset(payload: Any) -> ReferenceDataset:
    """Validate a decoded dataset document and convert it."""
    try:
        validate_document(payload)
        return ReferenceDataset.from_dict(payload)
    except DatasetValidationError as exc:
        raise DatasetError(f"Dataset failed validation:{exc}") from exc
    except ValueError as exc:
        raise DatasetError(f"Invalid dataset: {exc}") from exc


def load_dataset(source: str | Path) -> ReferenceDataset:
    """Load the reference dataset from a URL or filesystem path.

    Each call returns a new immutable dataset; swap references to reload.

    Raises:
        DatasetError: If the source is missing, unreadable, not JSON or does
            not match the dataset schema.
    """
    logger.debug("Loading reference dataset from %s", source)
    text = _read_source(source)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Dataset {source} is not valid JSON: {exc}") from exc

    dataset = parse_dataset(payload)
    logger.info(
        "Loaded %d compromised packages (%d versions) for %s, updated %s",
        dataset.package_count,
        dataset.version_count,
        dataset.attack_name,
        dataset.last_update.isoformat(),
    )
    return dataset


# ---- Scanning ---------------------------------------------------------------------------


def scan_document(document: Any, dataset: ReferenceDataset) -> ScanResult:
    """Scan an already decoded lockfile document."""
    result = scan_dependencies(extract_dependencies(document), dataset)
    if result.is_empty:
        logger.warning("No dependencies found; is this a package-lock.json file?")
    else:
        logger.info(
            "Analyzed %d packages: %d safe, %d critical, %d high, %d warning",
            result.total_count,
            result.safe_count,
            result.critical_count,
            result.high_count,
            result.warning_count,
        )
    return result


def scan_text(text: str, dataset: ReferenceDataset) -> ScanResult:
    """Scan pasted lockfile content.

    Raises:
        InvalidLockfileError: If ``text`` is not valid JSON.
    """
    return scan_document(load_lockfile_text(text), dataset)


def scan_lockfile(path: Path, dataset: ReferenceDataset) -> ScanResult:
    """Scan the lockfile at ``path``.

    Raises:
        InvalidLockfileError: If the file is not UTF-8 encoded JSON.
    """
    return scan_text(read_lockfile(path), dataset)
