"""JSON Schema validation for the compromised package reference dataset."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from collections.abc import Iterable

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "reference-dataset.schema.json"


class DatasetValidationError(ValueError):
    """Raised when a dataset document does not match the schema."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("\n" + "\n".join(errors))


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def load_schema(schema_path: Path = SCHEMA_PATH) -> dict[str, Any]:
    return _load_json(schema_path)


def _format_errors(errors: Iterable[ValidationError]) -> list[str]:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return messages


def validate_document(document: Any, schema_path: Path = SCHEMA_PATH) -> None:
    """Raise DatasetValidationError listing every schema violation in ``document``."""
    validator = Draft202012Validator(load_schema(schema_path))
    errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
    if errors:
        raise DatasetValidationError(_format_errors(errors))


def validate_file(input_path: Path, schema_path: Path = SCHEMA_PATH) -> None:
    """Validate the dataset file at ``input_path``.

    Raises FileNotFoundError, json.JSONDecodeError or DatasetValidationError.
    """
    validate_document(_load_json(input_path), schema_path)
