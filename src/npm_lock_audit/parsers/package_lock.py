"""Parse npm package-lock.json into a flat list of installed dependencies.

Supports lockfile v1 (nested ``dependencies`` tree) and v2/v3 (flat
``packages`` map keyed by install path). A v2 lockfile carries both fields;
both are extracted and concatenated.
"""

from __future__ import annotations

import enum
import json
import logging
from pathlib import Path
from typing import Any
from collections.abc import Mapping

from ..models import Dependency

logger = logging.getLogger(__name__)

NODE_MODULES_PREFIX = "node_modules/"
TREE_SEPARATOR = " > "


class InvalidLockfileError(ValueError):
    """Raised when lockfile content is not valid JSON."""


class LockfileSchema(enum.Enum):
    """Which dependency layouts a lockfile document carries."""

    FLAT_MAP = "flat-map"
    TREE = "tree"
    BOTH = "both"
    NEITHER = "neither"


def detect_schema(document: Any) -> LockfileSchema:
    if not isinstance(document, Mapping):
        return LockfileSchema.NEITHER
    has_packages = isinstance(document.get("packages"), Mapping)
    has_dependencies = isinstance(document.get("dependencies"), Mapping)
    if has_packages and has_dependencies:
        return LockfileSchema.BOTH
    if has_packages:
        return LockfileSchema.FLAT_MAP
    if has_dependencies:
        return LockfileSchema.TREE
    return LockfileSchema.NEITHER


def extract_flat_map(packages: Mapping[str, Any]) -> list[Dependency]:
    """Extract dependencies from a v2/v3 ``packages`` map.

    The root project (key ``""``) is skipped, as are entries without a
    resolved version (links, optional packages that were not installed).
    """
    found: list[Dependency] = []
    for key, meta in packages.items():
        if key == "" or not isinstance(meta, Mapping):
            continue
        name = meta.get("name") or key.removeprefix(NODE_MODULES_PREFIX)
        version = meta.get("version")
        if name and version:
            found.append(Dependency(name=str(name), version=str(version), path=key))
    return found


def extract_tree(dependencies: Mapping[str, Any]) -> list[Dependency]:
    """Walk a v1 ``dependencies`` tree depth-first, parents before children."""
    found: list[Dependency] = []
    stack: list[tuple[str, Any, str]] = [
        (name, meta, "") for name, meta in reversed(list(dependencies.items()))
    ]
    while stack:
        name, meta, prefix = stack.pop()
        if not isinstance(meta, Mapping):
            meta = {}
        version = meta.get("version")
        found.append(
            Dependency(
                name=name,
                version="" if version is None else str(version),
                path=prefix + name,
            )
        )
        children = meta.get("dependencies")
        if isinstance(children, Mapping):
            child_prefix = prefix + name + TREE_SEPARATOR
            stack.extend(
                (child, child_meta, child_prefix)
                for child, child_meta in reversed(list(children.items()))
            )
    return found


def extract_dependencies(document: Any) -> list[Dependency]:
    """Return every dependency declared by a decoded lockfile document."""
    schema = detect_schema(document)
    logger.debug("Detected lockfile layout: %s", schema.value)

    dependencies: list[Dependency] = []
    if schema in (LockfileSchema.FLAT_MAP, LockfileSchema.BOTH):
        dependencies.extend(extract_flat_map(document["packages"]))
    if schema in (LockfileSchema.TREE, LockfileSchema.BOTH):
        dependencies.extend(extract_tree(document["dependencies"]))
    return dependencies


def load_lockfile_text(text: str) -> Any:
    """Decode lockfile text, raising InvalidLockfileError on malformed JSON."""
    try:
        return json.loads(text.lstrip("\ufeff"))
    except json.JSONDecodeError as exc:
        raise InvalidLockfileError(
            f"Lockfile is not valid JSON (line {exc.lineno}, column {exc.colno}): {exc.msg}"
        ) from exc


def read_lockfile(path: Path) -> str:
    """Return the text of the lockfile at ``path``, rejecting non UTF-8 content."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidLockfileError(f"Lockfile {path} is not valid UTF-8: {exc.reason}") from exc


def parse(path: Path) -> list[Dependency]:
    """Return the dependencies declared by the lockfile at ``path``."""
    return extract_dependencies(load_lockfile_text(read_lockfile(path)))
