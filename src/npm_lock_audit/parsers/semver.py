"""Lenient numeric version comparison.

Versions are compared as dot-separated unsigned integers. Components that are
not plain decimal integers (letters, empty segments, pre-release suffixes such
as ``0-beta``) count as ``0``, and missing trailing components are padded with
``0``, so ``"1.2"`` equals ``"1.2.0"``. Comparison never raises.
"""

from __future__ import annotations


def _coerce_component(component: str) -> int:
    stripped = component.strip()
    if stripped.isascii() and stripped.isdigit():
        return int(stripped)
    return 0


def parse_version(value: str, width: int | None = None) -> tuple[int, ...]:
    """Return the integer components of ``value``, right-padded to ``width``."""
    parts = tuple(_coerce_component(component) for component in value.split("."))
    if width is not None and len(parts) < width:
        parts += (0,) * (width - len(parts))
    return parts


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as ``a`` is lower than, equal to or higher than ``b``."""
    width = max(len(a.split(".")), len(b.split(".")))
    left = parse_version(a, width)
    right = parse_version(b, width)
    if left > right:
        return 1
    if left < right:
        return -1
    return 0
