"""Dependency model extracted from a lockfile."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dependency:
    """A single installed package as declared by a lockfile.

    ``path`` records where in the lockfile the entry came from; it is never
    used for matching.
    """

    name: str
    version: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version, "path": self.path}
