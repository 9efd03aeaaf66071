"""Reference dataset of compromised packages for a single supply-chain attack."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from collections.abc import Iterable, Mapping

from .compromised_entry import CompromisedEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceDataset:
    """Immutable snapshot of the compromised package list.

    Built once at startup and passed explicitly to the classifier. Reloading
    produces a new instance; nothing mutates an existing one.
    """

    attack_name: str
    last_update: date
    source: str
    compromised_packages: tuple[CompromisedEntry, ...]
    _index: Mapping[str, CompromisedEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, CompromisedEntry] = {}
        for entry in self.compromised_packages:
            if entry.name in index:
                logger.warning("Duplicate compromised package '%s'; keeping first entry", entry.name)
                continue
            index[entry.name] = entry
        object.__setattr__(self, "_index", MappingProxyType(index))

    def lookup(self, name: str) -> CompromisedEntry | None:
        """Return the entry whose name equals ``name`` exactly, if any."""
        return self._index.get(name)

    @property
    def package_count(self) -> int:
        return len(self.compromised_packages)

    @property
    def version_count(self) -> int:
        return sum(len(entry.compromised_versions) for entry in self.compromised_packages)

    def to_dict(self) -> dict[str, object]:
        return {
            "attackName": self.attack_name,
            "lastUpdate": self.last_update.isoformat(),
            "source": self.source,
            "compromisedPackages": [entry.to_dict() for entry in self.compromised_packages],
        }

    @classmethod
    def from_entries(
        cls,
        *,
        attack_name: str,
        last_update: date,
        source: str,
        entries: Iterable[CompromisedEntry],
    ) -> ReferenceDataset:
        return cls(
            attack_name=attack_name,
            last_update=last_update,
            source=source,
            compromised_packages=tuple(entries),
        )

    @classmethod
    def from_mapping(
        cls,
        *,
        attack_name: str,
        last_update: date,
        source: str,
        mapping: Mapping[str, Iterable[str]],
    ) -> ReferenceDataset:
        entries = [CompromisedEntry.from_iterable(name, versions) for name, versions in mapping.items()]
        return cls.from_entries(
            attack_name=attack_name,
            last_update=last_update,
            source=source,
            entries=entries,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReferenceDataset:
        """Build a dataset from the decoded JSON document.

        Raises ValueError when a required field is missing or has the wrong type.
        """
        attack_name = data.get("attackName")
        if not isinstance(attack_name, str):
            raise ValueError("Dataset is missing a string 'attackName'")

        raw_date = data.get("lastUpdate")
        if not isinstance(raw_date, str):
            raise ValueError("Dataset is missing a string 'lastUpdate'")
        try:
            last_update = date.fromisoformat(raw_date)
        except ValueError as exc:
            raise ValueError(f"Invalid 'lastUpdate' value '{raw_date}': {exc}") from exc

        source = data.get("source")
        if not isinstance(source, str):
            raise ValueError("Dataset is missing a string 'source'")

        packages = data.get("compromisedPackages")
        if not isinstance(packages, list):
            raise ValueError("Dataset is missing the 'compromisedPackages' array")

        entries: list[CompromisedEntry] = []
        for index, entry in enumerate(packages):
            if not isinstance(entry, dict):
                raise ValueError(f"Compromised package at index {index} must be an object")
            entries.append(CompromisedEntry.from_dict(entry))

        return cls.from_entries(
            attack_name=attack_name,
            last_update=last_update,
            source=source,
            entries=entries,
        )
