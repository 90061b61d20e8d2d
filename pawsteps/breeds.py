"""Breed catalog for PawSteps.

The estimation engine only needs ``lookup``; applications use ``all`` and
``search`` to populate breed pickers. :class:`StaticBreedCatalog` is
immutable after construction and safe to share between concurrent
estimation calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Final, Protocol, runtime_checkable

from .types import BreedProfile, BreedProfilePayload

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class BreedCatalog(Protocol):
    """Read-only source of breed profiles."""

    def lookup(self, name: str) -> BreedProfile | None:
        """Return the profile for ``name`` or None when unknown."""

    def all(self) -> list[BreedProfile]:
        """Return every profile in catalog order."""

    def search(self, query: str) -> list[BreedProfile]:
        """Return profiles whose name, description or size match ``query``."""


DEFAULT_BREEDS: Final[tuple[BreedProfilePayload, ...]] = (
    {"name": "Labrador Retriever", "step_multiplier": 1.4, "description": "Friendly, outgoing, and active dogs", "size_class": "Large", "energy_level": "High"},
    {"name": "Golden Retriever", "step_multiplier": 1.4, "description": "Intelligent, friendly, and devoted dogs", "size_class": "Large", "energy_level": "High"},
    {"name": "German Shepherd", "step_multiplier": 1.3, "description": "Confident, courageous, and smart working dogs", "size_class": "Large", "energy_level": "High"},
    {"name": "French Bulldog", "step_multiplier": 2.0, "description": "Playful, alert, and adaptable", "size_class": "Small", "energy_level": "Moderate"},
    {"name": "Bulldog", "step_multiplier": 2.2, "description": "Calm, courageous, and friendly", "size_class": "Medium", "energy_level": "Low"},
    {"name": "Poodle", "step_multiplier": 1.6, "description": "Intelligent, active, and elegant dogs", "size_class": "Medium", "energy_level": "High"},
    {"name": "Beagle", "step_multiplier": 1.8, "description": "Friendly, curious, and merry hounds", "size_class": "Medium", "energy_level": "High"},
    {"name": "Rottweiler", "step_multiplier": 1.2, "description": "Loyal, loving, and confident guardians", "size_class": "Large", "energy_level": "Moderate"},
    {"name": "Yorkshire Terrier", "step_multiplier": 3.0, "description": "Brave, determined, and energetic toy dogs", "size_class": "Toy", "energy_level": "High"},
    {"name": "Dachshund", "step_multiplier": 2.5, "description": "Friendly and curious hounds", "size_class": "Small", "energy_level": "Moderate"},
    {"name": "Siberian Husky", "step_multiplier": 1.1, "description": "Outgoing, mischievous, and loyal working dogs", "size_class": "Large", "energy_level": "Very High"},
    {"name": "Boxer", "step_multiplier": 1.3, "description": "Fun-loving, bright, and active family dogs", "size_class": "Large", "energy_level": "High"},
    {"name": "Boston Terrier", "step_multiplier": 2.1, "description": "Friendly, bright, and amusing companions", "size_class": "Small", "energy_level": "Moderate"},
    {"name": "Shih Tzu", "step_multiplier": 2.8, "description": "Friendly, outgoing, and affectionate toy dogs", "size_class": "Toy", "energy_level": "Low"},
    {"name": "Cocker Spaniel", "step_multiplier": 1.7, "description": "Gentle, smart, and happy sporting dogs", "size_class": "Medium", "energy_level": "High"},
    {"name": "Border Collie", "step_multiplier": 1.2, "description": "Remarkably bright, energetic, and athletic", "size_class": "Medium", "energy_level": "Very High"},
    {"name": "Chihuahua", "step_multiplier": 4.0, "description": "Graceful, alert, and swift-moving tiny dogs", "size_class": "Toy", "energy_level": "High"},
    {"name": "Great Dane", "step_multiplier": 0.9, "description": "Friendly, patient, and dependable gentle giants", "size_class": "Extra Large", "energy_level": "Moderate"},
    {"name": "Pomeranian", "step_multiplier": 3.5, "description": "Inquisitive, bold, and lively toy dogs", "size_class": "Toy", "energy_level": "High"},
    {"name": "Australian Shepherd", "step_multiplier": 1.2, "description": "Smart, work-oriented, and exuberant", "size_class": "Medium", "energy_level": "Very High"},
    {"name": "Mixed Breed", "step_multiplier": 1.5, "description": "A wonderful mix with unique characteristics", "size_class": "Medium", "energy_level": "Moderate"},
)  # fmt: skip


class StaticBreedCatalog:
    """In-memory breed catalog with case-insensitive lookup."""

    __slots__ = ("_breeds", "_by_name")

    def __init__(self, breeds: Iterable[BreedProfile] | None = None) -> None:
        """Initialize the catalog.

        Args:
            breeds: Profiles to serve; the built-in breed list when omitted.
                Later duplicates of a name (case-insensitive) are ignored.
        """
        if breeds is None:
            breeds = (BreedProfile.from_dict(payload) for payload in DEFAULT_BREEDS)

        ordered: list[BreedProfile] = []
        by_name: dict[str, BreedProfile] = {}
        for breed in breeds:
            key = breed.name.casefold()
            if key in by_name:
                _LOGGER.warning("Ignoring duplicate breed entry '%s'", breed.name)
                continue
            by_name[key] = breed
            ordered.append(breed)

        self._breeds: tuple[BreedProfile, ...] = tuple(ordered)
        self._by_name: dict[str, BreedProfile] = by_name
        _LOGGER.debug("Loaded %d breeds", len(self._breeds))

    @classmethod
    def from_payloads(cls, payloads: Iterable[BreedProfilePayload]) -> StaticBreedCatalog:
        """Build a catalog from raw catalog data."""
        return cls(BreedProfile.from_dict(payload) for payload in payloads)

    def __len__(self) -> int:
        return len(self._breeds)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().casefold() in self._by_name

    def lookup(self, name: str) -> BreedProfile | None:
        if not name:
            return None
        return self._by_name.get(name.strip().casefold())

    def all(self) -> list[BreedProfile]:
        return list(self._breeds)

    def search(self, query: str) -> list[BreedProfile]:
        needle = (query or "").strip().casefold()
        if not needle:
            return self.all()

        return [
            breed
            for breed in self._breeds
            if needle in breed.name.casefold()
            or needle in breed.description.casefold()
            or needle in breed.size_class.label.casefold()
        ]
