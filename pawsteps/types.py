"""Shared value types for PawSteps.

Enumerations, immutable value objects and the ``TypedDict`` payloads used
when handing records to a persistence provider. Everything here is plain
data: the estimation engine and the session manager create these objects,
nothing mutates them after construction.

Python: 3.12+
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, NotRequired, Self, TypedDict

from .exceptions import BreedProfileError
from .utils import ensure_utc_datetime, safe_divide, utcnow

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")


def _normalize_label(value: str) -> str:
    """Normalise ``"Extra Large"``, ``"ExtraLarge"`` or ``"extra-large"``."""
    spaced = _CAMEL_BOUNDARY.sub("_", value.strip())
    return re.sub(r"[\s\-]+", "_", spaced).lower()


class _LabelledEnum(StrEnum):
    """String enum with a display label and lenient parsing."""

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, value: str | Self | None) -> Self | None:
        """Return the member matching ``value`` or None when unrecognised."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalize_label(str(value)))
        except ValueError:
            return None


class SizeClass(_LabelledEnum):
    """Breed size classes."""

    TOY = "toy"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    EXTRA_LARGE = "extra_large"


class EnergyLevel(_LabelledEnum):
    """Breed energy levels."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class BodyCondition(_LabelledEnum):
    """Owner-reported body condition of the dog."""

    SKINNY = "skinny"  # ribs clearly visible
    IDEAL = "ideal"  # visible waist, ribs easy to feel
    CHUBBY = "chubby"  # no visible waist


class EstimationConfidence(_LabelledEnum):
    """Coarse reliability rating of an estimation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def accuracy_label(self) -> str:
        return {
            EstimationConfidence.HIGH: "Very Accurate",
            EstimationConfidence.MEDIUM: "Good Estimate",
            EstimationConfidence.LOW: "Approximate",
        }[self]


class ActivityLevel(_LabelledEnum):
    """Activity level classification relative to the daily goal."""

    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class ActivityTrend(_LabelledEnum):
    """Direction of recent activity."""

    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"


class TrackingMode(_LabelledEnum):
    """Mutually exclusive tracking modes of the session manager."""

    INACTIVE = "inactive"
    DAILY = "daily"
    SESSION = "session"


class AuthorizationStatus(_LabelledEnum):
    """Motion permission state reported by the platform."""

    NOT_DETERMINED = "not_determined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"


class DataSource(_LabelledEnum):
    """Where the step counts of a walk came from."""

    CORE_MOTION = "core_motion"
    HEALTH_KIT = "health_kit"
    HYBRID = "hybrid"


@dataclass(frozen=True, slots=True)
class BreedProfile:
    """Catalog entry for one dog breed.

    Attributes:
        step_multiplier: Dog steps per human step, driven mostly by the
            ratio of stride lengths. Must be positive and finite.
    """

    name: str
    size_class: SizeClass
    energy_level: EnergyLevel
    step_multiplier: float
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise BreedProfileError(repr(self.name), "name must not be empty")
        if (
            isinstance(self.step_multiplier, bool)
            or not isinstance(self.step_multiplier, (int, float))
            or not math.isfinite(self.step_multiplier)
            or self.step_multiplier <= 0
        ):
            raise BreedProfileError(
                self.name, f"step multiplier must be positive, got {self.step_multiplier!r}"
            )

    @property
    def has_description(self) -> bool:
        return bool(self.description.strip())

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.size_class.label})"

    @property
    def summary(self) -> str:
        return f"{self.name} • {self.size_class.label} • {self.energy_level.label} Energy"

    @classmethod
    def from_dict(cls, data: BreedProfilePayload) -> BreedProfile:
        """Build a profile from catalog data, accepting display labels."""
        size_class = SizeClass.parse(data["size_class"])
        energy_level = EnergyLevel.parse(data["energy_level"])
        if size_class is None:
            raise BreedProfileError(data["name"], f"unknown size class {data['size_class']!r}")
        if energy_level is None:
            raise BreedProfileError(
                data["name"], f"unknown energy level {data['energy_level']!r}"
            )
        return cls(
            name=data["name"],
            size_class=size_class,
            energy_level=energy_level,
            step_multiplier=float(data["step_multiplier"]),
            description=data.get("description", ""),
        )


@dataclass(frozen=True, slots=True)
class HumanActivitySample:
    """Pedometer reading for a point in time or a whole day."""

    timestamp: datetime
    human_steps: int
    distance_meters: float = 0.0

    def __post_init__(self) -> None:
        if self.human_steps < 0:
            raise ValueError(f"human_steps must be non-negative, got {self.human_steps}")
        if self.distance_meters < 0:
            raise ValueError(
                f"distance_meters must be non-negative, got {self.distance_meters}"
            )


@dataclass(frozen=True, slots=True)
class DogStepEstimation:
    """Result of one estimation call. Superseded, never edited."""

    human_steps: int
    estimated_dog_steps: int
    breed_multiplier: float
    breed_name: str
    confidence: EstimationConfidence
    activity_level: ActivityLevel
    recommended_goal: int
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def step_ratio(self) -> float:
        """Dog steps per human step actually applied (0 without human steps)."""
        return safe_divide(self.estimated_dog_steps, self.human_steps)

    @property
    def accuracy_label(self) -> str:
        return self.confidence.accuracy_label

    @property
    def goal_progress(self) -> float:
        return safe_divide(self.estimated_dog_steps, self.recommended_goal)

    @property
    def summary(self) -> str:
        return (
            f"Estimated {self.estimated_dog_steps} dog steps from "
            f"{self.human_steps} human steps ({self.breed_name}, "
            f"{self.step_ratio:.1f}x multiplier)"
        )

    def as_dict(self) -> DogStepEstimationPayload:
        return {
            "human_steps": self.human_steps,
            "estimated_dog_steps": self.estimated_dog_steps,
            "breed_multiplier": self.breed_multiplier,
            "breed_name": self.breed_name,
            "confidence": self.confidence.value,
            "activity_level": self.activity_level.value,
            "recommended_goal": self.recommended_goal,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: DogStepEstimationPayload) -> DogStepEstimation:
        """Restore a stored estimation; unknown enum labels degrade."""
        return cls(
            human_steps=int(data["human_steps"]),
            estimated_dog_steps=int(data["estimated_dog_steps"]),
            breed_multiplier=float(data["breed_multiplier"]),
            breed_name=data["breed_name"],
            confidence=EstimationConfidence.parse(data.get("confidence"))
            or EstimationConfidence.MEDIUM,
            activity_level=ActivityLevel.parse(data.get("activity_level"))
            or ActivityLevel.MODERATE,
            recommended_goal=int(data["recommended_goal"]),
            timestamp=ensure_utc_datetime(data.get("timestamp")) or utcnow(),
        )


@dataclass(frozen=True, slots=True)
class DailyTotals:
    """Running human totals since local midnight while in daily mode."""

    start_of_day: datetime
    steps: int = 0
    distance_meters: float = 0.0
    last_update: datetime | None = None


@dataclass(frozen=True, slots=True)
class ActiveSessionTotals:
    """Running human totals of the walk in progress."""

    start_time: datetime
    steps: int = 0
    distance_meters: float = 0.0
    last_update: datetime | None = None

    def duration_seconds(self, now: datetime) -> float:
        return max(0.0, (now - self.start_time).total_seconds())


@dataclass(frozen=True, slots=True)
class WalkSessionData:
    """Snapshot of session totals; ``end_time`` is None while live."""

    steps: int
    distance_meters: float
    duration_seconds: float
    start_time: datetime
    end_time: datetime | None = None


class BreedProfilePayload(TypedDict):
    """Catalog data for one breed."""

    name: str
    size_class: str
    energy_level: str
    step_multiplier: float
    description: NotRequired[str]


class DogStepEstimationPayload(TypedDict):
    """Stored form of :class:`DogStepEstimation`."""

    human_steps: int
    estimated_dog_steps: int
    breed_multiplier: float
    breed_name: str
    confidence: str
    activity_level: str
    recommended_goal: int
    timestamp: str


class WalkSessionPayload(TypedDict):
    """Stored form of a finished walk session."""

    id: str
    start_time: str
    end_time: str
    duration_seconds: float
    human_steps: int
    estimated_dog_steps: int
    distance_meters: float
    breed_name: str
    breed_multiplier: float
    data_source: str


class DailyStepRecordPayload(TypedDict):
    """Stored form of a daily step record."""

    id: str
    date: str
    human_steps: int
    estimated_dog_steps: int
    distance_meters: float
    breed_name: str
    breed_multiplier: float
    confidence: str
    activity_level: str
    goal_steps: int
    created_at: str


type JSONMapping = dict[str, Any]
