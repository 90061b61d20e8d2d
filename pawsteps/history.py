"""Daily step records and weekly aggregation of finished walks."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum

from .const import DEFAULT_DAILY_GOAL, METERS_PER_MILE, WEEKLY_WINDOW_DAYS
from .estimation import BreedRef, StepEstimationEngine
from .types import (
    ActivityLevel,
    BodyCondition,
    DailyStepRecordPayload,
    DogStepEstimation,
    EstimationConfidence,
)
from .utils import ensure_utc_datetime, safe_divide, start_of_local_day, utcnow
from .walk_session import WalkSession

_LOGGER = logging.getLogger(__name__)


class GoalStatus(StrEnum):
    """How close a day came to its goal."""

    MET = "met"
    ALMOST = "almost"
    PROGRESS = "progress"
    NEEDS_ACTIVITY = "needs_activity"

    @property
    def description(self) -> str:
        return {
            GoalStatus.MET: "Goal achieved!",
            GoalStatus.ALMOST: "Almost there!",
            GoalStatus.PROGRESS: "Good progress",
            GoalStatus.NEEDS_ACTIVITY: "Needs more activity",
        }[self]


@dataclass(frozen=True, slots=True)
class DailyStepRecord:
    """Human and dog step totals for one calendar day."""

    date: date
    human_steps: int
    estimated_dog_steps: int
    breed_name: str
    breed_multiplier: float
    distance_meters: float = 0.0
    confidence: EstimationConfidence = EstimationConfidence.MEDIUM
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal_steps: int = DEFAULT_DAILY_GOAL
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_estimation(
        cls,
        estimation: DogStepEstimation,
        *,
        day: date | None = None,
        distance_meters: float = 0.0,
    ) -> DailyStepRecord:
        """Record an estimation for ``day`` (its own local date by default)."""
        return cls(
            date=day or start_of_local_day(estimation.timestamp).date(),
            human_steps=estimation.human_steps,
            estimated_dog_steps=estimation.estimated_dog_steps,
            breed_name=estimation.breed_name,
            breed_multiplier=estimation.breed_multiplier,
            distance_meters=distance_meters,
            confidence=estimation.confidence,
            activity_level=estimation.activity_level,
            goal_steps=estimation.recommended_goal,
        )

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0

    @property
    def distance_miles(self) -> float:
        return self.distance_meters / METERS_PER_MILE

    @property
    def goal_progress(self) -> float:
        if self.goal_steps <= 0:
            return 0.0
        return self.estimated_dog_steps / self.goal_steps

    @property
    def goal_progress_percentage(self) -> int:
        return int(self.goal_progress * 100)

    @property
    def step_ratio(self) -> float:
        return safe_divide(self.estimated_dog_steps, self.human_steps)

    @property
    def is_goal_met(self) -> bool:
        return self.estimated_dog_steps >= self.goal_steps

    @property
    def goal_status(self) -> GoalStatus:
        if self.is_goal_met:
            return GoalStatus.MET
        if self.goal_progress_percentage >= 80:
            return GoalStatus.ALMOST
        if self.goal_progress_percentage >= 50:
            return GoalStatus.PROGRESS
        return GoalStatus.NEEDS_ACTIVITY

    @property
    def summary(self) -> str:
        return (
            f"{self.estimated_dog_steps} steps • {self.distance_km:.1f}km • "
            f"{self.goal_progress_percentage}% of goal"
        )

    def as_dict(self) -> DailyStepRecordPayload:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "human_steps": self.human_steps,
            "estimated_dog_steps": self.estimated_dog_steps,
            "distance_meters": self.distance_meters,
            "breed_name": self.breed_name,
            "breed_multiplier": self.breed_multiplier,
            "confidence": self.confidence.value,
            "activity_level": self.activity_level.value,
            "goal_steps": self.goal_steps,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: DailyStepRecordPayload) -> DailyStepRecord:
        return cls(
            id=str(data["id"]),
            date=date.fromisoformat(data["date"]),
            human_steps=int(data["human_steps"]),
            estimated_dog_steps=int(data["estimated_dog_steps"]),
            distance_meters=float(data.get("distance_meters", 0.0)),
            breed_name=data["breed_name"],
            breed_multiplier=float(data["breed_multiplier"]),
            confidence=EstimationConfidence.parse(data.get("confidence"))
            or EstimationConfidence.MEDIUM,
            activity_level=ActivityLevel.parse(data.get("activity_level"))
            or ActivityLevel.MODERATE,
            goal_steps=int(data.get("goal_steps", DEFAULT_DAILY_GOAL)),
            created_at=ensure_utc_datetime(data.get("created_at")) or utcnow(),
        )


def build_weekly_records(
    sessions: Iterable[WalkSession],
    engine: StepEstimationEngine,
    breed: BreedRef,
    *,
    body_condition: BodyCondition = BodyCondition.IDEAL,
    today: date | None = None,
) -> list[DailyStepRecord]:
    """Aggregate the last seven days of walks into one record per day.

    Days without walks are omitted. Walk totals are measured, so every
    record is High confidence; activity is High when the goal was reached
    and Moderate otherwise.

    Args:
        sessions: Finished walks, in any order
        engine: Provides the goal and multiplier for ``breed``
        breed: The dog's breed
        body_condition: Used for the daily goal
        today: Last day of the window; the current local date by default

    Returns:
        Records sorted newest first
    """
    last_day = today or start_of_local_day(utcnow()).date()
    first_day = last_day - timedelta(days=WEEKLY_WINDOW_DAYS - 1)

    by_day: defaultdict[date, list[WalkSession]] = defaultdict(list)
    for session in sessions:
        day = start_of_local_day(session.start_time).date()
        if first_day <= day <= last_day:
            by_day[day].append(session)

    goal = engine.calculate_daily_goal(breed, body_condition)
    multiplier = engine.get_breed_multiplier(breed)
    _profile, breed_name = engine.resolve_breed(breed)

    records: list[DailyStepRecord] = []
    for day, day_sessions in by_day.items():
        dog_steps = sum(s.estimated_dog_steps for s in day_sessions)
        records.append(
            DailyStepRecord(
                date=day,
                human_steps=sum(s.human_steps for s in day_sessions),
                estimated_dog_steps=dog_steps,
                distance_meters=sum(s.distance_meters for s in day_sessions),
                breed_name=breed_name,
                breed_multiplier=multiplier,
                confidence=EstimationConfidence.HIGH,
                activity_level=ActivityLevel.HIGH
                if dog_steps >= goal
                else ActivityLevel.MODERATE,
                goal_steps=goal,
            )
        )

    records.sort(key=lambda record: record.date, reverse=True)
    _LOGGER.debug("Built %d daily records from walk sessions", len(records))
    return records


def weekly_average(records: Iterable[DailyStepRecord]) -> int:
    """Whole-number mean of dog steps over days that have a record."""
    steps = [record.estimated_dog_steps for record in records]
    if not steps:
        return 0
    return sum(steps) // len(steps)
