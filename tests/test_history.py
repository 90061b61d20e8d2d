"""Tests for daily step records and weekly aggregation."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from pawsteps.history import (
    DailyStepRecord,
    GoalStatus,
    build_weekly_records,
    weekly_average,
)
from pawsteps.types import ActivityLevel, BodyCondition, EstimationConfidence
from pawsteps.utils import start_of_local_day
from pawsteps.walk_session import WalkSession

NOON = datetime(2025, 6, 10, 12, 0, tzinfo=UTC)
TODAY = start_of_local_day(NOON).date()


def _record(dog_steps: int, goal: int = 1000, **kwargs) -> DailyStepRecord:
    return DailyStepRecord(
        date=kwargs.pop("day", date(2025, 6, 10)),
        human_steps=kwargs.pop("human_steps", dog_steps),
        estimated_dog_steps=dog_steps,
        breed_name="Beagle",
        breed_multiplier=1.8,
        goal_steps=goal,
        **kwargs,
    )


def _walk(days_ago: int, dog_steps: int) -> WalkSession:
    start = NOON - timedelta(days=days_ago)
    return WalkSession(
        start_time=start,
        end_time=start + timedelta(minutes=30),
        duration_seconds=1800.0,
        human_steps=round(dog_steps / 1.4),
        estimated_dog_steps=dog_steps,
        distance_meters=1000.0,
        breed_name="Labrador Retriever",
        breed_multiplier=1.4,
    )


class TestDailyStepRecord:
    """Test a single day's record."""

    @pytest.mark.parametrize(
        ("dog_steps", "status"),
        [
            (1200, GoalStatus.MET),
            (1000, GoalStatus.MET),
            (800, GoalStatus.ALMOST),
            (799, GoalStatus.PROGRESS),
            (500, GoalStatus.PROGRESS),
            (499, GoalStatus.NEEDS_ACTIVITY),
            (0, GoalStatus.NEEDS_ACTIVITY),
        ],
    )
    def test_goal_status(self, dog_steps, status):
        """Test goal status thresholds."""
        assert _record(dog_steps).goal_status is status

    def test_goal_status_descriptions(self):
        """Test the owner-facing status text."""
        assert GoalStatus.MET.description == "Goal achieved!"
        assert GoalStatus.NEEDS_ACTIVITY.description == "Needs more activity"

    def test_zero_goal(self):
        """Test progress without a goal is zero."""
        record = _record(500, goal=0)

        assert record.goal_progress == 0.0
        assert record.goal_progress_percentage == 0

    def test_derived_values(self):
        """Test ratios, units and summary."""
        record = _record(7000, goal=15600, human_steps=5000, distance_meters=3500.0)

        assert record.step_ratio == 1.4
        assert record.distance_km == 3.5
        assert record.distance_miles == pytest.approx(2.1748, abs=1e-4)
        assert record.summary == "7000 steps • 3.5km • 44% of goal"

    def test_from_estimation(self, engine, clock):
        """Test a record built from an estimation."""
        estimation = engine.estimate_dog_steps(5000, "Labrador Retriever")

        record = DailyStepRecord.from_estimation(estimation, distance_meters=3900.0)

        assert record.date == start_of_local_day(clock()).date()
        assert record.estimated_dog_steps == 7000
        assert record.goal_steps == 15600
        assert record.confidence is EstimationConfidence.HIGH
        assert record.activity_level is ActivityLevel.LOW
        assert record.distance_meters == 3900.0

    def test_stored_form(self):
        """Test a stored record restores with its identity."""
        record = _record(900, confidence=EstimationConfidence.HIGH)

        assert DailyStepRecord.from_dict(record.as_dict()) == record

    def test_stored_form_unknown_labels(self):
        """Test unknown labels degrade on restore."""
        payload = _record(900).as_dict()
        payload["confidence"] = "psychic"
        payload["activity_level"] = "zoomies"

        record = DailyStepRecord.from_dict(payload)

        assert record.confidence is EstimationConfidence.MEDIUM
        assert record.activity_level is ActivityLevel.MODERATE


class TestWeeklyRecords:
    """Test aggregation of walks into daily records."""

    def test_groups_by_day(self, engine):
        """Test walks are summed per local day, newest first."""
        sessions = [
            _walk(2, 3000),
            _walk(0, 8000),
            _walk(0, 9000),
            _walk(7, 5000),
            _walk(-1, 5000),
        ]

        records = build_weekly_records(
            sessions, engine, "Labrador Retriever", today=TODAY
        )

        assert [record.date for record in records] == [
            TODAY,
            TODAY - timedelta(days=2),
        ]
        today_record, older = records
        assert today_record.estimated_dog_steps == 17000
        assert today_record.distance_meters == 2000.0
        assert today_record.goal_steps == 15600
        assert today_record.activity_level is ActivityLevel.HIGH
        assert today_record.confidence is EstimationConfidence.HIGH
        assert older.estimated_dog_steps == 3000
        assert older.activity_level is ActivityLevel.MODERATE
        assert older.breed_multiplier == 1.4

    def test_oldest_day_in_window(self, engine):
        """Test the window covers today and the six days before."""
        records = build_weekly_records(
            [_walk(6, 1000)], engine, "Labrador Retriever", today=TODAY
        )

        assert len(records) == 1

    def test_body_condition_goal(self, engine):
        """Test the goal follows the body condition."""
        records = build_weekly_records(
            [_walk(0, 1000)],
            engine,
            "Labrador Retriever",
            body_condition=BodyCondition.CHUBBY,
            today=TODAY,
        )

        assert records[0].goal_steps == 18720

    def test_unknown_breed(self, engine):
        """Test an unknown breed uses the fallback goal and name."""
        records = build_weekly_records([_walk(0, 7000)], engine, None, today=TODAY)

        assert records[0].breed_name == "Unknown"
        assert records[0].goal_steps == 6000
        assert records[0].activity_level is ActivityLevel.HIGH

    def test_no_walks(self, engine):
        """Test no walks yields no records."""
        assert build_weekly_records([], engine, "Beagle", today=TODAY) == []


class TestWeeklyAverage:
    """Test the weekly average helper."""

    def test_integer_average(self):
        """Test the mean is truncated to whole steps."""
        records = [_record(7000), _record(3000), _record(2001)]

        assert weekly_average(records) == 4000

    def test_empty(self):
        """Test no records averages to zero."""
        assert weekly_average([]) == 0
