"""Tests for reminder and insight notifications."""

from __future__ import annotations

import logging
from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest

from pawsteps.history import DailyStepRecord
from pawsteps.insights import LowActivity, TrendPositive
from pawsteps.notifications import (
    InsightNotifier,
    NotificationProvider,
    NotificationRequest,
    NotificationType,
    evaluate_smart_reminder,
    goal_achievement_notification,
    weekly_report_notification,
)


def _local(hour: int) -> datetime:
    """Aware datetime at ``hour`` o'clock local time."""
    return datetime(2025, 6, 10, hour, 0).astimezone()


def _record(dog_steps: int, goal: int = 1000) -> DailyStepRecord:
    return DailyStepRecord(
        date=date(2025, 6, 10),
        human_steps=dog_steps,
        estimated_dog_steps=dog_steps,
        breed_name="Beagle",
        breed_multiplier=1.8,
        goal_steps=goal,
    )


class RecordingProvider:
    """Collects delivered notifications."""

    def __init__(self) -> None:
        self.sent: list[NotificationRequest] = []

    async def async_send(self, request: NotificationRequest) -> None:
        self.sent.append(request)


class TestSmartReminder:
    """Test choosing a reminder from progress and time of day."""

    def test_low_progress_afternoon(self):
        """Test little progress after 14:00 asks for exercise."""
        request = evaluate_smart_reminder("Rex", _record(200), _local(15))

        assert request.type is NotificationType.SMART_REMINDER
        assert request.title == "Rex needs more exercise!"
        assert request.message == "Only 20% of daily goal achieved. Time for a walk!"

    @pytest.mark.parametrize(
        ("dog_steps", "hour"),
        [(200, 13), (500, 15), (700, 19), (1000, 23)],
    )
    def test_no_reminder(self, dog_steps, hour):
        """Test no reminder when the hour or progress does not call for one."""
        assert evaluate_smart_reminder("Rex", _record(dog_steps), _local(hour)) is None

    def test_evening_walk(self):
        """Test under 60 % after 18:00 suggests an evening walk."""
        request = evaluate_smart_reminder("Rex", _record(500), _local(18))

        assert request.title == "Evening walk with Rex?"

    def test_no_record_from_noon(self):
        """Test an empty day prompts from noon on."""
        assert evaluate_smart_reminder("Rex", None, _local(11)) is None

        request = evaluate_smart_reminder("Rex", None, _local(12))

        assert request.title == "Rex is ready for adventure!"
        assert request.message == "No walks recorded today. Let's get moving!"


class TestBuilders:
    """Test the goal and weekly notifications."""

    def test_goal_achievement(self):
        """Test a congratulation only when the goal is met."""
        assert goal_achievement_notification("Rex", _record(999)) is None

        request = goal_achievement_notification("Rex", _record(1200))

        assert request.type is NotificationType.GOAL_ACHIEVEMENT
        assert request.message == "1200 steps completed! Great job!"

    def test_weekly_report(self):
        """Test totals and the whole-number average."""
        request = weekly_report_notification("Rex", [_record(1000), _record(2001)])

        assert request.title == "Rex's Weekly Report"
        assert request.message == "This week: 3001 total steps, 1500 daily average!"

    def test_weekly_report_without_records(self):
        """Test an empty week reports zeros."""
        request = weekly_report_notification("Rex", [])

        assert request.message == "This week: 0 total steps, 0 daily average!"

    def test_default_titles(self):
        """Test every type has a display title."""
        assert NotificationType.GOAL_ACHIEVEMENT.default_title == "Goal Achieved!"
        assert all(kind.default_title for kind in NotificationType)


class TestInsightNotifier:
    """Test delivery through the host provider."""

    async def test_smart_reminder_delivered(self):
        """Test a due reminder reaches the provider."""
        provider = RecordingProvider()
        notifier = InsightNotifier(provider, "Rex", clock=lambda: _local(15))

        assert await notifier.async_check_smart_reminders(_record(100)) is True
        assert provider.sent[0].title == "Rex needs more exercise!"
        assert isinstance(provider, NotificationProvider)

    async def test_nothing_due(self):
        """Test nothing is sent when no reminder is due."""
        provider = RecordingProvider()
        notifier = InsightNotifier(provider, "Rex", clock=lambda: _local(9))

        assert await notifier.async_check_smart_reminders(None) is False
        assert await notifier.async_notify_goal_achieved(_record(10)) is False
        assert provider.sent == []

    async def test_weekly_report_and_goal(self):
        """Test report and goal notifications are sent."""
        provider = RecordingProvider()
        notifier = InsightNotifier(provider, "Rex", clock=lambda: _local(20))

        assert await notifier.async_notify_goal_achieved(_record(1500)) is True
        assert await notifier.async_send_weekly_report([_record(1500)]) is True
        assert [r.type for r in provider.sent] == [
            NotificationType.GOAL_ACHIEVEMENT,
            NotificationType.WEEKLY_REPORT,
        ]
        assert provider.sent[0].created_at == _local(20)

    async def test_insights(self):
        """Test one notification per insight."""
        provider = RecordingProvider()
        notifier = InsightNotifier(provider, "Rex", clock=lambda: _local(10))

        delivered = await notifier.async_send_insights(
            [
                LowActivity("Consider increasing daily walks for better health"),
                TrendPositive("Activity levels are improving! Keep it up!"),
            ]
        )

        assert delivered == 2
        assert provider.sent[0].title == "Rex: Low Activity"
        assert provider.sent[1].message == "Activity levels are improving! Keep it up!"

    async def test_delivery_failure(self, caplog):
        """Test provider failures are logged and reported as not sent."""
        provider = AsyncMock()
        provider.async_send.side_effect = ConnectionError("notification service down")
        notifier = InsightNotifier(provider, "Rex", clock=lambda: _local(20))

        with caplog.at_level(logging.WARNING):
            assert await notifier.async_send_weekly_report([]) is False
            assert await notifier.async_send_insights([LowActivity("walk more")]) == 0

        assert provider.async_send.await_count == 2
        assert "notification service down" in caplog.text
