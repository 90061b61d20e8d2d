"""Reminder and insight notifications.

The library decides *what* to tell the owner; delivery belongs to the
host's :class:`NotificationProvider`. Nothing here schedules anything.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Protocol, runtime_checkable

from .history import DailyStepRecord
from .insights import EstimationInsight, insight_label
from .utils import Clock, utcnow

_LOGGER = logging.getLogger(__name__)

SMART_REMINDER_LOW_HOUR = 14
SMART_REMINDER_LOW_PERCENT = 30
SMART_REMINDER_EVENING_HOUR = 18
SMART_REMINDER_EVENING_PERCENT = 60
SMART_REMINDER_NO_DATA_HOUR = 12


class NotificationType(StrEnum):
    """Kinds of notification the library produces."""

    MORNING_WALK = "morning_walk"
    AFTERNOON_WALK = "afternoon_walk"
    EVENING_WALK = "evening_walk"
    SMART_REMINDER = "smart_reminder"
    GOAL_ACHIEVEMENT = "goal_achievement"
    WEEKLY_REPORT = "weekly_report"

    @property
    def default_title(self) -> str:
        return {
            NotificationType.MORNING_WALK: "Good Morning!",
            NotificationType.AFTERNOON_WALK: "Afternoon Walk Time!",
            NotificationType.EVENING_WALK: "Evening Stroll!",
            NotificationType.SMART_REMINDER: "Walk Reminder",
            NotificationType.GOAL_ACHIEVEMENT: "Goal Achieved!",
            NotificationType.WEEKLY_REPORT: "Weekly Report",
        }[self]


@dataclass(frozen=True, slots=True)
class NotificationRequest:
    """A message for the host to show to the owner."""

    type: NotificationType
    title: str
    message: str
    created_at: datetime = field(default_factory=utcnow)
    identifier: str = field(default_factory=lambda: str(uuid.uuid4()))


@runtime_checkable
class NotificationProvider(Protocol):
    """Host notification delivery."""

    async def async_send(self, request: NotificationRequest) -> None:
        """Deliver ``request``; the library does not wait for the user."""


def evaluate_smart_reminder(
    dog_name: str,
    today: DailyStepRecord | None,
    now: datetime,
) -> NotificationRequest | None:
    """Pick the reminder, if any, that fits today's progress and the hour.

    With a record for today: from 14:00 under 30 % of goal asks for
    exercise, from 18:00 under 60 % suggests an evening walk. Without a
    record, from noon on the owner is told no walks were recorded.
    """
    hour = now.astimezone().hour

    if today is not None:
        progress = today.goal_progress_percentage
        if hour >= SMART_REMINDER_LOW_HOUR and progress < SMART_REMINDER_LOW_PERCENT:
            return NotificationRequest(
                NotificationType.SMART_REMINDER,
                f"{dog_name} needs more exercise!",
                f"Only {progress}% of daily goal achieved. Time for a walk!",
                created_at=now,
            )
        if (
            hour >= SMART_REMINDER_EVENING_HOUR
            and progress < SMART_REMINDER_EVENING_PERCENT
        ):
            return NotificationRequest(
                NotificationType.SMART_REMINDER,
                f"Evening walk with {dog_name}?",
                "Let's reach that daily goal together!",
                created_at=now,
            )
        return None

    if hour >= SMART_REMINDER_NO_DATA_HOUR:
        return NotificationRequest(
            NotificationType.SMART_REMINDER,
            f"{dog_name} is ready for adventure!",
            "No walks recorded today. Let's get moving!",
            created_at=now,
        )
    return None


def goal_achievement_notification(
    dog_name: str, record: DailyStepRecord, now: datetime | None = None
) -> NotificationRequest | None:
    """Return a congratulation when ``record`` met its goal."""
    if not record.is_goal_met:
        return None
    return NotificationRequest(
        NotificationType.GOAL_ACHIEVEMENT,
        f"{dog_name} reached the daily goal!",
        f"{record.estimated_dog_steps} steps completed! Great job!",
        created_at=now or utcnow(),
    )


def weekly_report_notification(
    dog_name: str, records: Sequence[DailyStepRecord], now: datetime | None = None
) -> NotificationRequest:
    total = sum(record.estimated_dog_steps for record in records)
    average = total // max(len(records), 1)
    return NotificationRequest(
        NotificationType.WEEKLY_REPORT,
        f"{dog_name}'s Weekly Report",
        f"This week: {total} total steps, {average} daily average!",
        created_at=now or utcnow(),
    )


class InsightNotifier:
    """Builds notifications for one dog and hands them to the provider.

    Delivery failures are logged and reported as ``False``; they never
    propagate to the caller.
    """

    def __init__(
        self,
        provider: NotificationProvider,
        dog_name: str,
        *,
        clock: Clock = utcnow,
    ) -> None:
        self._provider = provider
        self.dog_name = dog_name
        self._clock = clock

    async def async_check_smart_reminders(self, today: DailyStepRecord | None) -> bool:
        request = evaluate_smart_reminder(self.dog_name, today, self._clock())
        if request is None:
            _LOGGER.debug("No smart reminder needed for %s", self.dog_name)
            return False
        return await self._async_deliver(request)

    async def async_notify_goal_achieved(self, record: DailyStepRecord) -> bool:
        request = goal_achievement_notification(self.dog_name, record, self._clock())
        if request is None:
            return False
        return await self._async_deliver(request)

    async def async_send_weekly_report(self, records: Sequence[DailyStepRecord]) -> bool:
        return await self._async_deliver(
            weekly_report_notification(self.dog_name, records, self._clock())
        )

    async def async_send_insights(self, insights: Iterable[EstimationInsight]) -> int:
        """Send one smart reminder per insight; return how many were delivered."""
        delivered = 0
        for insight in insights:
            request = NotificationRequest(
                NotificationType.SMART_REMINDER,
                f"{self.dog_name}: {insight_label(insight)}",
                insight.message,
                created_at=self._clock(),
            )
            if await self._async_deliver(request):
                delivered += 1
        return delivered

    async def _async_deliver(self, request: NotificationRequest) -> bool:
        try:
            await self._provider.async_send(request)
        except Exception as err:
            _LOGGER.warning(
                "Failed to deliver %s notification: %s", request.type.value, err
            )
            return False
        _LOGGER.debug("Sent %s notification: %s", request.type.value, request.title)
        return True
