"""Estimation insight types.

An insight is one of six tagged variants, each carrying a message. Use
``match`` over the concrete classes; :func:`insight_label` and
:func:`is_trend_insight` show the exhaustive form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never


@dataclass(frozen=True, slots=True)
class GoalAchievement:
    message: str


@dataclass(frozen=True, slots=True)
class ImprovementNeeded:
    message: str


@dataclass(frozen=True, slots=True)
class LowActivity:
    message: str


@dataclass(frozen=True, slots=True)
class TrendPositive:
    message: str


@dataclass(frozen=True, slots=True)
class TrendNegative:
    message: str


@dataclass(frozen=True, slots=True)
class TrendStable:
    message: str


type EstimationInsight = (
    GoalAchievement
    | ImprovementNeeded
    | LowActivity
    | TrendPositive
    | TrendNegative
    | TrendStable
)


def insight_label(insight: EstimationInsight) -> str:
    """Return the human-readable category of ``insight``."""
    match insight:
        case GoalAchievement():
            return "Goal Achievement"
        case ImprovementNeeded():
            return "Improvement Needed"
        case LowActivity():
            return "Low Activity"
        case TrendPositive():
            return "Positive Trend"
        case TrendNegative():
            return "Negative Trend"
        case TrendStable():
            return "Stable Trend"
        case _:
            assert_never(insight)


def is_trend_insight(insight: EstimationInsight) -> bool:
    match insight:
        case TrendPositive() | TrendNegative() | TrendStable():
            return True
        case GoalAchievement() | ImprovementNeeded() | LowActivity():
            return False
        case _:
            assert_never(insight)


__all__ = [
    "EstimationInsight",
    "GoalAchievement",
    "ImprovementNeeded",
    "LowActivity",
    "TrendNegative",
    "TrendPositive",
    "TrendStable",
    "insight_label",
    "is_trend_insight",
]
