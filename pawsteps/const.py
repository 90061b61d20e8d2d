"""Constants for the PawSteps step estimation library.

Grouped by concern: estimation defaults, goal tables, classification
thresholds, session timing and storage keys.

Python: 3.12+
"""

from __future__ import annotations

from typing import Final

# Storage versions for data persistence
STORAGE_VERSION: Final[int] = 1

# Storage keys handed to the persistence provider
STORAGE_KEY_RECENT_ESTIMATIONS: Final[str] = "recent_step_estimations"
STORAGE_KEY_WALK_SESSIONS: Final[str] = "walk_sessions"

# Estimation fallbacks used when a breed is not in the catalog
DEFAULT_STEP_MULTIPLIER: Final[float] = 1.5
DEFAULT_DAILY_GOAL: Final[int] = 6000
UNKNOWN_BREED_NAME: Final[str] = "Unknown"

# Base daily goals (dog steps) keyed by size class value
BASE_GOAL_BY_SIZE: Final[dict[str, int]] = {
    "toy": 3000,
    "small": 5000,
    "medium": 8000,
    "large": 12000,
    "extra_large": 10000,
}

BODY_CONDITION_MULTIPLIERS: Final[dict[str, float]] = {
    "skinny": 0.8,
    "ideal": 1.0,
    "chubby": 1.2,
}

ENERGY_LEVEL_MULTIPLIERS: Final[dict[str, float]] = {
    "low": 0.7,
    "moderate": 1.0,
    "high": 1.3,
    "very_high": 1.5,
}
DEFAULT_ENERGY_MULTIPLIER: Final[float] = 1.0

# Confidence scoring
PLAUSIBLE_STEPS_RANGE: Final[tuple[int, int]] = (1000, 20000)
BORDERLINE_LOW_STEPS_RANGE: Final[tuple[int, int]] = (500, 1000)
BORDERLINE_HIGH_STEPS_RANGE: Final[tuple[int, int]] = (20000, 30000)
STEP_SCORE_PLAUSIBLE: Final[float] = 1.0
STEP_SCORE_BORDERLINE: Final[float] = 0.7
STEP_SCORE_IMPLAUSIBLE: Final[float] = 0.3
BREED_SCORE_DESCRIBED: Final[float] = 1.0
BREED_SCORE_UNDESCRIBED: Final[float] = 0.7
CONFIDENCE_HIGH_THRESHOLD: Final[float] = 0.8
CONFIDENCE_MEDIUM_THRESHOLD: Final[float] = 0.5

# Human stride cross-validation (meters)
DEFAULT_STEP_LENGTH_M: Final[float] = 0.65
PLAUSIBLE_STEP_LENGTH_RANGE: Final[tuple[float, float]] = (0.5, 1.0)

# Activity level thresholds as fractions of the daily goal, ascending
ACTIVITY_THRESHOLDS: Final[tuple[tuple[float, str], ...]] = (
    (0.3, "very_low"),
    (0.6, "low"),
    (1.2, "moderate"),
    (1.8, "high"),
)

# Trend and insight rules
TREND_WINDOW: Final[int] = 3
TREND_CHANGE_PERCENT: Final[float] = 10.0
GOAL_ACHIEVEMENT_RATIO: Final[float] = 0.8
GOAL_IMPROVEMENT_RATIO: Final[float] = 0.5
WEEKLY_WINDOW_DAYS: Final[int] = 7

# Rolling window and history bounds
MAX_RECENT_ESTIMATIONS: Final[int] = 10
WALK_HISTORY_LIMIT: Final[int] = 100

# Async collaborator timeouts (seconds)
PERMISSION_TIMEOUT: Final[float] = 10.0
QUERY_TIMEOUT: Final[float] = 10.0

# Name used when asking the host for extended background execution
EXTENDED_EXECUTION_NAME: Final[str] = "StepTracking"

METERS_PER_MILE: Final[float] = 1609.34
PACE_SENTINEL: Final[str] = "--'--\""

# Configuration keys
CONF_PERMISSION_TIMEOUT: Final[str] = "permission_timeout"
CONF_QUERY_TIMEOUT: Final[str] = "query_timeout"
CONF_MAX_RECENT_ESTIMATIONS: Final[str] = "max_recent_estimations"
CONF_AUTO_RESUME_DAILY: Final[str] = "auto_resume_daily"
CONF_WALK_HISTORY_LIMIT: Final[str] = "walk_history_limit"
CONF_DEFAULT_STEP_LENGTH: Final[str] = "default_step_length_m"
