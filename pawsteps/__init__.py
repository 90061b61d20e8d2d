"""PawSteps: estimate a dog's steps from the owner's pedometer.

The estimation engine converts human step counts into breed-adjusted dog
steps with goals and insights; the session manager drives the device
pedometer through daily and walk-session tracking.
"""

from __future__ import annotations

from .breeds import DEFAULT_BREEDS, BreedCatalog, StaticBreedCatalog
from .config import CONFIG_SCHEMA, PawStepsConfig, load_config
from .estimation import StepEstimationEngine
from .exceptions import (
    BreedProfileError,
    ConfigurationError,
    MotionError,
    MotionErrorKind,
    PawStepsError,
    StorageError,
)
from .history import DailyStepRecord, GoalStatus, build_weekly_records, weekly_average
from .insights import (
    EstimationInsight,
    GoalAchievement,
    ImprovementNeeded,
    LowActivity,
    TrendNegative,
    TrendPositive,
    TrendStable,
)
from .motion import ExtendedExecutionHost, MotionProvider, PedometerReading
from .notifications import (
    InsightNotifier,
    NotificationProvider,
    NotificationRequest,
    NotificationType,
)
from .results import MotionResult
from .session import MotionSessionManager, SessionEvent, SessionEventKind
from .storage import (
    EstimationHistoryStore,
    JsonFilePersistence,
    MemoryPersistence,
    PersistenceProvider,
    WalkHistoryStore,
)
from .types import (
    ActivityLevel,
    ActivityTrend,
    AuthorizationStatus,
    BodyCondition,
    BreedProfile,
    DailyTotals,
    DataSource,
    DogStepEstimation,
    EnergyLevel,
    EstimationConfidence,
    HumanActivitySample,
    SizeClass,
    TrackingMode,
    WalkSessionData,
)
from .walk_session import WalkSession

__version__ = "1.0.0"

__all__ = [
    "CONFIG_SCHEMA",
    "DEFAULT_BREEDS",
    "ActivityLevel",
    "ActivityTrend",
    "AuthorizationStatus",
    "BodyCondition",
    "BreedCatalog",
    "BreedProfile",
    "BreedProfileError",
    "ConfigurationError",
    "DailyStepRecord",
    "DailyTotals",
    "DataSource",
    "DogStepEstimation",
    "EnergyLevel",
    "EstimationConfidence",
    "EstimationHistoryStore",
    "EstimationInsight",
    "ExtendedExecutionHost",
    "GoalAchievement",
    "GoalStatus",
    "HumanActivitySample",
    "ImprovementNeeded",
    "InsightNotifier",
    "JsonFilePersistence",
    "LowActivity",
    "MemoryPersistence",
    "MotionError",
    "MotionErrorKind",
    "MotionProvider",
    "MotionResult",
    "MotionSessionManager",
    "NotificationProvider",
    "NotificationRequest",
    "NotificationType",
    "PawStepsConfig",
    "PawStepsError",
    "PedometerReading",
    "PersistenceProvider",
    "SessionEvent",
    "SessionEventKind",
    "SizeClass",
    "StaticBreedCatalog",
    "StepEstimationEngine",
    "StorageError",
    "TrackingMode",
    "TrendNegative",
    "TrendPositive",
    "TrendStable",
    "WalkHistoryStore",
    "WalkSession",
    "WalkSessionData",
    "build_weekly_records",
    "load_config",
    "weekly_average",
]
