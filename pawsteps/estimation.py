"""Dog step estimation engine.

Converts human pedometer readings into estimated dog steps using the
breed's step multiplier, and derives a confidence rating, an activity
level, a recommended daily goal and trend insights.

The engine is pure with respect to its inputs: the only state it keeps
is a bounded window of its own recent estimations (oldest evicted first)
used for averages and trends. It never raises for bad breed input;
unknown breeds fall back to documented defaults.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Sequence
from datetime import timedelta

from .breeds import BreedCatalog
from .config import PawStepsConfig
from .const import (
    ACTIVITY_THRESHOLDS,
    BASE_GOAL_BY_SIZE,
    BODY_CONDITION_MULTIPLIERS,
    BORDERLINE_HIGH_STEPS_RANGE,
    BORDERLINE_LOW_STEPS_RANGE,
    BREED_SCORE_DESCRIBED,
    BREED_SCORE_UNDESCRIBED,
    CONFIDENCE_HIGH_THRESHOLD,
    CONFIDENCE_MEDIUM_THRESHOLD,
    DEFAULT_DAILY_GOAL,
    DEFAULT_ENERGY_MULTIPLIER,
    DEFAULT_STEP_MULTIPLIER,
    ENERGY_LEVEL_MULTIPLIERS,
    GOAL_ACHIEVEMENT_RATIO,
    GOAL_IMPROVEMENT_RATIO,
    PLAUSIBLE_STEP_LENGTH_RANGE,
    PLAUSIBLE_STEPS_RANGE,
    STEP_SCORE_BORDERLINE,
    STEP_SCORE_IMPLAUSIBLE,
    STEP_SCORE_PLAUSIBLE,
    TREND_CHANGE_PERCENT,
    TREND_WINDOW,
    UNKNOWN_BREED_NAME,
    WEEKLY_WINDOW_DAYS,
)
from .insights import (
    EstimationInsight,
    GoalAchievement,
    ImprovementNeeded,
    LowActivity,
    TrendNegative,
    TrendPositive,
    TrendStable,
)
from .types import (
    ActivityLevel,
    ActivityTrend,
    BodyCondition,
    BreedProfile,
    DogStepEstimation,
    EstimationConfidence,
    HumanActivitySample,
)
from .utils import Clock, round_half_up, utcnow

_LOGGER = logging.getLogger(__name__)

type BreedRef = BreedProfile | str | None


class StepEstimationEngine:
    """Estimate dog steps, goals and activity insights from human steps."""

    def __init__(
        self,
        catalog: BreedCatalog,
        *,
        config: PawStepsConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: Breed catalog used to resolve breed names
            config: Library settings; defaults when omitted
            clock: Returns the current aware datetime
        """
        self._catalog = catalog
        self._config = config or PawStepsConfig()
        self._clock = clock
        self._recent: deque[DogStepEstimation] = deque(
            maxlen=self._config.max_recent_estimations
        )

    # ------------------------------------------------------------------
    # Breed resolution
    # ------------------------------------------------------------------

    def resolve_breed(self, breed: BreedRef) -> tuple[BreedProfile | None, str]:
        """Return the catalog profile (or None) and the name to report."""
        if isinstance(breed, BreedProfile):
            return breed, breed.name
        if not breed:
            return None, UNKNOWN_BREED_NAME
        return self._catalog.lookup(breed), breed

    def get_breed_multiplier(self, breed: BreedRef) -> float:
        profile, name = self.resolve_breed(breed)
        if profile is None:
            _LOGGER.debug("Breed '%s' not found, using default multiplier", name)
            return DEFAULT_STEP_MULTIPLIER
        return profile.step_multiplier

    def calculate_dog_steps(self, human_steps: int, breed: BreedRef) -> int:
        """Return ``round(human_steps * multiplier)`` without recording it."""
        return round_half_up(_non_negative(human_steps) * self.get_breed_multiplier(breed))

    # ------------------------------------------------------------------
    # Estimation
    # ------------------------------------------------------------------

    def estimate_dog_steps(
        self,
        activity: int | HumanActivitySample,
        breed: BreedRef,
        *,
        body_condition: BodyCondition = BodyCondition.IDEAL,
    ) -> DogStepEstimation:
        """Estimate dog steps for a step count or a pedometer sample.

        Samples carrying a distance are cross-validated against a typical
        human stride; see :meth:`estimate_from_sample`.

        Args:
            activity: Human step count, or a sample with distance
            breed: Breed profile, breed name, or None when unknown
            body_condition: Used for the recommended goal only

        Returns:
            New estimation, also appended to the recent window
        """
        if isinstance(activity, HumanActivitySample):
            return self.estimate_from_sample(
                activity, breed, body_condition=body_condition
            )

        estimation = self._build_estimation(activity, breed, body_condition)
        self._record(estimation)
        return estimation

    def estimate_from_sample(
        self,
        sample: HumanActivitySample,
        breed: BreedRef,
        *,
        body_condition: BodyCondition = BodyCondition.IDEAL,
    ) -> DogStepEstimation:
        """Estimate from a sample, downgrading High confidence on odd strides.

        The average stride is ``distance / steps`` (the configured default
        length when either is zero). A stride outside 0.5-1.0 m turns High
        confidence into Medium; Medium and Low are left as they are.
        """
        estimation = self._build_estimation(sample.human_steps, breed, body_condition)

        if sample.human_steps > 0 and sample.distance_meters > 0:
            step_length = sample.distance_meters / sample.human_steps
        else:
            step_length = self._config.default_step_length_m

        low, high = PLAUSIBLE_STEP_LENGTH_RANGE
        if not low <= step_length <= high and (
            estimation.confidence is EstimationConfidence.HIGH
        ):
            _LOGGER.debug(
                "Average step length %.2fm outside %.1f-%.1fm, lowering confidence",
                step_length,
                low,
                high,
            )
            estimation = DogStepEstimation(
                human_steps=estimation.human_steps,
                estimated_dog_steps=estimation.estimated_dog_steps,
                breed_multiplier=estimation.breed_multiplier,
                breed_name=estimation.breed_name,
                confidence=EstimationConfidence.MEDIUM,
                activity_level=estimation.activity_level,
                recommended_goal=estimation.recommended_goal,
                timestamp=estimation.timestamp,
            )

        self._record(estimation)
        return estimation

    def _build_estimation(
        self,
        human_steps: int,
        breed: BreedRef,
        body_condition: BodyCondition,
    ) -> DogStepEstimation:
        steps = _non_negative(human_steps)
        profile, name = self.resolve_breed(breed)
        now = self._clock()

        if profile is None:
            _LOGGER.warning("Breed '%s' not found, using default estimation", name)
            return DogStepEstimation(
                human_steps=steps,
                estimated_dog_steps=round_half_up(steps * DEFAULT_STEP_MULTIPLIER),
                breed_multiplier=DEFAULT_STEP_MULTIPLIER,
                breed_name=name,
                confidence=EstimationConfidence.LOW,
                activity_level=ActivityLevel.MODERATE,
                recommended_goal=DEFAULT_DAILY_GOAL,
                timestamp=now,
            )

        dog_steps = round_half_up(steps * profile.step_multiplier)
        estimation = DogStepEstimation(
            human_steps=steps,
            estimated_dog_steps=dog_steps,
            breed_multiplier=profile.step_multiplier,
            breed_name=profile.name,
            confidence=self.calculate_confidence(steps, profile),
            activity_level=self.analyze_activity_level(dog_steps, profile),
            recommended_goal=self.calculate_daily_goal(profile, body_condition),
            timestamp=now,
        )
        _LOGGER.debug("%s", estimation.summary)
        return estimation

    @staticmethod
    def calculate_confidence(
        human_steps: int, breed: BreedProfile
    ) -> EstimationConfidence:
        """Average step-count plausibility and breed completeness, then bucket."""
        if PLAUSIBLE_STEPS_RANGE[0] <= human_steps <= PLAUSIBLE_STEPS_RANGE[1]:
            step_score = STEP_SCORE_PLAUSIBLE
        elif (
            BORDERLINE_LOW_STEPS_RANGE[0] <= human_steps < BORDERLINE_LOW_STEPS_RANGE[1]
            or BORDERLINE_HIGH_STEPS_RANGE[0]
            < human_steps
            <= BORDERLINE_HIGH_STEPS_RANGE[1]
        ):
            step_score = STEP_SCORE_BORDERLINE
        else:
            step_score = STEP_SCORE_IMPLAUSIBLE

        breed_score = (
            BREED_SCORE_DESCRIBED if breed.has_description else BREED_SCORE_UNDESCRIBED
        )

        total = (step_score + breed_score) / 2.0
        if total >= CONFIDENCE_HIGH_THRESHOLD:
            return EstimationConfidence.HIGH
        if total >= CONFIDENCE_MEDIUM_THRESHOLD:
            return EstimationConfidence.MEDIUM
        return EstimationConfidence.LOW

    # ------------------------------------------------------------------
    # Goals and classification
    # ------------------------------------------------------------------

    def calculate_daily_goal(
        self,
        breed: BreedRef,
        body_condition: BodyCondition = BodyCondition.IDEAL,
    ) -> int:
        """Return the recommended daily dog-step goal.

        ``base(size) x body condition factor x energy factor``, rounded.
        Unknown breeds get the flat default goal.
        """
        profile, name = self.resolve_breed(breed)
        if profile is None:
            _LOGGER.debug("Using default goal for unknown breed '%s'", name)
            return DEFAULT_DAILY_GOAL

        base_goal = BASE_GOAL_BY_SIZE.get(profile.size_class.value, DEFAULT_DAILY_GOAL)
        condition_multiplier = BODY_CONDITION_MULTIPLIERS.get(
            BodyCondition.parse(body_condition) or BodyCondition.IDEAL, 1.0
        )
        energy_multiplier = ENERGY_LEVEL_MULTIPLIERS.get(
            profile.energy_level.value, DEFAULT_ENERGY_MULTIPLIER
        )

        goal = round_half_up(base_goal * condition_multiplier * energy_multiplier)
        _LOGGER.debug(
            "Daily goal for %s: %d (base: %d, body condition: %.1f, energy: %.1f)",
            profile.name,
            goal,
            base_goal,
            condition_multiplier,
            energy_multiplier,
        )
        return goal

    def analyze_activity_level(self, steps: int, breed: BreedRef) -> ActivityLevel:
        """Classify ``steps`` against the ideal-body-condition goal."""
        goal = self.calculate_daily_goal(breed, BodyCondition.IDEAL)
        ratio = _non_negative(steps) / goal

        for upper_bound, level in ACTIVITY_THRESHOLDS:
            if ratio < upper_bound:
                return ActivityLevel(level)
        return ActivityLevel.VERY_HIGH

    # ------------------------------------------------------------------
    # Rolling window, trends and insights
    # ------------------------------------------------------------------

    @property
    def recent_estimations(self) -> tuple[DogStepEstimation, ...]:
        return tuple(self._recent)

    @property
    def daily_average(self) -> float:
        """Mean dog steps over the retained estimations."""
        if not self._recent:
            return 0.0
        return sum(e.estimated_dog_steps for e in self._recent) / len(self._recent)

    def restore_recent(self, estimations: Iterable[DogStepEstimation]) -> None:
        """Replace the window with stored estimations (newest kept)."""
        self._recent.clear()
        self._recent.extend(estimations)
        _LOGGER.debug("Restored %d historical estimations", len(self._recent))

    def clear_recent(self) -> None:
        self._recent.clear()

    def _record(self, estimation: DogStepEstimation) -> None:
        self._recent.append(estimation)

    def get_weekly_average(self) -> float:
        """Mean dog steps of retained estimations from the last 7 days."""
        cutoff = self._clock() - timedelta(days=WEEKLY_WINDOW_DAYS)
        weekly = [e.estimated_dog_steps for e in self._recent if e.timestamp >= cutoff]
        if not weekly:
            return 0.0
        return sum(weekly) / len(weekly)

    def get_activity_trend(
        self, recent: Sequence[DogStepEstimation] | None = None
    ) -> ActivityTrend:
        """Compare the oldest and newest of the last three estimations.

        A change of at least +10 % is Increasing, at most -10 % Decreasing.
        Fewer than three estimations is Stable. From a zero baseline any
        growth counts as Increasing.
        """
        window = list(self._recent if recent is None else recent)
        if len(window) < TREND_WINDOW:
            return ActivityTrend.STABLE

        last_three = window[-TREND_WINDOW:]
        first_steps = last_three[0].estimated_dog_steps
        last_steps = last_three[-1].estimated_dog_steps

        if first_steps == 0:
            return ActivityTrend.INCREASING if last_steps > 0 else ActivityTrend.STABLE

        percent_change = (last_steps - first_steps) / first_steps * 100
        if percent_change >= TREND_CHANGE_PERCENT:
            return ActivityTrend.INCREASING
        if percent_change <= -TREND_CHANGE_PERCENT:
            return ActivityTrend.DECREASING
        return ActivityTrend.STABLE

    def get_estimation_insights(self, breed: BreedRef) -> list[EstimationInsight]:
        """Return exactly two insights: a goal tier, then a trend."""
        weekly_average = self.get_weekly_average()
        goal = self.calculate_daily_goal(breed, BodyCondition.IDEAL)

        insights: list[EstimationInsight] = []
        if weekly_average >= goal * GOAL_ACHIEVEMENT_RATIO:
            insights.append(
                GoalAchievement("Great job! Your dog is meeting their activity goals")
            )
        elif weekly_average >= goal * GOAL_IMPROVEMENT_RATIO:
            insights.append(ImprovementNeeded("Your dog could use a bit more activity"))
        else:
            insights.append(
                LowActivity("Consider increasing daily walks for better health")
            )

        match self.get_activity_trend():
            case ActivityTrend.INCREASING:
                insights.append(
                    TrendPositive("Activity levels are improving! Keep it up!")
                )
            case ActivityTrend.DECREASING:
                insights.append(TrendNegative("Activity has decreased recently"))
            case ActivityTrend.STABLE:
                insights.append(TrendStable("Activity levels are consistent"))

        return insights


def _non_negative(steps: int) -> int:
    if steps < 0:
        _LOGGER.warning("Negative step count %d treated as 0", steps)
        return 0
    return int(steps)
