"""Motion session state machine.

:class:`MotionSessionManager` owns the single pedometer feed and switches
it between three mutually exclusive modes:

* ``inactive``: no feed
* ``daily``: running totals since local midnight
* ``session``: totals of one explicitly started walk

Transitions are serialised by an :class:`asyncio.Lock`. Feed callbacks may
arrive on any thread; they are marshalled onto the owning loop and applied
only when the subscription that produced them is still the current one.
Every state change is published to listeners as a :class:`SessionEvent`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum

from .config import PawStepsConfig
from .const import EXTENDED_EXECUTION_NAME
from .estimation import StepEstimationEngine
from .exceptions import MotionError
from .motion import (
    ExtendedExecutionHost,
    MotionProvider,
    PedometerReading,
    await_single_callback,
)
from .results import MotionResult
from .types import (
    ActiveSessionTotals,
    AuthorizationStatus,
    DailyTotals,
    HumanActivitySample,
    TrackingMode,
    WalkSessionData,
)
from .utils import Clock, is_same_local_day, local_day_bounds, start_of_local_day, utcnow
from .walk_session import WalkSession

_LOGGER = logging.getLogger(__name__)


class SessionEventKind(StrEnum):
    """State deltas published by the session manager."""

    DAILY_STARTED = "daily_started"
    DAILY_STOPPED = "daily_stopped"
    SESSION_STARTED = "session_started"
    SESSION_STOPPED = "session_stopped"
    DAILY_RESUMED = "daily_resumed"
    TOTALS_UPDATED = "totals_updated"


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """One published state change.

    ``walk_session`` is set for ``session_stopped``; ``daily_totals`` and
    ``session_data`` carry the totals of the mode the event belongs to.
    """

    kind: SessionEventKind
    mode: TrackingMode
    timestamp: datetime
    daily_totals: DailyTotals | None = None
    session_data: WalkSessionData | None = None
    walk_session: WalkSession | None = None


type SessionListener = Callable[[SessionEvent], None]


@dataclass(frozen=True, slots=True)
class _Subscription:
    """Stamp identifying the live feed subscription."""

    generation: int
    mode: TrackingMode
    start: datetime


class MotionSessionManager:
    """Daily and walk-session step tracking over a motion provider."""

    def __init__(
        self,
        provider: MotionProvider,
        engine: StepEstimationEngine,
        *,
        config: PawStepsConfig | None = None,
        clock: Clock = utcnow,
        execution_host: ExtendedExecutionHost | None = None,
        breed_name: str | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            provider: Platform pedometer
            engine: Estimation engine used to convert finished walks
            config: Library settings; defaults when omitted
            clock: Returns the current aware datetime
            execution_host: Grants background time during walks, if any
            breed_name: Breed used for walks started without one
        """
        self._provider = provider
        self._engine = engine
        self._config = config or PawStepsConfig()
        self._clock = clock
        self._execution_host = execution_host
        self.breed_name = breed_name

        self._mode = TrackingMode.INACTIVE
        self._generation = 0
        self._subscription: _Subscription | None = None

        self._daily_totals: DailyTotals | None = None
        self._session_totals: ActiveSessionTotals | None = None
        self._session_breed: str | None = None

        self._listeners: list[SessionListener] = []
        self._lock = asyncio.Lock()
        self._resume_task: asyncio.Task[MotionResult[DailyTotals]] | None = None
        self._execution_token: Hashable | None = None

        _LOGGER.debug("MotionSessionManager initialized")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_mode(self) -> TrackingMode:
        return self._mode

    @property
    def is_session_active(self) -> bool:
        return self._mode is TrackingMode.SESSION

    @property
    def has_extended_execution(self) -> bool:
        return self._execution_token is not None

    def get_current_session_data(self) -> WalkSessionData | None:
        """Return a live snapshot of the walk, or None outside session mode."""
        if self._mode is not TrackingMode.SESSION or self._session_totals is None:
            return None
        return self._session_snapshot(self._session_totals)

    def get_todays_totals(self) -> DailyTotals | None:
        """Return today's running totals, or None outside daily mode."""
        if self._mode is not TrackingMode.DAILY:
            return None
        return self._daily_totals

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """Register ``listener`` and return a function that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _emit(
        self,
        kind: SessionEventKind,
        *,
        daily_totals: DailyTotals | None = None,
        session_data: WalkSessionData | None = None,
        walk_session: WalkSession | None = None,
    ) -> None:
        event = SessionEvent(
            kind=kind,
            mode=self._mode,
            timestamp=self._clock(),
            daily_totals=daily_totals,
            session_data=session_data,
            walk_session=walk_session,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                _LOGGER.exception("Session listener failed while handling %s", kind)

    # ------------------------------------------------------------------
    # Permission
    # ------------------------------------------------------------------

    async def async_request_permission(self) -> bool:
        """Return True when motion access is (or becomes) granted.

        Denied and restricted states are final. An undetermined state
        prompts the user; no answer within ``permission_timeout`` counts as
        a refusal.
        """
        if not self._provider.is_available():
            _LOGGER.warning("Step counting is not available on this device")
            return False

        status = self._provider.authorization_status()
        if status is AuthorizationStatus.AUTHORIZED:
            return True
        if status in (AuthorizationStatus.DENIED, AuthorizationStatus.RESTRICTED):
            _LOGGER.warning("Motion permission is %s", status.value)
            return False

        try:
            granted = await await_single_callback(
                self._provider.request_authorization,
                timeout=self._config.permission_timeout,
            )
        except TimeoutError:
            _LOGGER.warning(
                "Motion permission request timed out after %.1fs",
                self._config.permission_timeout,
            )
            return False
        except Exception as err:
            _LOGGER.error("Motion permission request failed: %s", err)
            return False

        _LOGGER.info("Motion permission %s", "granted" if granted else "denied")
        return bool(granted)

    # ------------------------------------------------------------------
    # Daily mode
    # ------------------------------------------------------------------

    async def async_start_daily(self) -> MotionResult[DailyTotals]:
        """Start (or restart) daily tracking from local midnight.

        While a walk is active this is a successful no-op carrying no
        totals; daily tracking resumes after the walk stops.
        """
        async with self._lock:
            return await self._async_start_daily_locked(SessionEventKind.DAILY_STARTED)

    async def _async_start_daily_locked(
        self, event_kind: SessionEventKind
    ) -> MotionResult[DailyTotals]:
        if self._mode is TrackingMode.SESSION:
            _LOGGER.info("Walk session active, daily tracking resumes after the walk")
            return MotionResult.success(None)

        if not self._provider.is_available():
            _LOGGER.warning("Cannot start daily tracking: step counting not available")
            return MotionResult.failure(MotionError.not_available())

        if not await self.async_request_permission():
            _LOGGER.warning("Cannot start daily tracking: motion permission not granted")
            return MotionResult.failure(MotionError.permission_denied())

        self._unsubscribe()
        start = start_of_local_day(self._clock())
        self._daily_totals = DailyTotals(start_of_day=start)
        self._mode = TrackingMode.DAILY
        if (error := self._subscribe(start)) is not None:
            self._clear_tracking_state()
            return MotionResult.failure(error)

        _LOGGER.info("Daily step tracking started from %s", start.isoformat())
        self._emit(event_kind, daily_totals=self._daily_totals)
        return MotionResult.success(self._daily_totals)

    async def async_stop_daily(self) -> None:
        """Stop daily tracking; a no-op outside daily mode.

        A daily resume still pending after a walk is cancelled first.
        """
        self.cancel_pending_resume()
        async with self._lock:
            if self._mode is not TrackingMode.DAILY:
                _LOGGER.debug("Daily tracking not active, nothing to stop")
                return

            totals = self._daily_totals
            self._unsubscribe()
            self._daily_totals = None
            self._mode = TrackingMode.INACTIVE

            _LOGGER.info("Daily step tracking stopped")
            self._emit(SessionEventKind.DAILY_STOPPED, daily_totals=totals)

    # ------------------------------------------------------------------
    # Session mode
    # ------------------------------------------------------------------

    async def async_start_session(
        self, breed_name: str | None = None
    ) -> MotionResult[WalkSessionData]:
        """Start a walk, replacing any daily feed.

        Args:
            breed_name: Breed of the dog on this walk; the manager's
                ``breed_name`` when omitted

        Returns:
            The zeroed session snapshot, or ``session_already_active``,
            ``not_available``, ``permission_denied`` or ``unknown`` when
            the pedometer feed cannot be started
        """
        async with self._lock:
            if self._mode is TrackingMode.SESSION:
                _LOGGER.warning("Walk session already active")
                return MotionResult.failure(MotionError.session_already_active())

            if not self._provider.is_available():
                _LOGGER.warning("Cannot start walk: step counting not available")
                return MotionResult.failure(MotionError.not_available())

            if not await self.async_request_permission():
                _LOGGER.warning("Cannot start walk: motion permission not granted")
                return MotionResult.failure(MotionError.permission_denied())

            self.cancel_pending_resume()
            self._unsubscribe()

            start = self._clock()
            self._daily_totals = None
            self._session_totals = ActiveSessionTotals(start_time=start)
            self._session_breed = breed_name or self.breed_name
            self._mode = TrackingMode.SESSION
            if (error := self._subscribe(start)) is not None:
                self._clear_tracking_state()
                return MotionResult.failure(error)

            snapshot = self._session_snapshot(self._session_totals)
            _LOGGER.info(
                "Walk session started for %s", self._session_breed or "unknown breed"
            )
            self._emit(SessionEventKind.SESSION_STARTED, session_data=snapshot)
            return MotionResult.success(snapshot)

    async def async_stop_session(self) -> MotionResult[WalkSession]:
        """Finish the walk and return it as a :class:`WalkSession`.

        Emits ``session_stopped``. When ``auto_resume_daily`` is enabled a
        daily restart is scheduled afterwards; it emits ``daily_resumed``
        on success and its outcome never affects this result.
        """
        async with self._lock:
            totals = self._session_totals
            if self._mode is not TrackingMode.SESSION or totals is None:
                _LOGGER.warning("No active walk session to stop")
                return MotionResult.failure(MotionError.no_active_session())

            self._unsubscribe()
            end_time = self._clock()

            breed_profile, breed_label = self._engine.resolve_breed(self._session_breed)
            walk = WalkSession.finalize(
                totals,
                end_time=end_time,
                estimated_dog_steps=self._engine.calculate_dog_steps(
                    totals.steps, breed_profile or self._session_breed
                ),
                breed_name=breed_label,
                breed_multiplier=self._engine.get_breed_multiplier(
                    breed_profile or self._session_breed
                ),
            )

            self._session_totals = None
            self._session_breed = None
            self._mode = TrackingMode.INACTIVE
            self._release_extended_execution()

            _LOGGER.info(
                "Walk session stopped: %d steps (%d dog steps) in %.0fs",
                walk.human_steps,
                walk.estimated_dog_steps,
                walk.duration_seconds,
            )
            self._emit(SessionEventKind.SESSION_STOPPED, walk_session=walk)

            if self._config.auto_resume_daily:
                self._resume_task = asyncio.get_running_loop().create_task(
                    self._async_resume_daily()
                )

        return MotionResult.success(walk)

    async def _async_resume_daily(self) -> MotionResult[DailyTotals]:
        async with self._lock:
            result = await self._async_start_daily_locked(SessionEventKind.DAILY_RESUMED)
        if not result.ok:
            _LOGGER.debug("Daily tracking not resumed after walk: %s", result.error)
        return result

    def cancel_pending_resume(self) -> bool:
        """Cancel a scheduled daily resume; return True if one was pending."""
        task = self._resume_task
        self._resume_task = None
        if task is None or task.done():
            return False
        if task is asyncio.current_task():
            return False
        task.cancel()
        _LOGGER.debug("Cancelled pending daily resume")
        return True

    async def async_wait_pending_resume(self) -> MotionResult[DailyTotals] | None:
        """Wait for a scheduled daily resume and return its outcome.

        Returns None when nothing was scheduled or the resume was cancelled.
        """
        task = self._resume_task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled():
                return None
            raise
        finally:
            if self._resume_task is task:
                self._resume_task = None

    # ------------------------------------------------------------------
    # Historical queries
    # ------------------------------------------------------------------

    async def async_steps_for_date_range(
        self, start: datetime, end: datetime
    ) -> MotionResult[HumanActivitySample]:
        """Query the pedometer for the counts between ``start`` and ``end``."""
        return await self._async_query(start, end, timestamp=end)

    async def async_steps_for_date(
        self, day: date | datetime
    ) -> MotionResult[HumanActivitySample]:
        """Query the pedometer for one whole local calendar day."""
        start, end = local_day_bounds(day)
        return await self._async_query(start, end, timestamp=start)

    async def _async_query(
        self, start: datetime, end: datetime, *, timestamp: datetime
    ) -> MotionResult[HumanActivitySample]:
        if not self._provider.is_available():
            return MotionResult.failure(MotionError.not_available())

        def _register(
            resolve: Callable[[tuple[PedometerReading | None, BaseException | None]], None],
        ) -> None:
            self._provider.query(start, end, lambda reading, error: resolve((reading, error)))

        try:
            reading, error = await await_single_callback(
                _register, timeout=self._config.query_timeout
            )
        except TimeoutError:
            _LOGGER.warning(
                "Pedometer query %s - %s timed out after %.1fs",
                start.isoformat(),
                end.isoformat(),
                self._config.query_timeout,
            )
            return MotionResult.failure(MotionError.data_not_available())
        except Exception as err:
            _LOGGER.error("Pedometer query failed: %s", err)
            return MotionResult.failure(MotionError.unknown(err))

        if error is not None:
            _LOGGER.error("Pedometer query failed: %s", error)
            return MotionResult.failure(MotionError.unknown(error))
        if reading is None:
            _LOGGER.debug("No pedometer data between %s and %s", start, end)
            return MotionResult.failure(MotionError.data_not_available())

        sample = HumanActivitySample(
            timestamp=timestamp,
            human_steps=max(0, int(reading.steps)),
            distance_meters=max(0.0, float(reading.distance_meters or 0.0)),
        )
        _LOGGER.debug("Retrieved %d steps for %s - %s", sample.human_steps, start, end)
        return MotionResult.success(sample)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def handle_background(self) -> None:
        """Request background time when a walk is running.

        Must be called from the event loop. The host may report expiry on
        any thread; the release is applied on the loop.
        """
        if self._mode is not TrackingMode.SESSION:
            return
        if self._execution_host is None or self._execution_token is not None:
            return

        loop = asyncio.get_running_loop()

        def _on_expiration() -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(self._release_extended_execution)

        self._execution_token = self._execution_host.begin_extended_execution(
            EXTENDED_EXECUTION_NAME, _on_expiration
        )
        _LOGGER.debug("Extended execution requested for active walk")

    async def async_handle_foreground(self) -> None:
        """Release background time and refresh the live totals once.

        In daily mode a new calendar day restarts daily tracking from the
        new midnight; otherwise today's totals are re-queried. In session
        mode the walk's range is re-queried.
        """
        self._release_extended_execution()

        subscription = self._subscription
        if subscription is None:
            return

        now = self._clock()
        if subscription.mode is TrackingMode.DAILY and not is_same_local_day(
            subscription.start, now
        ):
            _LOGGER.info("Calendar day changed, restarting daily tracking")
            async with self._lock:
                if self._subscription is subscription:
                    await self._async_start_daily_locked(SessionEventKind.DAILY_STARTED)
            return

        result = await self._async_query(subscription.start, now, timestamp=now)
        if not result.ok or result.value is None:
            _LOGGER.debug("Foreground refresh skipped: %s", result.error)
            return

        sample = result.value
        self._apply_update(
            subscription.generation,
            subscription.mode,
            PedometerReading(sample.human_steps, sample.distance_meters),
            None,
        )

    def handle_app_terminating(self) -> None:
        """Tear down the feed and release background time."""
        self.cancel_pending_resume()
        self._unsubscribe()
        self._release_extended_execution()
        self._clear_tracking_state()
        _LOGGER.debug("Motion tracking torn down for app termination")

    def _clear_tracking_state(self) -> None:
        self._daily_totals = None
        self._session_totals = None
        self._session_breed = None
        self._mode = TrackingMode.INACTIVE

    def _release_extended_execution(self) -> None:
        token = self._execution_token
        if token is None or self._execution_host is None:
            return
        self._execution_token = None
        self._execution_host.end_extended_execution(token)
        _LOGGER.debug("Extended execution released")

    # ------------------------------------------------------------------
    # Feed handling
    # ------------------------------------------------------------------

    def _subscribe(self, start: datetime) -> MotionError | None:
        """Start the pedometer feed for the current mode.

        Returns the error when the provider refuses the subscription; no
        subscription is kept in that case.
        """
        self._generation += 1
        subscription = _Subscription(self._generation, self._mode, start)
        self._subscription = subscription
        loop = asyncio.get_running_loop()

        def _on_update(
            reading: PedometerReading | None, error: BaseException | None
        ) -> None:
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(
                self._apply_update,
                subscription.generation,
                subscription.mode,
                reading,
                error,
            )

        try:
            self._provider.subscribe_from(start, _on_update)
        except Exception as err:
            _LOGGER.error("Failed to start pedometer updates: %s", err)
            self._subscription = None
            self._generation += 1
            return MotionError.unknown(err)
        return None

    def _unsubscribe(self) -> None:
        if self._subscription is None:
            return
        self._subscription = None
        self._generation += 1
        try:
            self._provider.unsubscribe()
        except Exception as err:
            # Updates still delivered carry the old generation and are dropped.
            _LOGGER.warning("Failed to stop pedometer updates: %s", err)

    def _apply_update(
        self,
        generation: int,
        mode: TrackingMode,
        reading: PedometerReading | None,
        error: BaseException | None,
    ) -> None:
        if generation != self._generation or mode is not self._mode:
            _LOGGER.debug("Dropping stale %s update (generation %d)", mode, generation)
            return
        if error is not None:
            _LOGGER.warning("Step counting error: %s", error)
            return
        if reading is None:
            _LOGGER.debug("No pedometer data received")
            return

        now = self._clock()
        steps = max(0, int(reading.steps))
        distance = max(0.0, float(reading.distance_meters or 0.0))

        if mode is TrackingMode.DAILY and self._daily_totals is not None:
            current = self._daily_totals
            self._daily_totals = DailyTotals(
                start_of_day=current.start_of_day,
                steps=max(current.steps, steps),
                distance_meters=max(current.distance_meters, distance),
                last_update=now,
            )
            self._emit(SessionEventKind.TOTALS_UPDATED, daily_totals=self._daily_totals)
        elif mode is TrackingMode.SESSION and self._session_totals is not None:
            self._session_totals = ActiveSessionTotals(
                start_time=self._session_totals.start_time,
                steps=steps,
                distance_meters=distance,
                last_update=now,
            )
            self._emit(
                SessionEventKind.TOTALS_UPDATED,
                session_data=self._session_snapshot(self._session_totals),
            )

    def _session_snapshot(self, totals: ActiveSessionTotals) -> WalkSessionData:
        return WalkSessionData(
            steps=totals.steps,
            distance_meters=totals.distance_meters,
            duration_seconds=totals.duration_seconds(self._clock()),
            start_time=totals.start_time,
        )
