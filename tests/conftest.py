"""Global test configuration for PawSteps tests.

Provides fakes for the platform collaborators (pedometer, background
execution host, clock) and ready-wired engine and session manager
fixtures.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from datetime import UTC, datetime, timedelta

import pytest

from pawsteps.breeds import StaticBreedCatalog
from pawsteps.config import PawStepsConfig
from pawsteps.estimation import StepEstimationEngine
from pawsteps.motion import PedometerCallback, PedometerReading
from pawsteps.session import MotionSessionManager, SessionEvent
from pawsteps.types import AuthorizationStatus

START_TIME = datetime(2025, 6, 10, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeMotionProvider:
    """In-memory pedometer driven by the test."""

    def __init__(self) -> None:
        self.available = True
        self.status = AuthorizationStatus.AUTHORIZED
        # Answer given to authorization requests; None never answers.
        self.grant: bool | None = True
        self.authorization_callbacks: list[Callable[[bool], None]] = []

        self.subscriptions: list[tuple[datetime, PedometerCallback]] = []
        self.active: PedometerCallback | None = None
        self.unsubscribe_calls = 0
        self.subscribe_exception: Exception | None = None
        self.unsubscribe_exception: Exception | None = None

        self.query_calls: list[tuple[datetime, datetime]] = []
        # Reply given to queries; None never replies.
        self.query_reply: tuple[PedometerReading | None, BaseException | None] | None = (
            PedometerReading(0, 0.0),
            None,
        )
        self.query_exception: Exception | None = None

    def is_available(self) -> bool:
        return self.available

    def authorization_status(self) -> AuthorizationStatus:
        return self.status

    def request_authorization(self, on_result: Callable[[bool], None]) -> None:
        self.authorization_callbacks.append(on_result)
        if self.grant is None:
            return
        self.status = (
            AuthorizationStatus.AUTHORIZED if self.grant else AuthorizationStatus.DENIED
        )
        on_result(self.grant)

    def subscribe_from(self, start: datetime, on_update: PedometerCallback) -> None:
        if self.subscribe_exception is not None:
            raise self.subscribe_exception
        self.subscriptions.append((start, on_update))
        self.active = on_update

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        if self.unsubscribe_exception is not None:
            raise self.unsubscribe_exception
        self.active = None

    def query(
        self, start: datetime, end: datetime, on_result: PedometerCallback
    ) -> None:
        self.query_calls.append((start, end))
        if self.query_exception is not None:
            raise self.query_exception
        if self.query_reply is not None:
            on_result(*self.query_reply)

    def push(self, steps: int, distance: float | None = None) -> None:
        """Deliver a reading through the live subscription."""
        assert self.active is not None, "no live subscription"
        self.active(PedometerReading(steps, distance), None)


class FakeExecutionHost:
    """Records background-execution grants."""

    def __init__(self) -> None:
        self.begun: list[str] = []
        self.ended: list[Hashable] = []
        self.expiration_handlers: list[Callable[[], None]] = []
        self._next_token = 0

    def begin_extended_execution(
        self, name: str, on_expiration: Callable[[], None]
    ) -> Hashable:
        self._next_token += 1
        self.begun.append(name)
        self.expiration_handlers.append(on_expiration)
        return self._next_token

    def end_extended_execution(self, token: Hashable) -> None:
        self.ended.append(token)


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at noon UTC on 2025-06-10."""
    return FakeClock()


@pytest.fixture
def catalog() -> StaticBreedCatalog:
    """Catalog with the built-in breeds."""
    return StaticBreedCatalog()


@pytest.fixture
def config() -> PawStepsConfig:
    """Default settings."""
    return PawStepsConfig()


@pytest.fixture
def engine(
    catalog: StaticBreedCatalog, config: PawStepsConfig, clock: FakeClock
) -> StepEstimationEngine:
    """Estimation engine wired to the fake clock."""
    return StepEstimationEngine(catalog, config=config, clock=clock)


@pytest.fixture
def provider() -> FakeMotionProvider:
    """Available, authorized pedometer."""
    return FakeMotionProvider()


@pytest.fixture
def execution_host() -> FakeExecutionHost:
    """Background execution host."""
    return FakeExecutionHost()


@pytest.fixture
def manager(
    provider: FakeMotionProvider,
    engine: StepEstimationEngine,
    config: PawStepsConfig,
    clock: FakeClock,
    execution_host: FakeExecutionHost,
) -> MotionSessionManager:
    """Session manager for a Labrador Retriever."""
    return MotionSessionManager(
        provider,
        engine,
        config=config,
        clock=clock,
        execution_host=execution_host,
        breed_name="Labrador Retriever",
    )


@pytest.fixture
def events(manager: MotionSessionManager) -> list[SessionEvent]:
    """Events published by ``manager``."""
    received: list[SessionEvent] = []
    manager.add_listener(received.append)
    return received


@pytest.fixture
def drain() -> Callable[[], Awaitable[None]]:
    """Let callbacks scheduled on the loop run."""

    async def _drain() -> None:
        for _ in range(3):
            await asyncio.sleep(0)

    return _drain
