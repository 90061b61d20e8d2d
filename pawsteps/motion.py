"""Boundary contracts for the device motion service.

The session manager talks to the platform pedometer and to the host's
background-execution facility only through the protocols defined here.
Platform callbacks may fire on any thread and may fire more than once;
:func:`await_single_callback` turns such a callback into an awaitable that
resolves at most once and gives up after a timeout.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from .types import AuthorizationStatus

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PedometerReading:
    """Cumulative counts reported by the pedometer since a start time."""

    steps: int
    distance_meters: float | None = None


type AuthorizationCallback = Callable[[bool], None]
type PedometerCallback = Callable[[PedometerReading | None, BaseException | None], None]
type ExpirationHandler = Callable[[], None]


@runtime_checkable
class MotionProvider(Protocol):
    """Platform pedometer."""

    def is_available(self) -> bool:
        """Return True when the device can count steps."""

    def authorization_status(self) -> AuthorizationStatus:
        """Return the current motion permission state."""

    def request_authorization(self, on_result: AuthorizationCallback) -> None:
        """Ask the user for motion access and report whether it was granted."""

    def subscribe_from(self, start: datetime, on_update: PedometerCallback) -> None:
        """Deliver cumulative counts since ``start`` until unsubscribed."""

    def unsubscribe(self) -> None:
        """Stop the live feed. Calling it without a subscription is a no-op."""

    def query(
        self, start: datetime, end: datetime, on_result: PedometerCallback
    ) -> None:
        """Report the counts between ``start`` and ``end`` once."""


@runtime_checkable
class ExtendedExecutionHost(Protocol):
    """Host facility that keeps the app running briefly in the background."""

    def begin_extended_execution(
        self, name: str, on_expiration: ExpirationHandler
    ) -> Hashable:
        """Request background time and return a token for releasing it."""

    def end_extended_execution(self, token: Hashable) -> None:
        """Release background time acquired with ``token``."""


async def await_single_callback[T](
    register: Callable[[Callable[[T], None]], None],
    *,
    timeout: float,
) -> T:
    """Wait for the first value passed to a callback handed to ``register``.

    The callback is safe to call from any thread and any number of times;
    only the first call before the timeout counts.

    Args:
        register: Starts the platform operation with the given callback
        timeout: Seconds to wait before giving up

    Returns:
        The first value delivered to the callback

    Raises:
        TimeoutError: No value arrived within ``timeout`` seconds
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()

    def _resolve(value: T) -> None:
        if future.done():
            _LOGGER.debug("Ignoring repeated platform callback")
            return
        future.set_result(value)

    def _callback(value: T) -> None:
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(_resolve, value)

    register(_callback)
    return await asyncio.wait_for(future, timeout)
