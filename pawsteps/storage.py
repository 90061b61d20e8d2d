"""Persistence of estimation and walk history.

The host application supplies a :class:`PersistenceProvider`, a key/value
store for JSON-compatible data. The stores here wrap each payload in a
versioned envelope and convert between records and their dict forms.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .config import PawStepsConfig
from .const import (
    STORAGE_KEY_RECENT_ESTIMATIONS,
    STORAGE_KEY_WALK_SESSIONS,
    STORAGE_VERSION,
)
from .estimation import StepEstimationEngine
from .exceptions import StorageError
from .types import DogStepEstimation, JSONMapping
from .walk_session import WalkSession

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class PersistenceProvider(Protocol):
    """Key/value store for JSON-compatible payloads."""

    async def async_load(self, key: str) -> JSONMapping | None:
        """Return the payload stored under ``key`` or None."""

    async def async_save(self, key: str, data: JSONMapping) -> None:
        """Store ``data`` under ``key``, replacing any previous payload."""


class MemoryPersistence:
    """In-process persistence; payloads are copied in and out."""

    def __init__(self) -> None:
        self._data: dict[str, JSONMapping] = {}

    async def async_load(self, key: str) -> JSONMapping | None:
        payload = self._data.get(key)
        return copy.deepcopy(payload) if payload is not None else None

    async def async_save(self, key: str, data: JSONMapping) -> None:
        self._data[key] = copy.deepcopy(data)


class JsonFilePersistence:
    """One JSON file per key inside ``storage_dir``."""

    def __init__(self, storage_dir: Path | str) -> None:
        self._storage_dir = Path(storage_dir)

    def _path(self, key: str) -> Path:
        safe_key = key.replace("/", "_")
        return self._storage_dir / f"{safe_key}.json"

    async def async_load(self, key: str) -> JSONMapping | None:
        """Read the payload for ``key``; corrupted files load as None.

        Raises:
            StorageError: The file exists but cannot be read.
        """
        path = self._path(key)
        try:
            contents = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as err:
            raise StorageError(key, "read", str(err)) from err

        if not contents:
            return None

        try:
            return json.loads(contents)
        except json.JSONDecodeError:
            _LOGGER.warning("Corrupted PawSteps %s data detected at %s", key, path)
            return None

    async def async_save(self, key: str, data: JSONMapping) -> None:
        """Write the payload for ``key``.

        Raises:
            StorageError: The file cannot be written.
        """
        path = self._path(key)
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_text, payload, encoding="utf-8")
        except OSError as err:
            raise StorageError(key, "write", str(err)) from err


def _wrap(items: list[Any]) -> JSONMapping:
    return {"version": STORAGE_VERSION, "items": items}


def _unwrap(key: str, payload: JSONMapping | None) -> list[Any]:
    if payload is None:
        return []
    if not isinstance(payload, dict):
        _LOGGER.warning("Ignoring malformed %s data", key)
        return []
    version = payload.get("version")
    if version != STORAGE_VERSION:
        _LOGGER.warning(
            "Ignoring %s data with unsupported version %s", key, version
        )
        return []
    items = payload.get("items")
    if not isinstance(items, list):
        _LOGGER.warning("Ignoring malformed %s data", key)
        return []
    return items


class EstimationHistoryStore:
    """Persists the estimation engine's window of recent estimations."""

    def __init__(
        self, persistence: PersistenceProvider, engine: StepEstimationEngine
    ) -> None:
        self._persistence = persistence
        self._engine = engine

    async def async_load(self) -> int:
        """Restore stored estimations into the engine; return how many."""
        items = _unwrap(
            STORAGE_KEY_RECENT_ESTIMATIONS,
            await self._persistence.async_load(STORAGE_KEY_RECENT_ESTIMATIONS),
        )

        estimations: list[DogStepEstimation] = []
        for item in items:
            try:
                estimations.append(DogStepEstimation.from_dict(item))
            except (KeyError, TypeError, ValueError) as err:
                _LOGGER.warning("Skipping invalid stored estimation: %s", err)

        self._engine.restore_recent(estimations)
        return len(self._engine.recent_estimations)

    async def async_save(self) -> None:
        await self._persistence.async_save(
            STORAGE_KEY_RECENT_ESTIMATIONS,
            _wrap([e.as_dict() for e in self._engine.recent_estimations]),
        )


class WalkHistoryStore:
    """Newest-first history of finished walks, capped at a fixed size."""

    def __init__(
        self,
        persistence: PersistenceProvider,
        *,
        config: PawStepsConfig | None = None,
    ) -> None:
        self._persistence = persistence
        self._limit = (config or PawStepsConfig()).walk_history_limit
        self._sessions: list[WalkSession] = []
        self._lock = asyncio.Lock()

    @property
    def sessions(self) -> list[WalkSession]:
        return list(self._sessions)

    async def async_load(self) -> list[WalkSession]:
        """Load stored walks, dropping entries that cannot be restored."""
        items = _unwrap(
            STORAGE_KEY_WALK_SESSIONS,
            await self._persistence.async_load(STORAGE_KEY_WALK_SESSIONS),
        )

        sessions: list[WalkSession] = []
        for item in items:
            try:
                sessions.append(WalkSession.from_dict(item))
            except (KeyError, TypeError, ValueError) as err:
                _LOGGER.warning("Skipping invalid stored walk session: %s", err)

        sessions.sort(key=lambda session: session.start_time, reverse=True)
        async with self._lock:
            self._sessions = sessions[: self._limit]
        _LOGGER.debug("Loaded %d walk sessions", len(self._sessions))
        return self.sessions

    async def async_add(self, session: WalkSession) -> None:
        """Prepend ``session``, trim to the limit and persist."""
        async with self._lock:
            self._sessions.insert(0, session)
            if len(self._sessions) > self._limit:
                self._sessions = self._sessions[: self._limit]
            await self._async_save_locked()

    async def async_clear(self) -> None:
        async with self._lock:
            self._sessions = []
            await self._async_save_locked()

    async def _async_save_locked(self) -> None:
        await self._persistence.async_save(
            STORAGE_KEY_WALK_SESSIONS,
            _wrap([session.as_dict() for session in self._sessions]),
        )
