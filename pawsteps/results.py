"""Typed outcomes returned by motion session operations."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import MotionError, MotionErrorKind


@dataclass(frozen=True, slots=True)
class MotionResult[T]:
    """Success value or :class:`MotionError`, never both."""

    value: T | None = None
    error: MotionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> MotionErrorKind | None:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    @classmethod
    def success(cls, value: T | None = None) -> MotionResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: MotionError) -> MotionResult[T]:
        return cls(error=error)
