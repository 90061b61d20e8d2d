"""Custom exceptions for PawSteps.

This module defines the exception classes for the error conditions that
can occur while estimating dog steps or driving the motion session
machine. Every error carries structured information (code, severity,
category, context and recovery suggestions) so callers can map it to a
user prompt or a log line without string matching.

Session-machine operations do not raise these errors; they hand them back
inside a :class:`~pawsteps.results.MotionResult`. Construction-time
invariant violations (configuration, breed data) are raised.

Python: 3.12+
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, StrEnum
from typing import Any

from .utils import utcnow


class ErrorSeverity(Enum):
    """Error severity levels for better error handling and user experience."""

    LOW = "low"  # Minor issues, degraded functionality
    MEDIUM = "medium"  # Significant issues, some features unavailable
    HIGH = "high"  # Major issues, core functionality affected
    CRITICAL = "critical"  # Tracking cannot work at all


class ErrorCategory(Enum):
    """Error categories for better organization and handling."""

    CONFIGURATION = "configuration"
    DATA = "data"
    AUTHORIZATION = "authorization"
    DEVICE = "device"
    BUSINESS_LOGIC = "business_logic"
    SYSTEM = "system"


class PawStepsError(Exception):
    """Base exception for all PawSteps errors.

    Provides structured error information, contextual data and recovery
    suggestions.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: dict[str, Any] | None = None,
        recovery_suggestions: list[str] | None = None,
        user_message: str | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        """Initialize the PawSteps exception.

        Args:
            message: Human-readable error message for developers
            error_code: Unique error code for programmatic handling
            severity: Error severity level
            category: Error category for organization
            context: Additional context data for debugging
            recovery_suggestions: List of suggested recovery actions
            user_message: User-friendly error message
            timestamp: When the error occurred
        """
        super().__init__(message)

        self.error_code = error_code or self.__class__.__name__.lower()
        self.severity = severity
        self.category = category
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        self.user_message = user_message or message
        self.timestamp = timestamp or utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_code": self.error_code,
            "message": str(self),
            "user_message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context,
            "recovery_suggestions": self.recovery_suggestions,
            "timestamp": self.timestamp.isoformat(),
            "exception_type": self.__class__.__name__,
        }

    def add_context(self, key: str, value: Any) -> PawStepsError:
        """Add context information to the exception and return self."""
        self.context[key] = value
        return self


class ConfigurationError(PawStepsError):
    """Exception raised for configuration-related errors."""

    def __init__(
        self,
        setting: str,
        value: Any = None,
        reason: str | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            setting: The configuration setting that's invalid
            value: The invalid value
            reason: Reason why the configuration is invalid
        """
        if value is not None and reason:
            message = (
                f"Invalid configuration for '{setting}' (value: {value}): {reason}"
            )
        elif value is not None:
            message = f"Invalid configuration for '{setting}': {value}"
        elif reason:
            message = f"Invalid configuration for '{setting}': {reason}"
        else:
            message = f"Invalid configuration for '{setting}'"

        super().__init__(
            message,
            error_code="configuration_error",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONFIGURATION,
            context={"setting": setting, "value": value},
            recovery_suggestions=[
                "Verify the setting value is within acceptable range",
            ],
        )

        self.setting = setting
        self.value = value


class BreedProfileError(PawStepsError):
    """Raised when breed data violates the catalog invariants."""

    def __init__(self, breed_name: str, reason: str) -> None:
        super().__init__(
            f"Invalid breed profile '{breed_name}': {reason}",
            error_code="invalid_breed_profile",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.DATA,
            context={"breed": breed_name, "reason": reason},
        )
        self.breed_name = breed_name


class StorageError(PawStepsError):
    """Raised when persisted history cannot be read or written."""

    def __init__(self, key: str, operation: str, reason: str) -> None:
        super().__init__(
            f"Unable to {operation} '{key}': {reason}",
            error_code="storage_error",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.DATA,
            context={"key": key, "operation": operation},
            recovery_suggestions=["Check that the storage location is writable"],
        )
        self.key = key
        self.operation = operation


class MotionErrorKind(StrEnum):
    """Outcome kinds surfaced by the motion session machine."""

    NOT_AVAILABLE = "not_available"
    PERMISSION_DENIED = "permission_denied"
    DATA_NOT_AVAILABLE = "data_not_available"
    SESSION_ALREADY_ACTIVE = "session_already_active"
    NO_ACTIVE_SESSION = "no_active_session"
    UNKNOWN = "unknown"


_MOTION_ERROR_DETAILS: dict[
    MotionErrorKind, tuple[str, ErrorSeverity, ErrorCategory, list[str]]
] = {
    MotionErrorKind.NOT_AVAILABLE: (
        "Step counting is not available on this device",
        ErrorSeverity.CRITICAL,
        ErrorCategory.DEVICE,
        ["Use a device with a step-counting motion coprocessor"],
    ),
    MotionErrorKind.PERMISSION_DENIED: (
        "Motion permission was denied",
        ErrorSeverity.HIGH,
        ErrorCategory.AUTHORIZATION,
        ["Grant motion & fitness access in the system settings"],
    ),
    MotionErrorKind.DATA_NOT_AVAILABLE: (
        "Step data is not available",
        ErrorSeverity.LOW,
        ErrorCategory.DATA,
        [],
    ),
    MotionErrorKind.SESSION_ALREADY_ACTIVE: (
        "A walk session is already active",
        ErrorSeverity.LOW,
        ErrorCategory.BUSINESS_LOGIC,
        ["Stop the current walk before starting a new one"],
    ),
    MotionErrorKind.NO_ACTIVE_SESSION: (
        "No active walk session found",
        ErrorSeverity.LOW,
        ErrorCategory.BUSINESS_LOGIC,
        [],
    ),
    MotionErrorKind.UNKNOWN: (
        "An unknown error occurred",
        ErrorSeverity.MEDIUM,
        ErrorCategory.SYSTEM,
        [],
    ),
}


class MotionError(PawStepsError):
    """Typed motion-tracking failure.

    ``cause`` is only set for :attr:`MotionErrorKind.UNKNOWN` and holds the
    exception raised by the underlying motion provider.
    """

    def __init__(
        self,
        kind: MotionErrorKind,
        *,
        cause: BaseException | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        message, severity, category, suggestions = _MOTION_ERROR_DETAILS[kind]
        if kind is MotionErrorKind.UNKNOWN and cause is not None:
            message = f"{message}: {cause}"

        super().__init__(
            message,
            error_code=kind.value,
            severity=severity,
            category=category,
            context=context,
            recovery_suggestions=list(suggestions),
        )

        self.kind = kind
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def requires_settings_prompt(self) -> bool:
        """Return True when the UI should direct the user to system settings."""
        return self.kind in (
            MotionErrorKind.NOT_AVAILABLE,
            MotionErrorKind.PERMISSION_DENIED,
        )

    @classmethod
    def not_available(cls) -> MotionError:
        return cls(MotionErrorKind.NOT_AVAILABLE)

    @classmethod
    def permission_denied(cls) -> MotionError:
        return cls(MotionErrorKind.PERMISSION_DENIED)

    @classmethod
    def data_not_available(cls) -> MotionError:
        return cls(MotionErrorKind.DATA_NOT_AVAILABLE)

    @classmethod
    def session_already_active(cls) -> MotionError:
        return cls(MotionErrorKind.SESSION_ALREADY_ACTIVE)

    @classmethod
    def no_active_session(cls) -> MotionError:
        return cls(MotionErrorKind.NO_ACTIVE_SESSION)

    @classmethod
    def unknown(cls, cause: BaseException) -> MotionError:
        return cls(MotionErrorKind.UNKNOWN, cause=cause)


__all__ = [
    "BreedProfileError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorSeverity",
    "MotionError",
    "MotionErrorKind",
    "PawStepsError",
    "StorageError",
]
