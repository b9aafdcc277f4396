"""
Infrastructure exceptions for Stargazer.

Purpose
-------
Define the structured exception hierarchy for infrastructure-level concerns:
save-slot storage failures and storage lifecycle misuse. Game rule
violations live in ``stargazer.modules.shared.exceptions`` instead.

Design Notes
------------
- All infrastructure exceptions inherit from ``StargazerInfrastructureException``.
- Each exception carries ``message``, ``details``, ``severity``,
  ``is_retryable`` and ``error_code``.
- Storage backends wrap driver errors (OSError, RedisError, SQLAlchemyError)
  in ``PersistenceError`` so callers handle a single type.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning (e.g., duplicate tap)
    INFO = "info"  # Normal operation (e.g., out of energy)
    WARNING = "warning"  # Concerning but handled (e.g., corrupt save)
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures


class StructuredError(Exception):
    """
    Exception carrying structured context for logs and callers.

    Shared by the infrastructure hierarchy below and the domain hierarchy in
    ``stargazer.modules.shared.exceptions``.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"


class StargazerInfrastructureException(StructuredError):
    """Base exception for storage and other infrastructure failures."""


class PersistenceError(StargazerInfrastructureException):
    """
    Raised when a save-slot read, write or delete fails.

    Args:
        operation: The storage operation that failed ("get", "set", "delete")
        slot: Slot key involved
        original_error: The underlying driver exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, slot: str, original_error: Exception) -> None:
        self.operation = operation
        self.slot = slot
        self.original_error = original_error
        super().__init__(
            f"Storage error during {operation} of slot '{slot}': {original_error}",
            details={
                "operation": operation,
                "slot": slot,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="PERSISTENCE_ERROR",
        )


class StorageNotInitializedError(StargazerInfrastructureException):
    """Raised when a slot store is used before ``initialize()`` or after ``shutdown()``."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, store_name: str) -> None:
        super().__init__(
            f"{store_name} used before initialize()",
            details={"store": store_name},
            error_code="STORAGE_NOT_INITIALIZED",
        )


def is_transient_error(exc: Exception) -> bool:
    """Check if an exception is transient and the operation could be retried."""
    return bool(getattr(exc, "is_retryable", False))
