"""
Domain exceptions for Stargazer.

Purpose
-------
Define the structured, domain-specific exception hierarchy for progression
rules. These are raised by the engine and its policies for rejected actions,
terminal progress and bad content; callers (UI, headless runner) decide how
to present them.

Design Notes
------------
- All domain exceptions inherit from ``StargazerDomainException``.
- Each exception carries:
  - ``message``: human-readable description
  - ``details``: additional structured context
  - ``severity``: ``ErrorSeverity`` value for logging
  - ``is_retryable``: whether the same call can succeed later
  - ``error_code``: short, stable identifier for programmatic use
- Guard rejections share ``ExplorationRejectedError`` so callers can catch
  both with one clause or tell them apart.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from stargazer.core.exceptions import ErrorSeverity, StructuredError


class StargazerDomainException(StructuredError):
    """
    Base exception for all Stargazer domain-level errors.

    Same structured fields as the infrastructure hierarchy; callers that
    only care about game rules catch this type.
    """

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class ExplorationRejectedError(StargazerDomainException):
    """
    Raised when an exploration is refused before anything is mutated.

    Args:
        reason: Short machine-readable reason ("insufficient_energy", "in_progress")
        message: Human-readable explanation
        details: Extra context
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = True

    def __init__(
        self,
        reason: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reason = reason
        super().__init__(
            message,
            details={"reason": reason, **(details or {})},
            error_code=f"EXPLORATION_{reason.upper()}",
        )


class InsufficientEnergyError(ExplorationRejectedError):
    """
    Raised when the player has no energy left to explore.

    Args:
        current: Energy the player has (always 0 today)
        required: Energy one exploration costs
    """

    def __init__(self, current: int, required: int = 1) -> None:
        self.current = current
        self.required = required
        super().__init__(
            "insufficient_energy",
            f"Insufficient energy: need {required}, have {current}",
            details={"current": current, "required": required},
        )


class ExplorationInProgressError(ExplorationRejectedError):
    """Raised when an exploration is requested while another one is running."""

    DEFAULT_SEVERITY = ErrorSeverity.DEBUG

    def __init__(self) -> None:
        super().__init__("in_progress", "An exploration is already in progress")


class CatalogExhaustedError(StargazerDomainException):
    """
    Raised when every catalog entry has been discovered.

    Terminal progress, not a fault: nothing is mutated and retrying will not
    help until the catalog grows.
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, catalog_size: int) -> None:
        self.catalog_size = catalog_size
        super().__init__(
            "Every catalog entry has already been discovered",
            details={"catalog_size": catalog_size},
            error_code="CATALOG_EXHAUSTED",
        )


class CorruptSnapshotError(StargazerDomainException):
    """
    Raised when a persisted snapshot cannot be decoded.

    Never escapes the persistence gateway: load logs it and behaves as if no
    snapshot existed.
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, reason: str, slot: Optional[str] = None) -> None:
        self.reason = reason
        self.slot = slot
        super().__init__(
            f"Corrupt snapshot: {reason}",
            details={"reason": reason, "slot": slot},
            error_code="CORRUPT_SNAPSHOT",
        )


class CatalogError(StargazerDomainException):
    """
    Raised when catalog content is invalid (duplicate ids, bad fields).

    Fatal for boot only; the engine is never built from a bad catalog.
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, reason: str, source: Optional[str] = None) -> None:
        self.reason = reason
        self.source = source
        super().__init__(
            f"Invalid catalog: {reason}",
            details={"reason": reason, "source": source},
            error_code="CATALOG_INVALID",
        )


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Severity of an exception for logging; unknown exceptions count as ERROR."""
    if isinstance(exc, StargazerDomainException):
        return exc.severity
    return ErrorSeverity.ERROR
