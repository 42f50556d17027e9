# exam_logistics/core/exceptions.py
"""Application-level exceptions used across the allocation services.

This module provides structured exceptions that carry metadata useful for
service-level error handling, logging, and HTTP translation in routers.

- Each exception is serializable via ``to_dict`` for API responses and logs.
- Exceptions include an explicit ``code`` and ``status_code``.
- Fatal allocation errors are raised before any assignment is deleted, so the
  previous state of the scope is untouched when one escapes a run.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base application exception with structured metadata.

    Attributes
    ----------
    message
        Human readable message.
    code
        Machine friendly error code (snake_case).
    status_code
        Suggested HTTP status code for API responses.
    details
        Arbitrary extra data useful for debugging or UX.
    timestamp
        UTC ISO timestamp when the exception was created.
    cause
        Optional underlying exception instance.
    context
        Optional lightweight context dict (ids, phase names, counts).
    """

    code: str = "app_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An application error occurred",
        *,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}({self.code}): {self.message}"
        if self.context:
            base += f" | context={self.context}"
        if self.details is not None:
            base += f" | details={self.details}"
        if self.cause is not None:
            base += f" | cause={repr(self.cause)}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Return a serializable representation suitable for API responses."""
        return {
            "error": {
                "type": self.__class__.__name__,
                "code": self.code,
                "message": self.message,
                "status_code": self.status_code,
                "details": self.details,
                "context": self.context,
                "timestamp": self.timestamp,
            }
        }

    def with_context(self, **ctx: Any) -> "AppError":
        """Return self after extending the context dict. Useful for chaining.

        Example:
        raise err.with_context(schedule_id=schedule_id)
        """
        self.context.update({k: v for k, v in ctx.items() if v is not None})
        return self


class AllocationError(AppError):
    """Generic allocation engine error.

    Base for every failure raised by the duty, section and split-room
    allocators and the services that run them.
    """

    code = "allocation_error"
    status_code = 500

    def __init__(
        self,
        message: str = "Allocation engine error",
        *,
        allocator: Optional[str] = None,
        phase: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if allocator:
            self.context.setdefault("allocator", allocator)
        if phase:
            self.context.setdefault("phase", phase)


class InputMissingError(AllocationError):
    """Raised when a run has no professors/students, rooms, or exam slots."""

    code = "input_missing"
    status_code = 404

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        entity_type: Optional[str] = None,
        allocator: Optional[str] = None,
        details: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        msg = message or (
            f"No {entity_type} available for allocation"
            if entity_type
            else "Required allocation input is missing"
        )
        super().__init__(
            msg,
            allocator=allocator,
            phase="input_loading",
            details=details,
            context=context,
        )
        if entity_type:
            self.context.setdefault("entity_type", entity_type)


class RecordNotFoundError(AppError):
    """Raised when a referenced schedule or subject cannot be located."""

    code = "record_not_found"
    status_code = 404

    def __init__(
        self,
        entity_type: str,
        entity_id: Optional[Any] = None,
        message: Optional[str] = None,
        *,
        details: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        msg = message or (
            f"{entity_type.capitalize()} {entity_id} not found"
            if entity_id is not None
            else f"{entity_type.capitalize()} not found"
        )
        super().__init__(msg, details=details, context=context)
        self.context.setdefault("entity_type", entity_type)
        if entity_id is not None:
            self.context.setdefault("entity_id", str(entity_id))


class CapacityExceededError(AllocationError):
    """Raised when demand for seats exceeds the seats the rooms offer.

    Carries both the up-front totals and, when the run got that far, how many
    students were seated before the rooms ran out.
    """

    code = "capacity_exceeded"
    status_code = 422

    def __init__(
        self,
        message: str = "Not enough room capacity for all students",
        *,
        required: Optional[int] = None,
        available: Optional[int] = None,
        allocated: Optional[int] = None,
        remaining: Optional[int] = None,
        allocator: Optional[str] = None,
        details: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            allocator=allocator,
            phase="allocation",
            details=details,
            context=context,
        )
        self.required = required
        self.available = available
        self.allocated = allocated
        self.remaining = remaining
        if required is not None and available is not None:
            self.context.setdefault("shortfall", max(0, required - available))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["error"].update(
            {
                "required": self.required,
                "available": self.available,
                "allocated": self.allocated,
                "remaining": self.remaining,
            }
        )
        return data


class ConstraintUnsatisfiableError(AllocationError):
    """No eligible candidate exists for a single slot/room.

    Allocators report this condition as a warning rather than raising it; the
    serialized form of each instance is returned in the run summary.
    """

    code = "constraint_unsatisfiable"
    status_code = 422


class PersistenceConflictError(AppError):
    """Raised when writing assignments would break a uniqueness invariant.

    The allocators never produce duplicates themselves, so this points at a
    concurrent external mutation of the same scope.
    """

    code = "persistence_conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "Assignments conflict with existing records",
        *,
        scope: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if scope:
            self.context.setdefault("scope", scope)


class AllocationRequestError(AppError):
    """Raised when an allocator is invoked with an unusable parameter set."""

    code = "invalid_allocation_request"
    status_code = 422

    def __init__(
        self,
        message: str = "Invalid allocation request",
        *,
        validation_errors: Optional[List[Dict[str, Any]]] = None,
        details: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, context=context)
        self.validation_errors = validation_errors or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["error"].update({"validation_errors": self.validation_errors})
        return data


__all__ = [
    "AppError",
    "AllocationError",
    "InputMissingError",
    "RecordNotFoundError",
    "CapacityExceededError",
    "ConstraintUnsatisfiableError",
    "PersistenceConflictError",
    "AllocationRequestError",
]
