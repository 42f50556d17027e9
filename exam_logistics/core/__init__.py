# exam_logistics/core/__init__.py

from ..config import get_settings
from .exceptions import (
    AppError,
    AllocationError,
    InputMissingError,
    RecordNotFoundError,
    CapacityExceededError,
    ConstraintUnsatisfiableError,
    PersistenceConflictError,
    AllocationRequestError,
)


__all__ = [
    "get_settings",  # Export the function, not a settings instance
    "AppError",
    "AllocationError",
    "InputMissingError",
    "RecordNotFoundError",
    "CapacityExceededError",
    "ConstraintUnsatisfiableError",
    "PersistenceConflictError",
    "AllocationRequestError",
]
