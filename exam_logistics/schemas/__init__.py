# exam_logistics/schemas/__init__.py
"""Pydantic request and response models for the allocation API."""

from .allocation import (
    AllocationResultRead,
    RoomSplitRead,
    SectionAllocationRequest,
    SplitRoomAllocationRequest,
    DutyResetRead,
    ProfessorDutyRead,
    SeatAllocationRead,
    RoomAllocationRead,
)

__all__ = [
    "AllocationResultRead",
    "RoomSplitRead",
    "SectionAllocationRequest",
    "SplitRoomAllocationRequest",
    "DutyResetRead",
    "ProfessorDutyRead",
    "SeatAllocationRead",
    "RoomAllocationRead",
]
