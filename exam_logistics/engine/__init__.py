# exam_logistics/engine/__init__.py

"""
Allocation engine.

Pure, database-free allocators that turn a roster and a set of
capacity-bounded slots into duty or seat assignments.
"""

from .entities import (
    Designation,
    Shift,
    MAX_DUTIES,
    DEFAULT_MAX_DUTIES,
    max_duties_for,
    ProfessorRecord,
    RoomRecord,
    ExamSlotRecord,
    StudentRecord,
    SubjectRecord,
    DutyAssignment,
    SeatAssignment,
    RoomSplit,
    AllocationResult,
)
from .fairness import make_rng, shuffled, order_rooms_by_capacity, pick_least_loaded
from .duty_allocator import DutyAllocator
from .section_allocator import SectionAllocator, RoomCursor
from .split_room_allocator import SplitRoomAllocator, split_capacity, validate_subjects

__all__ = [
    "Designation",
    "Shift",
    "MAX_DUTIES",
    "DEFAULT_MAX_DUTIES",
    "max_duties_for",
    "ProfessorRecord",
    "RoomRecord",
    "ExamSlotRecord",
    "StudentRecord",
    "SubjectRecord",
    "DutyAssignment",
    "SeatAssignment",
    "RoomSplit",
    "AllocationResult",
    "make_rng",
    "shuffled",
    "order_rooms_by_capacity",
    "pick_least_loaded",
    "DutyAllocator",
    "SectionAllocator",
    "RoomCursor",
    "SplitRoomAllocator",
    "split_capacity",
    "validate_subjects",
]
