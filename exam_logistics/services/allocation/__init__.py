# exam_logistics/services/allocation/__init__.py
"""
Allocation Services Package.

Runs the duty, section and split-room allocators against the database and
reads their results back.
"""

from .assignment_store import AssignmentStore
from .duty_allocation_service import DutyAllocationService
from .section_allocation_service import SectionAllocationService
from .split_room_allocation_service import SplitRoomAllocationService
from .allocation_query_service import AllocationQueryService


__all__ = [
    "AssignmentStore",
    "DutyAllocationService",
    "SectionAllocationService",
    "SplitRoomAllocationService",
    "AllocationQueryService",
]
