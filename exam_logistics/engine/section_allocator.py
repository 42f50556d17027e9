# exam_logistics/engine/section_allocator.py

"""
Section-wise seat allocation.

Students of one (semester, branch) population are seated section by section.
A single room cursor runs across all sections: a section that fits in what
is left of the current room goes there whole, otherwise it spills over into
the following rooms one student at a time.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence
from uuid import UUID

from ..core.exceptions import CapacityExceededError, InputMissingError
from .entities import AllocationResult, RoomRecord, SeatAssignment, StudentRecord

logger = logging.getLogger(__name__)


@dataclass
class RoomCursor:
    """Position of the next free seat across the ordered room sequence."""

    rooms: Sequence[RoomRecord]
    index: int = 0
    seat: int = 1

    @property
    def room(self) -> RoomRecord:
        return self.rooms[self.index]

    @property
    def exhausted(self) -> bool:
        return self.seat > self.room.capacity

    def fits(self, count: int) -> bool:
        return self.seat + count - 1 <= self.room.capacity

    def advance(self) -> bool:
        """Move to the next room; False when there is none left."""
        if self.index + 1 >= len(self.rooms):
            return False
        self.index += 1
        self.seat = 1
        return True

    def take(self) -> int:
        seat = self.seat
        self.seat += 1
        return seat


class SectionAllocator:
    """
    Seats students into rooms in the order the rooms are given.

    The caller supplies rooms already ordered (capacity descending, shuffled
    within equal capacities); this class never reorders them.
    """

    name = "section"

    def allocate(
        self,
        students: Sequence[StudentRecord],
        rooms: Sequence[RoomRecord],
        schedule_id: UUID,
        subject_id: UUID,
    ) -> AllocationResult:
        active_rooms = [r for r in rooms if r.is_active]
        if not active_rooms:
            raise InputMissingError(
                "No active rooms available for allocation",
                entity_type="rooms",
                allocator=self.name,
            )
        if not students:
            raise InputMissingError(
                "No students found for the specified subject",
                entity_type="students",
                allocator=self.name,
            )

        total_capacity = sum(r.capacity for r in active_rooms)
        if len(students) > total_capacity:
            raise CapacityExceededError(
                f"Not enough room capacity for all students. Need {len(students)} "
                f"seats, have {total_capacity}.",
                required=len(students),
                available=total_capacity,
                allocator=self.name,
            )

        sections: Dict[str, List[StudentRecord]] = defaultdict(list)
        for student in students:
            sections[student.section].append(student)

        logger.info(
            f"Found {len(sections)} sections with {len(students)} total students "
            f"for {len(active_rooms)} rooms"
        )

        cursor = RoomCursor(active_rooms)
        seats: List[SeatAssignment] = []

        def seat(student: StudentRecord) -> None:
            seats.append(
                SeatAssignment(
                    student_id=student.id,
                    room_id=cursor.room.id,
                    schedule_id=schedule_id,
                    subject_id=subject_id,
                    seat_number=cursor.take(),
                )
            )

        for section in sorted(sections):
            members = sorted(sections[section], key=lambda s: s.usn)

            if cursor.fits(len(members)):
                logger.debug(
                    f"Section {section} ({len(members)} students) fits in room "
                    f"{cursor.room.number} from seat {cursor.seat}"
                )
                for student in members:
                    seat(student)
                continue

            for student in members:
                if cursor.exhausted:
                    if not cursor.advance():
                        raise CapacityExceededError(
                            "Not enough room capacity for all students",
                            allocated=len(seats),
                            remaining=len(students) - len(seats),
                            allocator=self.name,
                        )
                    logger.debug(
                        f"Section {section} split into room {cursor.room.number}"
                    )
                seat(student)

        rooms_used = len({s.room_id for s in seats})
        logger.info(
            f"Created {len(seats)} student allocations across {rooms_used} rooms"
        )

        return AllocationResult(
            success=True,
            summary={
                "total_allocations": len(seats),
                "sections": len(sections),
                "rooms_used": rooms_used,
                "total_rooms": len(active_rooms),
                "students": len(students),
            },
            assignments=seats,
        )
