# exam_logistics/engine/split_room_allocator.py

"""
Split-room seat allocation for up to two cohorts sharing one exam slot.

Rooms are taken in random order. While both cohorts still have students a
room is halved between them (the odd seat goes to the second cohort); once
one cohort is empty the other gets whole rooms. Running out of rooms is not
fatal: the leftover students are reported back as a warning.
"""

import logging
import random
from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple
from uuid import UUID

from ..core.exceptions import AllocationRequestError, InputMissingError
from .entities import (
    AllocationResult,
    RoomRecord,
    RoomSplit,
    SeatAssignment,
    StudentRecord,
)
from .fairness import make_rng, shuffled

logger = logging.getLogger(__name__)


def split_capacity(capacity: int, size1: int, size2: int) -> Tuple[int, int]:
    """Seats a room gives each cohort given how many students each has left."""
    if size1 > 0 and size2 > 0:
        cap1 = capacity // 2
        return min(cap1, size1), min(capacity - cap1, size2)
    if size1 > 0:
        return min(capacity, size1), 0
    if size2 > 0:
        return 0, min(capacity, size2)
    return 0, 0


def validate_subjects(
    subject1_id: Optional[UUID], subject2_id: Optional[UUID]
) -> None:
    if subject1_id is None and subject2_id is None:
        raise AllocationRequestError(
            "At least one subject is required for a split-room allocation",
            validation_errors=[
                {"field": "subject1_id", "error": "missing"},
                {"field": "subject2_id", "error": "missing"},
            ],
        )
    if subject1_id is not None and subject1_id == subject2_id:
        raise AllocationRequestError(
            "The two cohorts must come from different subjects",
            validation_errors=[{"field": "subject2_id", "error": "duplicate"}],
        )


class SplitRoomAllocator:
    name = "split_room"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or make_rng()

    def allocate(
        self,
        rooms: Sequence[RoomRecord],
        schedule_id: UUID,
        cohort1: Sequence[StudentRecord] = (),
        cohort2: Sequence[StudentRecord] = (),
        subject1_id: Optional[UUID] = None,
        subject2_id: Optional[UUID] = None,
    ) -> AllocationResult:
        validate_subjects(subject1_id, subject2_id)

        active_rooms = [r for r in rooms if r.is_active]
        if not active_rooms:
            raise InputMissingError(
                "No active rooms available for allocation",
                entity_type="rooms",
                allocator=self.name,
            )

        queue1: Deque[StudentRecord] = deque(
            sorted(cohort1, key=lambda s: s.usn) if subject1_id is not None else []
        )
        queue2: Deque[StudentRecord] = deque(
            sorted(cohort2, key=lambda s: s.usn) if subject2_id is not None else []
        )
        size1, size2 = len(queue1), len(queue2)

        seats: List[SeatAssignment] = []
        splits: List[RoomSplit] = []
        warnings: List[str] = []

        for room in shuffled(active_rooms, self.rng):
            if not queue1 and not queue2:
                break

            take1, take2 = split_capacity(room.capacity, len(queue1), len(queue2))
            seat_number = 0
            for queue, take, subject_id in (
                (queue1, take1, subject1_id),
                (queue2, take2, subject2_id),
            ):
                for _ in range(take):
                    seat_number += 1
                    seats.append(
                        SeatAssignment(
                            student_id=queue.popleft().id,
                            room_id=room.id,
                            schedule_id=schedule_id,
                            subject_id=subject_id,
                            seat_number=seat_number,
                        )
                    )

            if take1 or take2:
                splits.append(
                    RoomSplit(
                        room_id=room.id,
                        room_number=room.number,
                        capacity=room.capacity,
                        cohort1_count=take1,
                        cohort2_count=take2,
                    )
                )
                logger.debug(
                    f"Room {room.number} (capacity {room.capacity}): "
                    f"{take1} from cohort 1, {take2} from cohort 2"
                )

        unallocated = {"cohort1": len(queue1), "cohort2": len(queue2)}
        if queue1 or queue2:
            message = (
                f"Rooms exhausted before all students were seated: "
                f"{len(queue1)} from the first subject and {len(queue2)} from the "
                f"second subject remain unallocated"
            )
            logger.warning(message)
            warnings.append(message)

        if size1 == 0 and size2 == 0:
            warnings.append("No students found for the selected subjects")

        logger.info(
            f"Split-room allocation seated {len(seats)} students in {len(splits)} rooms"
        )

        return AllocationResult(
            success=True,
            summary={
                "total_allocations": len(seats),
                "rooms_used": len(splits),
                "total_rooms": len(active_rooms),
                "cohort1_students": size1,
                "cohort2_students": size2,
                "cohort1_allocated": size1 - len(queue1),
                "cohort2_allocated": size2 - len(queue2),
                "unallocated": unallocated,
            },
            warnings=warnings,
            assignments=seats,
            room_splits=splits,
        )
