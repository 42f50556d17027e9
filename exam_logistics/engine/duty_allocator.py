# exam_logistics/engine/duty_allocator.py

"""
Invigilation duty allocation.

One professor is placed per (room, exam slot) pair under three rules:
- a per-designation cap on duties across the whole run,
- at most one duty per professor per date, whatever the shift,
- least-loaded selection with a uniform random tie-break.

Slots and rooms are both visited in randomized order so early-scheduled slots
and low-numbered rooms do not systematically get first pick.
"""

import logging
import random
from collections import defaultdict
from datetime import date
from typing import Any, DefaultDict, Dict, List, Optional, Sequence, Set
from uuid import UUID

from ..core.exceptions import ConstraintUnsatisfiableError, InputMissingError
from .entities import (
    AllocationResult,
    DutyAssignment,
    ExamSlotRecord,
    ProfessorRecord,
    RoomRecord,
)
from .fairness import make_rng, pick_least_loaded, shuffled

logger = logging.getLogger(__name__)


class DutyAllocator:
    """Greedy minimum-load duty allocator."""

    name = "duty"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or make_rng()

    def allocate(
        self,
        professors: Sequence[ProfessorRecord],
        rooms: Sequence[RoomRecord],
        slots: Sequence[ExamSlotRecord],
    ) -> AllocationResult:
        active_rooms = [r for r in rooms if r.is_active]
        active_slots = [s for s in slots if s.is_active]
        self._check_inputs(professors, active_rooms, active_slots)

        warnings: List[str] = []

        required = len(active_rooms) * len(active_slots)
        available = sum(p.max_duties for p in professors)
        logger.info(
            f"Duty allocation: {len(professors)} professors, {len(active_rooms)} rooms, "
            f"{len(active_slots)} slots (required={required}, capacity={available})"
        )
        if available < required:
            message = (
                f"Not enough capacity with current professors. Need {required} duties "
                f"but only have capacity for {available}."
            )
            logger.warning(message)
            warnings.append(message)

        # Counters always start from zero; stored counts only seed the ordering
        duty_counts: Dict[UUID, int] = {p.id: 0 for p in professors}
        assigned_on: DefaultDict[date, Set[UUID]] = defaultdict(set)
        assignments: List[DutyAssignment] = []
        unstaffed: List[Dict[str, Any]] = []

        for slot in shuffled(active_slots, self.rng):
            used_today = assigned_on[slot.date]

            for room in shuffled(active_rooms, self.rng):
                eligible = [
                    p
                    for p in professors
                    if p.id not in used_today and duty_counts[p.id] < p.max_duties
                ]

                if not eligible:
                    message = (
                        f"No eligible professor for room {room.number} on "
                        f"{slot.date.isoformat()} shift {slot.shift.value}"
                    )
                    logger.warning(message)
                    warnings.append(message)
                    unstaffed.append(
                        ConstraintUnsatisfiableError(
                            message,
                            allocator=self.name,
                            phase="allocation",
                            context={
                                "room_id": str(room.id),
                                "date": slot.date.isoformat(),
                                "shift": slot.shift.value,
                            },
                        ).to_dict()["error"]
                    )
                    continue

                chosen = pick_least_loaded(
                    eligible, lambda p: duty_counts[p.id], self.rng
                )
                assignments.append(
                    DutyAssignment(
                        professor_id=chosen.id,
                        room_id=room.id,
                        date=slot.date,
                        shift=slot.shift,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                    )
                )
                duty_counts[chosen.id] += 1
                used_today.add(chosen.id)
                logger.debug(
                    f"Assigned {chosen.name} ({chosen.designation_label}) to room "
                    f"{room.number} on {slot.label}: duty "
                    f"{duty_counts[chosen.id]}/{chosen.max_duties}"
                )

        limits_respected = all(duty_counts[p.id] <= p.max_duties for p in professors)

        logger.info(
            f"Created {len(assignments)} duty allocations, "
            f"{len(unstaffed)} left unstaffed"
        )

        return AllocationResult(
            success=True,
            summary={
                "total_allocations": len(assignments),
                "required_duties": required,
                "duty_capacity": available,
                "unassigned": len(unstaffed),
                "unstaffed": unstaffed,
                "professors": len(professors),
                "professors_used": sum(1 for c in duty_counts.values() if c > 0),
                "rooms": len(active_rooms),
                "slots": len(active_slots),
                "limits_respected": limits_respected,
                "duty_counts": {str(pid): c for pid, c in duty_counts.items()},
            },
            warnings=warnings,
            assignments=assignments,
        )

    def _check_inputs(
        self,
        professors: Sequence[ProfessorRecord],
        rooms: Sequence[RoomRecord],
        slots: Sequence[ExamSlotRecord],
    ) -> None:
        if not professors:
            raise InputMissingError(
                "No professors available for allocation",
                entity_type="professors",
                allocator=self.name,
            )
        if not rooms:
            raise InputMissingError(
                "No active rooms available for allocation",
                entity_type="rooms",
                allocator=self.name,
            )
        if not slots:
            raise InputMissingError(
                "No exam schedules found for allocation",
                entity_type="schedules",
                allocator=self.name,
            )
