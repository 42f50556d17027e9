# exam_logistics/services/allocation/split_room_allocation_service.py

from __future__ import annotations

import logging
import random
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...engine import (
    AllocationResult,
    SplitRoomAllocator,
    StudentRecord,
    SubjectRecord,
    make_rng,
    validate_subjects,
)
from ...models import RoomAllocation
from ..data_retrieval import RosterLoader
from ..tracking_mixin import TrackingMixin
from .assignment_store import AssignmentStore

logger = logging.getLogger(__name__)


class SplitRoomAllocationService(TrackingMixin):
    """
    Seats up to two subjects' cohorts into shared rooms for a single exam slot
    and records how each room was divided.
    """

    def __init__(self, session: AsyncSession, rng: Optional[random.Random] = None):
        super().__init__(session)
        self.session = session
        self.rng = rng or make_rng(get_settings().ALLOCATION_RANDOM_SEED)
        self.roster = RosterLoader(session)
        self.store = AssignmentStore(session)

    async def allocate(
        self,
        schedule_id: UUID,
        exam_date: date,
        exam_time: str,
        subject1_id: Optional[UUID] = None,
        subject2_id: Optional[UUID] = None,
    ) -> AllocationResult:
        validate_subjects(subject1_id, subject2_id)

        run_id = self._start_run("split_room")
        run_action = self._start_action(
            action_type="split_room_allocation",
            description=f"Splitting rooms for schedule {schedule_id}",
            metadata={
                "schedule_id": str(schedule_id),
                "subject1_id": str(subject1_id) if subject1_id else None,
                "subject2_id": str(subject2_id) if subject2_id else None,
            },
        )

        try:
            load_action = self._start_action(
                "roster_loading", "Loading schedule, subjects, cohorts and rooms"
            )
            schedule = await self.roster.get_schedule(schedule_id)
            subject1 = await self._subject(subject1_id)
            subject2 = await self._subject(subject2_id)
            cohort1 = await self._cohort(subject1)
            cohort2 = await self._cohort(subject2)
            rooms = await self.roster.load_active_rooms(self.rng)
            self._end_action(
                load_action,
                "completed",
                {
                    "cohort1": len(cohort1),
                    "cohort2": len(cohort2),
                    "rooms": len(rooms),
                },
            )

            result = SplitRoomAllocator(self.rng).allocate(
                rooms,
                schedule.id,
                cohort1,
                cohort2,
                subject1_id=subject1.id if subject1 else None,
                subject2_id=subject2.id if subject2 else None,
            )

            persist_action = self._start_action(
                "persistence", "Replacing seats and room split summaries"
            )
            summaries = [
                RoomAllocation(
                    room_id=split.room_id,
                    schedule_id=schedule.id,
                    exam_date=exam_date,
                    exam_time=exam_time,
                    exam_allocations=self._exam_allocations(
                        (subject1, split.cohort1_count),
                        (subject2, split.cohort2_count),
                    ),
                    total_allocated_students=split.total,
                    status="allocated",
                )
                for split in result.room_splits
            ]
            deleted = await self.store.replace_split_seats(
                schedule.id,
                [s.id for s in (subject1, subject2) if s is not None],
                [split.room_id for split in result.room_splits],
                result.assignments,
                summaries,
            )
            self._end_action(
                persist_action,
                "completed",
                {"deleted": deleted, "inserted": len(result.assignments)},
            )

            result.summary["run_id"] = str(run_id)
            self._end_action(run_action, "completed", result.summary)
            await self._log_operation(
                "split_room_allocation_completed",
                {
                    "total_allocations": result.summary["total_allocations"],
                    "rooms_used": result.summary["rooms_used"],
                    "unallocated": result.summary["unallocated"],
                },
                level="WARNING" if result.warnings else "INFO",
            )
            return result

        except Exception as e:
            self._end_action(run_action, "failed", {"error": str(e)})
            await self._log_operation(
                "split_room_allocation_failed", level="ERROR", error=str(e)
            )
            raise

    async def _subject(self, subject_id: Optional[UUID]) -> Optional[SubjectRecord]:
        if subject_id is None:
            return None
        return await self.roster.get_subject(subject_id)

    async def _cohort(self, subject: Optional[SubjectRecord]) -> List[StudentRecord]:
        # Cohorts are the whole semester, across branches
        if subject is None:
            return []
        return await self.roster.load_students(subject.semester)

    @staticmethod
    def _exam_allocations(*shares) -> List[Dict]:
        return [
            {
                "subject_id": str(subject.id),
                "semester": subject.semester,
                "student_count": count,
            }
            for subject, count in shares
            if subject is not None and count
        ]
