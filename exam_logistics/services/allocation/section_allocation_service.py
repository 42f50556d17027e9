# exam_logistics/services/allocation/section_allocation_service.py

from __future__ import annotations

import logging
import random
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...engine import AllocationResult, SectionAllocator, make_rng
from ..data_retrieval import RosterLoader
from ..tracking_mixin import TrackingMixin
from .assignment_store import AssignmentStore

logger = logging.getLogger(__name__)


class SectionAllocationService(TrackingMixin):
    """Seats the students of one subject's semester and branch for one exam."""

    def __init__(self, session: AsyncSession, rng: Optional[random.Random] = None):
        super().__init__(session)
        self.session = session
        self.rng = rng or make_rng(get_settings().ALLOCATION_RANDOM_SEED)
        self.roster = RosterLoader(session)
        self.store = AssignmentStore(session)

    async def allocate(self, schedule_id: UUID, subject_id: UUID) -> AllocationResult:
        run_id = self._start_run("section")
        run_action = self._start_action(
            action_type="section_allocation",
            description=f"Seating subject {subject_id} for schedule {schedule_id}",
            metadata={"schedule_id": str(schedule_id), "subject_id": str(subject_id)},
        )

        try:
            load_action = self._start_action(
                "roster_loading", "Loading schedule, subject, rooms and students"
            )
            schedule = await self.roster.get_schedule(schedule_id)
            subject = await self.roster.get_subject(subject_id)
            rooms = await self.roster.load_active_rooms(self.rng)
            students = await self.roster.load_students(subject.semester, subject.branch)
            self._end_action(
                load_action,
                "completed",
                {"rooms": len(rooms), "students": len(students)},
            )
            logger.info(
                f"Seating {len(students)} students of semester {subject.semester} "
                f"{subject.branch} ({subject.code}) for {schedule.label}"
            )

            result = SectionAllocator().allocate(
                students, rooms, schedule.id, subject.id
            )

            persist_action = self._start_action(
                "persistence", "Replacing seat allocations for the subject"
            )
            deleted = await self.store.replace_section_seats(
                schedule.id,
                subject.id,
                [s.id for s in students],
                result.assignments,
            )
            self._end_action(
                persist_action,
                "completed",
                {"deleted": deleted, "inserted": len(result.assignments)},
            )

            result.summary["run_id"] = str(run_id)
            self._end_action(run_action, "completed", result.summary)
            await self._log_operation(
                "section_allocation_completed",
                {
                    "total_allocations": result.summary["total_allocations"],
                    "rooms_used": result.summary["rooms_used"],
                },
            )
            return result

        except Exception as e:
            self._end_action(run_action, "failed", {"error": str(e)})
            await self._log_operation(
                "section_allocation_failed", level="ERROR", error=str(e)
            )
            raise
