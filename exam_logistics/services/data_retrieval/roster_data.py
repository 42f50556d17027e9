# exam_logistics/services/data_retrieval/roster_data.py

"""
Service for retrieving allocation rosters from the database.

Every method returns detached engine records, ordered the way the allocators
expect to receive them. Nothing here writes.
"""

import logging
import random
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import InputMissingError, RecordNotFoundError
from ...engine import (
    Designation,
    ExamSlotRecord,
    ProfessorRecord,
    RoomRecord,
    StudentRecord,
    SubjectRecord,
    order_rooms_by_capacity,
)
from ...models import ExamSchedule, Professor, Room, Student, Subject

logger = logging.getLogger(__name__)


def _seniority(designation: Optional[Designation]) -> int:
    return designation.seniority if designation else 0


class RosterLoader:
    """Loads professors, students, rooms and exam slots for one run"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_professors(self) -> List[ProfessorRecord]:
        """All professors, most senior first, then fewest stored duties first."""
        result = await self.session.execute(select(Professor).order_by(Professor.name))
        professors = [
            ProfessorRecord(
                id=p.id,
                name=p.name,
                designation=Designation.parse(p.designation),
                duty_count=p.duty_count or 0,
            )
            for p in result.scalars().all()
        ]
        if not professors:
            raise InputMissingError(
                "No professors available for allocation", entity_type="professors"
            )

        unknown = [p.name for p in professors if p.designation is None]
        if unknown:
            logger.warning(
                f"{len(unknown)} professors have an unrecognized designation and "
                f"get the default duty cap: {', '.join(unknown)}"
            )

        professors.sort(key=lambda p: (-_seniority(p.designation), p.duty_count))
        return professors

    async def load_active_rooms(self, rng: random.Random) -> List[RoomRecord]:
        """Active rooms, largest first; equal capacities come out shuffled."""
        result = await self.session.execute(
            select(Room).where(Room.is_active.is_(True)).order_by(Room.number)
        )
        rooms = [
            RoomRecord(id=r.id, number=r.number, capacity=r.capacity, is_active=True)
            for r in result.scalars().all()
        ]
        if not rooms:
            raise InputMissingError(
                "No active rooms available for allocation", entity_type="rooms"
            )
        return order_rooms_by_capacity(rooms, rng)

    async def load_active_slots(self) -> List[ExamSlotRecord]:
        result = await self.session.execute(
            select(ExamSchedule).where(ExamSchedule.is_active.is_(True))
        )
        slots = [self._to_slot(s) for s in result.scalars().all()]
        if not slots:
            raise InputMissingError(
                "No exam schedules found for allocation", entity_type="schedules"
            )
        slots.sort(key=lambda s: (s.date, s.shift.sort_key))
        return slots

    async def load_students(
        self, semester: int, branch: Optional[str] = None
    ) -> List[StudentRecord]:
        """
        Students of a semester, optionally narrowed to one branch, ordered by
        section then USN. An empty list is returned as-is; whether that is
        fatal depends on the allocator.
        """
        stmt = select(Student).where(Student.semester == semester)
        if branch is not None:
            stmt = stmt.where(Student.branch == branch)
        stmt = stmt.order_by(Student.section, Student.usn)

        result = await self.session.execute(stmt)
        return [
            StudentRecord(
                id=s.id,
                usn=s.usn,
                section=s.section,
                semester=s.semester,
                branch=s.branch,
            )
            for s in result.scalars().all()
        ]

    async def get_schedule(self, schedule_id: UUID) -> ExamSlotRecord:
        schedule = await self.session.get(ExamSchedule, schedule_id)
        if schedule is None:
            raise RecordNotFoundError("schedule", schedule_id)
        return self._to_slot(schedule)

    async def get_subject(self, subject_id: UUID) -> SubjectRecord:
        subject = await self.session.get(Subject, subject_id)
        if subject is None:
            raise RecordNotFoundError("subject", subject_id)
        return SubjectRecord(
            id=subject.id,
            code=subject.code,
            semester=subject.semester,
            branch=subject.branch,
        )

    @staticmethod
    def _to_slot(schedule: ExamSchedule) -> ExamSlotRecord:
        return ExamSlotRecord(
            id=schedule.id,
            date=schedule.date,
            shift=schedule.shift,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            is_active=schedule.is_active,
        )
