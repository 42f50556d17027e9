# exam_logistics/services/allocation/assignment_store.py

"""
Writes allocation results back to the database.

Each ``replace_*`` call deletes the previous assignments of one scope and
inserts the new ones in the same transaction as the reads that produced them.
A uniqueness violation rolls the whole scope back to its prior state.
"""

import logging
from typing import Dict, Iterable, List, Sequence
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import PersistenceConflictError
from ...engine import DutyAssignment, SeatAssignment
from ...models import Professor, ProfessorDuty, RoomAllocation, SeatAllocation

logger = logging.getLogger(__name__)


class AssignmentStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace_duties(
        self, assignments: Sequence[DutyAssignment], duty_counts: Dict[UUID, int]
    ) -> int:
        """Swap every duty for ``assignments`` and rewrite all professor counters.

        Returns the number of duties removed.
        """
        try:
            deleted = await self.session.execute(delete(ProfessorDuty))
            await self.session.execute(update(Professor).values(duty_count=0))

            self.session.add_all(
                ProfessorDuty(
                    professor_id=a.professor_id,
                    room_id=a.room_id,
                    date=a.date,
                    shift=a.shift,
                    start_time=a.start_time,
                    end_time=a.end_time,
                )
                for a in assignments
            )
            for professor_id, count in duty_counts.items():
                if count:
                    await self.session.execute(
                        update(Professor)
                        .where(Professor.id == professor_id)
                        .values(duty_count=count)
                    )

            await self._commit("duties")
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Replaced {deleted.rowcount} duties with {len(assignments)} new duties"
        )
        return deleted.rowcount

    async def replace_section_seats(
        self,
        schedule_id: UUID,
        subject_id: UUID,
        student_ids: Iterable[UUID],
        seats: Sequence[SeatAssignment],
    ) -> int:
        ids = list(student_ids)
        try:
            deleted = await self.session.execute(
                delete(SeatAllocation).where(
                    SeatAllocation.schedule_id == schedule_id,
                    SeatAllocation.subject_id == subject_id,
                    SeatAllocation.student_id.in_(ids),
                )
            )
            self.session.add_all(self._seat_rows(seats))
            await self._commit("section_seats")
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Replaced {deleted.rowcount} seats with {len(seats)} for schedule "
            f"{schedule_id}, subject {subject_id}"
        )
        return deleted.rowcount

    async def replace_split_seats(
        self,
        schedule_id: UUID,
        subject_ids: Iterable[UUID],
        room_ids: Iterable[UUID],
        seats: Sequence[SeatAssignment],
        room_allocations: Sequence[RoomAllocation],
    ) -> int:
        subjects = list(subject_ids)
        rooms = list(room_ids)
        try:
            # Seats of these subjects, and anything else already sitting in
            # the rooms this run is about to fill
            deleted = await self.session.execute(
                delete(SeatAllocation).where(
                    SeatAllocation.schedule_id == schedule_id,
                    or_(
                        SeatAllocation.subject_id.in_(subjects),
                        SeatAllocation.room_id.in_(rooms),
                    ),
                )
            )
            await self._release_room_summaries(schedule_id, subjects, rooms)

            self.session.add_all(self._seat_rows(seats))
            self.session.add_all(room_allocations)
            await self._commit("split_seats")
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Replaced {deleted.rowcount} seats with {len(seats)} across "
            f"{len(room_allocations)} rooms for schedule {schedule_id}"
        )
        return deleted.rowcount

    async def reset_duties(self) -> int:
        """Remove every duty and zero every counter; returns duties removed."""
        try:
            deleted = await self.session.execute(delete(ProfessorDuty))
            await self.session.execute(update(Professor).values(duty_count=0))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Reset professor duties, removed {deleted.rowcount}")
        return deleted.rowcount

    async def _release_room_summaries(
        self, schedule_id: UUID, subjects: List[UUID], rooms: List[UUID]
    ) -> None:
        """
        Drop the summaries of rooms about to be refilled, and strip the
        re-run subjects from summaries of rooms this run leaves alone.
        """
        result = await self.session.execute(
            select(RoomAllocation).where(RoomAllocation.schedule_id == schedule_id)
        )
        rerun = {str(s) for s in subjects}
        reused = set(rooms)

        for summary in result.scalars().all():
            if summary.room_id in reused:
                await self.session.delete(summary)
                continue

            kept = [
                share
                for share in summary.exam_allocations or []
                if share.get("subject_id") not in rerun
            ]
            if len(kept) == len(summary.exam_allocations or []):
                continue
            if not kept:
                await self.session.delete(summary)
                continue
            summary.exam_allocations = kept
            summary.total_allocated_students = sum(
                share.get("student_count", 0) for share in kept
            )

        # Deletes must reach the database before the replacement rows
        await self.session.flush()

    @staticmethod
    def _seat_rows(seats: Sequence[SeatAssignment]) -> List[SeatAllocation]:
        return [
            SeatAllocation(
                student_id=s.student_id,
                room_id=s.room_id,
                schedule_id=s.schedule_id,
                subject_id=s.subject_id,
                seat_number=s.seat_number,
            )
            for s in seats
        ]

    async def _commit(self, scope: str) -> None:
        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            logger.error(f"Uniqueness violation while writing {scope}: {e.orig}")
            raise PersistenceConflictError(
                f"Writing {scope} would violate a uniqueness constraint",
                scope=scope,
                details={"constraint_error": str(e.orig)},
                cause=e,
            ) from e
