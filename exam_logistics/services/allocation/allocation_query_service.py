# exam_logistics/services/allocation/allocation_query_service.py

"""
Read-back of persisted allocations for reporting screens and exports.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...models import (
    ProfessorDuty,
    Room,
    RoomAllocation,
    SeatAllocation,
    Student,
)


class AllocationQueryService:
    """Lists duties, seats and room splits"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_professor_duties(self) -> List[Dict[str, Any]]:
        stmt = (
            select(ProfessorDuty)
            .join(ProfessorDuty.professor)
            .join(ProfessorDuty.room)
            .options(
                selectinload(ProfessorDuty.professor),
                selectinload(ProfessorDuty.room),
            )
            .order_by(ProfessorDuty.date, Room.number)
        )
        result = await self.session.execute(stmt)
        # Shift is stored as text; order it by its place in the day
        duties = sorted(
            result.scalars().all(),
            key=lambda d: (d.date, d.shift.sort_key, d.room.number),
        )

        return [
            {
                "id": duty.id,
                "professor_id": duty.professor_id,
                "professor_name": duty.professor.name,
                "designation": duty.professor.designation,
                "room_id": duty.room_id,
                "room_number": duty.room.number,
                "date": duty.date,
                "shift": duty.shift.value,
                "start_time": duty.start_time,
                "end_time": duty.end_time,
            }
            for duty in duties
        ]

    async def list_seat_allocations(
        self, schedule_id: UUID, subject_id: Optional[UUID] = None
    ) -> List[Dict[str, Any]]:
        """Seats of one exam ordered by room number, then seat number"""
        stmt = (
            select(SeatAllocation)
            .join(SeatAllocation.room)
            .join(SeatAllocation.student)
            .options(
                selectinload(SeatAllocation.room),
                selectinload(SeatAllocation.student),
            )
            .where(SeatAllocation.schedule_id == schedule_id)
        )
        if subject_id is not None:
            stmt = stmt.where(SeatAllocation.subject_id == subject_id)
        stmt = stmt.order_by(Room.number, SeatAllocation.seat_number, Student.usn)

        result = await self.session.execute(stmt)

        return [
            {
                "id": seat.id,
                "student_id": seat.student_id,
                "usn": seat.student.usn,
                "student_name": seat.student.name,
                "section": seat.student.section,
                "room_id": seat.room_id,
                "room_number": seat.room.number,
                "schedule_id": seat.schedule_id,
                "subject_id": seat.subject_id,
                "seat_number": seat.seat_number,
                "attendance": seat.attendance,
            }
            for seat in result.scalars().all()
        ]

    async def list_room_allocations(self, schedule_id: UUID) -> List[Dict[str, Any]]:
        stmt = (
            select(RoomAllocation)
            .join(RoomAllocation.room)
            .options(selectinload(RoomAllocation.room))
            .where(RoomAllocation.schedule_id == schedule_id)
            .order_by(Room.number)
        )
        result = await self.session.execute(stmt)

        return [
            {
                "id": allocation.id,
                "room_id": allocation.room_id,
                "room_number": allocation.room.number,
                "capacity": allocation.room.capacity,
                "schedule_id": allocation.schedule_id,
                "exam_date": allocation.exam_date,
                "exam_time": allocation.exam_time,
                "exam_allocations": allocation.exam_allocations,
                "total_allocated_students": allocation.total_allocated_students,
                "status": allocation.status,
            }
            for allocation in result.scalars().all()
        ]
