# exam_logistics/api/v1/routes/allocations.py
"""API endpoints that run the allocators and read back their output."""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ....api.deps import db_session
from ....services.allocation import (
    AllocationQueryService,
    DutyAllocationService,
    SectionAllocationService,
    SplitRoomAllocationService,
)
from ....schemas.allocation import (
    AllocationResultRead,
    DutyResetRead,
    ProfessorDutyRead,
    RoomAllocationRead,
    SeatAllocationRead,
    SectionAllocationRequest,
    SplitRoomAllocationRequest,
)


router = APIRouter()


@router.post("/professors", response_model=AllocationResultRead)
async def allocate_professor_duties(db: AsyncSession = Depends(db_session)):
    """Regenerate invigilation duties for every active room and exam slot."""
    result = await DutyAllocationService(db).allocate()
    return result.to_dict()


@router.post("/professors/reset", response_model=DutyResetRead)
async def reset_professor_duties(db: AsyncSession = Depends(db_session)):
    """Delete all duties and zero every professor's duty count."""
    deleted = await DutyAllocationService(db).reset()
    return {"success": True, "deleted": deleted}


@router.get("/professors/duties", response_model=List[ProfessorDutyRead])
async def list_professor_duties(db: AsyncSession = Depends(db_session)):
    return await AllocationQueryService(db).list_professor_duties()


@router.post("/students", response_model=AllocationResultRead)
async def allocate_students(
    request: SectionAllocationRequest, db: AsyncSession = Depends(db_session)
):
    """Seat one subject's students section by section for one exam."""
    result = await SectionAllocationService(db).allocate(
        request.schedule_id, request.subject_id
    )
    return result.to_dict()


@router.get("/students", response_model=List[SeatAllocationRead])
async def list_student_allocations(
    schedule_id: UUID = Query(...),
    subject_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(db_session),
):
    return await AllocationQueryService(db).list_seat_allocations(
        schedule_id, subject_id
    )


@router.post("/rooms", response_model=AllocationResultRead)
async def allocate_split_rooms(
    request: SplitRoomAllocationRequest, db: AsyncSession = Depends(db_session)
):
    """Split rooms between up to two subjects sharing one exam slot."""
    result = await SplitRoomAllocationService(db).allocate(
        request.schedule_id,
        request.exam_date,
        request.exam_time,
        subject1_id=request.subject1_id,
        subject2_id=request.subject2_id,
    )
    return result.to_dict()


@router.get("/rooms", response_model=List[RoomAllocationRead])
async def list_room_allocations(
    schedule_id: UUID = Query(...), db: AsyncSession = Depends(db_session)
):
    return await AllocationQueryService(db).list_room_allocations(schedule_id)
