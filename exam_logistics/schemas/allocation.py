# exam_logistics/schemas/allocation.py
from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from uuid import UUID
from datetime import date as date_type

MODEL_CONFIG = ConfigDict(from_attributes=True)


class RoomSplitRead(BaseModel):
    model_config = MODEL_CONFIG

    room_id: UUID
    room_number: str
    capacity: int
    cohort1_count: int
    cohort2_count: int


class AllocationResultRead(BaseModel):
    success: bool
    summary: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)
    room_splits: List[RoomSplitRead] = Field(default_factory=list)


class SectionAllocationRequest(BaseModel):
    schedule_id: UUID
    subject_id: UUID


class SplitRoomAllocationRequest(BaseModel):
    schedule_id: UUID
    exam_date: date_type
    exam_time: str = Field(..., min_length=1)
    subject1_id: Optional[UUID] = None
    subject2_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_subjects(self) -> "SplitRoomAllocationRequest":
        if self.subject1_id is None and self.subject2_id is None:
            raise ValueError("At least one of subject1_id or subject2_id is required")
        if self.subject1_id is not None and self.subject1_id == self.subject2_id:
            raise ValueError("subject1_id and subject2_id must differ")
        return self


class DutyResetRead(BaseModel):
    success: bool = True
    deleted: int


class ProfessorDutyRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    professor_id: UUID
    professor_name: str
    designation: str
    room_id: UUID
    room_number: str
    date: date_type
    shift: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class SeatAllocationRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    student_id: UUID
    usn: str
    student_name: str
    section: str
    room_id: UUID
    room_number: str
    schedule_id: UUID
    subject_id: UUID
    seat_number: int
    attendance: bool = False


class RoomAllocationRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    room_id: UUID
    room_number: str
    capacity: int
    schedule_id: UUID
    exam_date: date_type
    exam_time: str
    exam_allocations: List[Dict[str, Any]] = Field(default_factory=list)
    total_allocated_students: int
    status: str
