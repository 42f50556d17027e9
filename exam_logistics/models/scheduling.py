# exam_logistics/models/scheduling.py

import uuid
from datetime import date as dt_date
from typing import List, TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..engine.entities import Shift
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .academic import Student, Subject
    from .infrastructure import Room


def _shift_column() -> SAEnum:
    # Stored as the display value ("Morning"), not the member name
    return SAEnum(
        Shift,
        name="shift_enum",
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class Professor(Base, TimestampMixin):
    __tablename__ = "professors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    # Free text so legacy titles survive import; the engine falls back to the default cap
    designation: Mapped[str] = mapped_column(String, nullable=False)
    department: Mapped[str | None] = mapped_column(String)
    duty_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    duties: Mapped[List["ProfessorDuty"]] = relationship(
        back_populates="professor", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_professors_designation_name", "designation", "name"),)


class ExamSchedule(Base, TimestampMixin):
    __tablename__ = "exam_schedules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    shift: Mapped[Shift] = mapped_column(_shift_column(), nullable=False)
    start_time: Mapped[str] = mapped_column(String, nullable=False)
    end_time: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    seat_allocations: Mapped[List["SeatAllocation"]] = relationship(
        back_populates="schedule"
    )
    room_allocations: Mapped[List["RoomAllocation"]] = relationship(
        back_populates="schedule"
    )

    __table_args__ = (
        UniqueConstraint("date", "shift", name="uq_exam_schedule_date_shift"),
    )


class ProfessorDuty(Base, TimestampMixin):
    __tablename__ = "professor_duties"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    professor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("professors.id", ondelete="CASCADE"), nullable=False
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    shift: Mapped[Shift] = mapped_column(_shift_column(), nullable=False)
    start_time: Mapped[str | None] = mapped_column(String)
    end_time: Mapped[str | None] = mapped_column(String)

    professor: Mapped["Professor"] = relationship(back_populates="duties")
    room: Mapped["Room"] = relationship(back_populates="professor_duties")

    __table_args__ = (
        UniqueConstraint(
            "professor_id", "date", "shift", name="uq_professor_duty_professor_slot"
        ),
        UniqueConstraint("room_id", "date", "shift", name="uq_professor_duty_room_slot"),
    )


class SeatAllocation(Base, TimestampMixin):
    __tablename__ = "seat_allocations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exam_schedules.id", ondelete="CASCADE"), nullable=False
    )
    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False
    )
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    attendance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    student: Mapped["Student"] = relationship(back_populates="seat_allocations")
    room: Mapped["Room"] = relationship(back_populates="seat_allocations")
    schedule: Mapped["ExamSchedule"] = relationship(back_populates="seat_allocations")
    subject: Mapped["Subject"] = relationship(back_populates="seat_allocations")

    __table_args__ = (
        UniqueConstraint(
            "student_id", "schedule_id", "subject_id", name="uq_seat_student_exam"
        ),
        UniqueConstraint(
            "room_id", "seat_number", "schedule_id", name="uq_seat_room_seat_schedule"
        ),
    )


class RoomAllocation(Base, TimestampMixin):
    """Per-room record of how a split-room run divided the seats."""

    __tablename__ = "room_allocations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exam_schedules.id", ondelete="CASCADE"), nullable=False
    )
    exam_date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    exam_time: Mapped[str] = mapped_column(String, nullable=False)
    # [{"subject_id", "semester", "student_count"}]
    exam_allocations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_allocated_students: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    room: Mapped["Room"] = relationship(back_populates="room_allocations")
    schedule: Mapped["ExamSchedule"] = relationship(back_populates="room_allocations")

    __table_args__ = (
        Index("idx_room_allocations_room_date_time", "room_id", "exam_date", "exam_time"),
        Index("idx_room_allocations_status", "status"),
    )
