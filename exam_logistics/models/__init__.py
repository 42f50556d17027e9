# exam_logistics/models/__init__.py

from .base import Base, TimestampMixin
from .academic import Student, Subject
from .infrastructure import Room
from .scheduling import (
    Professor,
    ExamSchedule,
    ProfessorDuty,
    SeatAllocation,
    RoomAllocation,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Student",
    "Subject",
    "Room",
    "Professor",
    "ExamSchedule",
    "ProfessorDuty",
    "SeatAllocation",
    "RoomAllocation",
]
