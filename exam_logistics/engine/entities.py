# exam_logistics/engine/entities.py

"""
In-memory records consumed and produced by the allocators.

These are detached snapshots of the persisted rows: the allocators never see
an ORM object or a session, so every run can be exercised in isolation.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID


class Designation(Enum):
    """Academic designations, declared from most to least senior."""

    PROFESSOR = "Professor"
    ASSOCIATE_PROFESSOR = "Associate Professor"
    ASSISTANT_PROFESSOR = "Assistant Professor"

    @classmethod
    def parse(cls, value: Any) -> Optional["Designation"]:
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text or member.name.lower() == text:
                return member
        return None

    @property
    def seniority(self) -> int:
        # Higher is more senior
        return len(SENIORITY_ORDER) - SENIORITY_ORDER.index(self)


SENIORITY_ORDER: List[Designation] = [
    Designation.PROFESSOR,
    Designation.ASSOCIATE_PROFESSOR,
    Designation.ASSISTANT_PROFESSOR,
]


class Shift(Enum):
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"

    @property
    def sort_key(self) -> int:
        return list(Shift).index(self)


# Maximum invigilation duties per run, keyed by designation
MAX_DUTIES: Dict[Designation, int] = {
    Designation.PROFESSOR: 1,
    Designation.ASSOCIATE_PROFESSOR: 2,
    Designation.ASSISTANT_PROFESSOR: 4,
}
DEFAULT_MAX_DUTIES = 1


def max_duties_for(designation: Any) -> int:
    """Duty cap for a designation; unrecognized designations get the default."""
    parsed = Designation.parse(designation)
    if parsed is None:
        return DEFAULT_MAX_DUTIES
    return MAX_DUTIES.get(parsed, DEFAULT_MAX_DUTIES)


@dataclass
class ProfessorRecord:
    id: UUID
    name: str
    designation: Optional[Designation]
    duty_count: int = 0

    @property
    def max_duties(self) -> int:
        return max_duties_for(self.designation)

    @property
    def designation_label(self) -> str:
        return self.designation.value if self.designation else "Unknown"


@dataclass
class RoomRecord:
    id: UUID
    number: str
    capacity: int
    is_active: bool = True


@dataclass
class ExamSlotRecord:
    id: UUID
    date: date
    shift: Shift
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_active: bool = True

    @property
    def label(self) -> str:
        return f"{self.date.isoformat()} {self.shift.value}"


@dataclass
class StudentRecord:
    id: UUID
    usn: str
    section: str
    semester: int
    branch: str


@dataclass
class SubjectRecord:
    id: UUID
    code: str
    semester: int
    branch: str


@dataclass
class DutyAssignment:
    professor_id: UUID
    room_id: UUID
    date: date
    shift: Shift
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass
class SeatAssignment:
    student_id: UUID
    room_id: UUID
    schedule_id: UUID
    subject_id: UUID
    seat_number: int


@dataclass
class RoomSplit:
    """How one room's seats were divided between the two cohorts."""

    room_id: UUID
    room_number: str
    capacity: int
    cohort1_count: int = 0
    cohort2_count: int = 0

    @property
    def total(self) -> int:
        return self.cohort1_count + self.cohort2_count


@dataclass
class AllocationResult:
    success: bool = True
    summary: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    assignments: List[Any] = field(default_factory=list)
    room_splits: List[RoomSplit] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "summary": self.summary,
            "warnings": list(self.warnings),
            "room_splits": [asdict(split) for split in self.room_splits],
        }
