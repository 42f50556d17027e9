# exam_logistics/models/infrastructure.py

import uuid
from typing import List, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .scheduling import ProfessorDuty, SeatAllocation, RoomAllocation


class Room(Base, TimestampMixin):
    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    number: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    building: Mapped[str | None] = mapped_column(String)
    floor: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    professor_duties: Mapped[List["ProfessorDuty"]] = relationship(
        back_populates="room"
    )
    seat_allocations: Mapped[List["SeatAllocation"]] = relationship(
        back_populates="room"
    )
    room_allocations: Mapped[List["RoomAllocation"]] = relationship(
        back_populates="room"
    )
