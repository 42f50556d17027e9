# exam_logistics/tests/unit/test_section_allocator.py

import random
from collections import defaultdict
from uuid import uuid4

import pytest

from ...core.exceptions import CapacityExceededError, InputMissingError
from ...engine import RoomCursor, SectionAllocator
from ..conftest import make_room, make_students


SCHEDULE_ID = uuid4()
SUBJECT_ID = uuid4()


def allocate(students, rooms):
    return SectionAllocator().allocate(students, rooms, SCHEDULE_ID, SUBJECT_ID)


def seats_by_room(result):
    rooms = defaultdict(list)
    for seat in result.assignments:
        rooms[seat.room_id].append(seat.seat_number)
    return rooms


class TestRoomCursor:
    def test_take_and_advance(self):
        rooms = [make_room("1", 2), make_room("2", 1)]
        cursor = RoomCursor(rooms)

        assert cursor.fits(2) and not cursor.fits(3)
        assert [cursor.take(), cursor.take()] == [1, 2]
        assert cursor.exhausted
        assert cursor.advance() is True
        assert cursor.room is rooms[1] and cursor.seat == 1
        cursor.take()
        assert cursor.advance() is False


class TestSectionAllocation:
    def test_section_spills_into_next_room(self):
        section_a = make_students(5, section="A")
        section_b = make_students(3, section="B")
        room1, room2 = make_room("101", 6), make_room("102", 6)

        result = allocate(section_a + section_b, [room1, room2])

        placed = {s.student_id: (s.room_id, s.seat_number) for s in result.assignments}
        for seat, student in enumerate(section_a, start=1):
            assert placed[student.id] == (room1.id, seat)
        # B does not fit whole, so its first student takes the last seat of room 1
        assert placed[section_b[0].id] == (room1.id, 6)
        assert placed[section_b[1].id] == (room2.id, 1)
        assert placed[section_b[2].id] == (room2.id, 2)

    def test_whole_section_kept_together_when_it_fits(self):
        section_a = make_students(4, section="A")
        section_b = make_students(4, section="B")
        room1, room2 = make_room("101", 10), make_room("102", 10)

        result = allocate(section_b + section_a, [room1, room2])

        assert {s.room_id for s in result.assignments} == {room1.id}
        numbers = {s.student_id: s.seat_number for s in result.assignments}
        assert [numbers[s.id] for s in section_a] == [1, 2, 3, 4]
        assert [numbers[s.id] for s in section_b] == [5, 6, 7, 8]
        assert result.summary["rooms_used"] == 1

    def test_students_seated_in_usn_order_within_section(self):
        students = make_students(6, section="A")
        shuffled_input = list(reversed(students))

        result = allocate(shuffled_input, [make_room("101", 10)])

        by_seat = sorted(result.assignments, key=lambda s: s.seat_number)
        assert [s.student_id for s in by_seat] == [s.id for s in students]

    @pytest.mark.parametrize("seed", range(15))
    def test_everyone_seated_once_with_contiguous_seats(self, seed):
        rnd = random.Random(seed)
        students = []
        for section in "ABCD":
            students += make_students(rnd.randint(1, 25), section=section)
        rooms = [make_room(str(i), rnd.randint(5, 30)) for i in range(8)]
        if sum(r.capacity for r in rooms) < len(students):
            rooms.append(make_room("overflow", len(students)))

        result = allocate(students, rooms)

        assert sorted(s.student_id for s in result.assignments) == sorted(
            s.id for s in students
        )
        capacity = {r.id: r.capacity for r in rooms}
        for room_id, numbers in seats_by_room(result).items():
            assert sorted(numbers) == list(range(1, len(numbers) + 1))
            assert len(numbers) <= capacity[room_id]

    def test_rooms_used_in_given_order(self):
        rooms = [make_room("big", 3), make_room("small", 3)]
        result = allocate(make_students(2), rooms)
        assert {s.room_id for s in result.assignments} == {rooms[0].id}

    def test_inactive_rooms_are_skipped(self):
        closed = make_room("closed", 50, is_active=False)
        open_room = make_room("open", 5)

        result = allocate(make_students(3), [closed, open_room])

        assert {s.room_id for s in result.assignments} == {open_room.id}
        assert result.summary["total_rooms"] == 1


class TestSectionAllocationErrors:
    def test_precheck_rejects_insufficient_capacity(self):
        students = make_students(5, section="A") + make_students(3, section="B")

        with pytest.raises(CapacityExceededError) as exc_info:
            allocate(students, [make_room("101", 6)])

        err = exc_info.value
        assert err.required == 8
        assert err.available == 6
        assert err.context["shortfall"] == 2
        assert err.status_code == 422

    def test_no_rooms(self):
        with pytest.raises(InputMissingError) as exc_info:
            allocate(make_students(2), [])
        assert exc_info.value.context["entity_type"] == "rooms"

    def test_no_students(self):
        with pytest.raises(InputMissingError) as exc_info:
            allocate([], [make_room("101", 6)])
        assert exc_info.value.message == "No students found for the specified subject"
