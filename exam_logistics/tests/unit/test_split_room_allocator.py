# exam_logistics/tests/unit/test_split_room_allocator.py

import random
from collections import defaultdict
from uuid import uuid4

import pytest

from ...core.exceptions import AllocationRequestError, InputMissingError
from ...engine import SplitRoomAllocator, split_capacity
from ..conftest import make_room, make_students


SCHEDULE_ID = uuid4()
SUBJECT1 = uuid4()
SUBJECT2 = uuid4()


@pytest.mark.parametrize(
    "capacity,size1,size2,expected",
    [
        (20, 30, 30, (10, 10)),
        (21, 30, 30, (10, 11)),
        (20, 3, 30, (3, 10)),
        (20, 10, 0, (10, 0)),
        (20, 0, 25, (0, 20)),
        (20, 0, 0, (0, 0)),
    ],
)
def test_split_capacity(capacity, size1, size2, expected):
    assert split_capacity(capacity, size1, size2) == expected


class TestSplitRoomAllocation:
    def test_single_cohort_gets_whole_room(self, rng):
        cohort1 = make_students(10, semester=3)
        room = make_room("101", 20)

        result = SplitRoomAllocator(rng).allocate(
            [room], SCHEDULE_ID, cohort1, [], subject1_id=SUBJECT1
        )

        assert len(result.assignments) == 10
        assert result.summary["cohort1_allocated"] == 10
        assert result.summary["cohort2_allocated"] == 0
        assert result.warnings == []
        assert result.room_splits[0].cohort1_count == 10
        assert result.room_splits[0].cohort2_count == 0

    def test_second_cohort_only(self, rng):
        cohort2 = make_students(4, semester=5)

        result = SplitRoomAllocator(rng).allocate(
            [make_room("101", 20)], SCHEDULE_ID, (), cohort2, subject2_id=SUBJECT2
        )

        assert {s.subject_id for s in result.assignments} == {SUBJECT2}
        assert sorted(s.seat_number for s in result.assignments) == [1, 2, 3, 4]

    @pytest.mark.parametrize("seed", range(10))
    def test_rooms_are_halved_while_both_cohorts_remain(self, seed):
        rnd = random.Random(seed)
        cohort1 = make_students(rnd.randint(10, 60), semester=3)
        cohort2 = make_students(rnd.randint(10, 60), semester=5)
        rooms = [make_room(str(i), rnd.randint(8, 31)) for i in range(6)]

        result = SplitRoomAllocator(random.Random(seed)).allocate(
            rooms, SCHEDULE_ID, cohort1, cohort2, SUBJECT1, SUBJECT2
        )

        remaining1, remaining2 = len(cohort1), len(cohort2)
        capacity = {r.id: r.capacity for r in rooms}
        for split in result.room_splits:
            cap = capacity[split.room_id]
            assert split.total <= cap
            if remaining1 >= cap // 2 and remaining2 >= cap - cap // 2:
                assert split.cohort1_count == cap // 2
                assert split.cohort2_count == cap - cap // 2
            remaining1 -= split.cohort1_count
            remaining2 -= split.cohort2_count

    def test_seats_contiguous_with_first_cohort_in_front(self, rng):
        cohort1 = make_students(3, semester=3)
        cohort2 = make_students(7, semester=5)
        rooms = [make_room("101", 9), make_room("102", 9)]

        result = SplitRoomAllocator(rng).allocate(
            rooms, SCHEDULE_ID, cohort1, cohort2, SUBJECT1, SUBJECT2
        )

        by_room = defaultdict(list)
        for seat in result.assignments:
            by_room[seat.room_id].append(seat)
        for seats in by_room.values():
            seats.sort(key=lambda s: s.seat_number)
            assert [s.seat_number for s in seats] == list(range(1, len(seats) + 1))
            subjects = [s.subject_id for s in seats]
            assert subjects == sorted(subjects, key=lambda sid: sid != SUBJECT1)
        assert len(result.assignments) == 10

    def test_cohort_queues_follow_usn_order(self, rng):
        cohort1 = make_students(4, semester=3)

        result = SplitRoomAllocator(rng).allocate(
            [make_room("101", 10)],
            SCHEDULE_ID,
            list(reversed(cohort1)),
            [],
            subject1_id=SUBJECT1,
        )

        by_seat = sorted(result.assignments, key=lambda s: s.seat_number)
        assert [s.student_id for s in by_seat] == [s.id for s in cohort1]

    def test_rooms_running_out_is_reported_not_raised(self, rng):
        cohort1 = make_students(5, semester=3)
        cohort2 = make_students(5, semester=5)

        result = SplitRoomAllocator(rng).allocate(
            [make_room("101", 4)], SCHEDULE_ID, cohort1, cohort2, SUBJECT1, SUBJECT2
        )

        assert result.success is True
        assert len(result.assignments) == 4
        assert result.summary["unallocated"] == {"cohort1": 3, "cohort2": 3}
        assert result.warnings[0].startswith("Rooms exhausted")

    def test_unused_rooms_left_alone(self, rng):
        rooms = [make_room(str(i), 30) for i in range(5)]

        result = SplitRoomAllocator(rng).allocate(
            rooms, SCHEDULE_ID, make_students(10), [], subject1_id=SUBJECT1
        )

        assert result.summary["rooms_used"] == 1
        assert len(result.room_splits) == 1

    def test_empty_cohorts_warn(self, rng):
        result = SplitRoomAllocator(rng).allocate(
            [make_room("101", 10)], SCHEDULE_ID, [], [], SUBJECT1, SUBJECT2
        )

        assert result.assignments == []
        assert "No students found for the selected subjects" in result.warnings


class TestSplitRoomRequestErrors:
    def test_requires_a_subject(self, rng):
        with pytest.raises(AllocationRequestError) as exc_info:
            SplitRoomAllocator(rng).allocate([make_room("101", 10)], SCHEDULE_ID)
        assert exc_info.value.status_code == 422

    def test_rejects_identical_subjects(self, rng):
        with pytest.raises(AllocationRequestError):
            SplitRoomAllocator(rng).allocate(
                [make_room("101", 10)],
                SCHEDULE_ID,
                make_students(2),
                make_students(2),
                SUBJECT1,
                SUBJECT1,
            )

    def test_no_active_rooms(self, rng):
        with pytest.raises(InputMissingError):
            SplitRoomAllocator(rng).allocate(
                [make_room("101", 10, is_active=False)],
                SCHEDULE_ID,
                make_students(2),
                subject1_id=SUBJECT1,
            )
