# exam_logistics/tests/unit/test_allocation_services.py

"""
Unit tests for the allocation services with the roster and store faked.
"""

import asyncio
import random
from datetime import date
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from ...core.exceptions import AllocationRequestError, PersistenceConflictError
from ...engine import Designation
from ...services.allocation import DutyAllocationService, SplitRoomAllocationService
from ..conftest import make_professor, make_room, make_slot

pytestmark = pytest.mark.asyncio


def duty_service() -> DutyAllocationService:
    service = DutyAllocationService(MagicMock(), random.Random(11))
    service.roster = MagicMock()
    service.roster.load_professors = AsyncMock(
        return_value=[
            make_professor("A", Designation.ASSISTANT_PROFESSOR),
            make_professor("B", Designation.ASSOCIATE_PROFESSOR),
        ]
    )
    service.roster.load_active_rooms = AsyncMock(return_value=[make_room("101", 30)])
    service.roster.load_active_slots = AsyncMock(
        return_value=[make_slot(date(2024, 12, 2)), make_slot(date(2024, 12, 3))]
    )
    service.store = MagicMock()
    service.store.replace_duties = AsyncMock(return_value=0)
    return service


class TestDutyAllocationService:
    async def test_persists_what_the_allocator_produced(self):
        service = duty_service()

        result = await service.allocate()

        assignments, counts = service.store.replace_duties.await_args.args
        assert assignments == result.assignments
        assert sum(counts.values()) == 2
        assert result.summary["run_id"] == str(service.current_run_id)

    async def test_runs_are_serialized(self):
        events = []

        async def slow_replace(assignments, counts):
            events.append("start")
            await asyncio.sleep(0.01)
            events.append("end")
            return 0

        first, second = duty_service(), duty_service()
        first.store.replace_duties = AsyncMock(side_effect=slow_replace)
        second.store.replace_duties = AsyncMock(side_effect=slow_replace)

        await asyncio.gather(first.allocate(), second.allocate())

        assert events == ["start", "end", "start", "end"]

    async def test_persistence_failure_propagates(self):
        service = duty_service()
        service.store.replace_duties = AsyncMock(
            side_effect=PersistenceConflictError(scope="duties")
        )

        with pytest.raises(PersistenceConflictError):
            await service.allocate()

        assert service._get_current_context()["action_stack_depth"] == 0


class TestSplitRoomAllocationService:
    async def test_rejects_request_before_loading(self):
        service = SplitRoomAllocationService(MagicMock(), random.Random(1))
        service.roster = MagicMock()
        service.roster.get_schedule = AsyncMock()

        with pytest.raises(AllocationRequestError):
            await service.allocate(uuid4(), date(2024, 12, 2), "09:30")

        service.roster.get_schedule.assert_not_awaited()
