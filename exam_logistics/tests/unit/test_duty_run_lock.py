# exam_logistics/tests/unit/test_duty_run_lock.py

import asyncio
from unittest.mock import AsyncMock

from ...services.allocation import DutyAllocationService
from .test_allocation_services import duty_service


async def contended_runs():
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
    return events


def test_lock_serializes_runs_on_each_new_event_loop():
    for _ in range(2):
        assert asyncio.run(contended_runs()) == ["start", "end", "start", "end"]


def test_lock_is_rebuilt_for_a_new_loop():
    async def current_lock():
        return DutyAllocationService._run_lock()

    first = asyncio.run(current_lock())
    second = asyncio.run(current_lock())

    assert first is not second
