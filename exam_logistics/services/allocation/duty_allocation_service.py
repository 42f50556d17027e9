# exam_logistics/services/allocation/duty_allocation_service.py

from __future__ import annotations

import asyncio
import logging
import random
from collections import Counter
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...engine import AllocationResult, DutyAllocator, make_rng
from ..data_retrieval import RosterLoader
from ..tracking_mixin import TrackingMixin
from .assignment_store import AssignmentStore

logger = logging.getLogger(__name__)


class DutyAllocationService(TrackingMixin):
    """
    Regenerates every invigilation duty from scratch.

    Professor duty counters are shared across runs, so runs are serialized
    through a lock held per event loop. Runs in separate worker processes are
    not serialized against each other.
    """

    _lock_loop: Optional[asyncio.AbstractEventLoop] = None
    _lock: Optional[asyncio.Lock] = None

    def __init__(self, session: AsyncSession, rng: Optional[random.Random] = None):
        super().__init__(session)
        self.session = session
        self.rng = rng or make_rng(get_settings().ALLOCATION_RANDOM_SEED)
        self.roster = RosterLoader(session)
        self.store = AssignmentStore(session)

    @classmethod
    def _run_lock(cls) -> asyncio.Lock:
        # A lock is bound to the loop it first waited on; rebuild it for a new loop
        loop = asyncio.get_running_loop()
        if cls._lock is None or cls._lock_loop is not loop:
            cls._lock_loop = loop
            cls._lock = asyncio.Lock()
        return cls._lock

    async def allocate(self) -> AllocationResult:
        async with self._run_lock():
            return await self._allocate()

    async def reset(self) -> int:
        """Remove every duty and zero every professor's counter."""
        async with self._run_lock():
            self._start_run("duty_reset")
            deleted = await self.store.reset_duties()
            await self._log_operation("duty_reset_completed", {"deleted": deleted})
            return deleted

    async def _allocate(self) -> AllocationResult:
        run_id = self._start_run("duty")
        run_action = self._start_action(
            action_type="duty_allocation",
            description="Allocating invigilation duties for all active slots",
        )

        try:
            load_action = self._start_action(
                "roster_loading", "Loading professors, rooms and exam slots"
            )
            professors = await self.roster.load_professors()
            rooms = await self.roster.load_active_rooms(self.rng)
            slots = await self.roster.load_active_slots()
            self._end_action(
                load_action,
                "completed",
                {
                    "professors": len(professors),
                    "rooms": len(rooms),
                    "slots": len(slots),
                },
            )

            result = DutyAllocator(self.rng).allocate(professors, rooms, slots)

            persist_action = self._start_action(
                "persistence", "Replacing duties and professor counters"
            )
            duty_counts = Counter(a.professor_id for a in result.assignments)
            deleted = await self.store.replace_duties(result.assignments, duty_counts)
            self._end_action(
                persist_action,
                "completed",
                {"deleted": deleted, "inserted": len(result.assignments)},
            )

            result.summary["run_id"] = str(run_id)
            self._end_action(run_action, "completed", result.summary)
            await self._log_operation(
                "duty_allocation_completed",
                {
                    "total_allocations": result.summary["total_allocations"],
                    "unassigned": result.summary["unassigned"],
                    "warnings": len(result.warnings),
                },
                level="WARNING" if result.warnings else "INFO",
            )
            return result

        except Exception as e:
            self._end_action(run_action, "failed", {"error": str(e)})
            await self._log_operation(
                "duty_allocation_failed", level="ERROR", error=str(e)
            )
            raise
