# exam_logistics/services/tracking_mixin.py

"""
Run and action tracking shared by the allocation services.

Every allocation run gets a run id; the phases of a run (loading, allocating,
persisting) are tracked as nested actions on a stack so log lines can be tied
back to the run and phase that produced them.
"""

import uuid
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
import logging
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


class TrackingMixin:
    """
    Mixin class that provides run and action ID generation and tracking
    for service operations.
    """

    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session
        self.current_run_id: Optional[uuid.UUID] = None
        self.current_action_id: Optional[uuid.UUID] = None
        self._action_stack: List[Dict[str, Any]] = []
        self._action_counter = 0

    def generate_action_id(self) -> uuid.UUID:
        """Generate a new unique action ID."""
        return uuid.uuid4()

    def _start_run(self, run_type: str) -> uuid.UUID:
        """Begin a new allocation run; actions started after this belong to it."""
        run_id = uuid.uuid4()
        self.current_run_id = run_id
        logger.info(f"Started {run_type} run {run_id}", extra=self._log_extra())
        return run_id

    def _start_action(
        self,
        action_type: str,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> uuid.UUID:
        """
        Start tracking a new action.

        Args:
            action_type: Type of action being performed
            description: Human-readable description
            metadata: Additional metadata for the action

        Returns:
            Generated action ID
        """
        action_id = self.generate_action_id()
        self._action_counter += 1

        self._action_stack.append(
            {
                "action_id": action_id,
                "action_type": action_type,
                "description": description,
                "metadata": metadata or {},
                "started_at": datetime.now(timezone.utc),
                "parent_action_id": self.current_action_id,
                "sequence_number": self._action_counter,
                "status": "running",
            }
        )

        previous_action_id = self.current_action_id
        self.current_action_id = action_id

        logger.debug(
            f"Started action '{action_type}' with ID {action_id} "
            f"(parent: {previous_action_id}, seq: {self._action_counter})",
            extra=self._log_extra(),
        )
        return action_id

    def _end_action(
        self, action_id: uuid.UUID, status: str = "completed", result: Any = None
    ) -> None:
        """End tracking of an action and pop it off the stack."""
        action_index = None
        for i in range(len(self._action_stack) - 1, -1, -1):
            if self._action_stack[i]["action_id"] == action_id:
                action_index = i
                break

        if action_index is None:
            logger.error(
                f"Action {action_id} not found in action stack", extra=self._log_extra()
            )
            return

        # Nested actions still open underneath (a phase that raised) end with it
        while len(self._action_stack) - 1 > action_index:
            orphan = self._action_stack.pop()
            logger.warning(
                f"Action '{orphan['action_type']}' ({orphan['action_id']}) closed "
                f"by its parent {action_id} with status {status}",
                extra=self._log_extra(),
            )

        action = self._action_stack.pop()
        end_time = datetime.now(timezone.utc)
        action.update(
            {
                "ended_at": end_time,
                "status": status,
                "result": result,
                "duration_ms": (end_time - action["started_at"]).total_seconds()
                * 1000,
            }
        )

        self.current_action_id = (
            self._action_stack[-1]["action_id"] if self._action_stack else None
        )

        logger.debug(
            f"Ended action '{action['action_type']}' with ID {action_id} - "
            f"Status: {status}, Duration: {action['duration_ms']:.1f}ms",
            extra=self._log_extra(),
        )

    def _get_current_context(self) -> Dict[str, Any]:
        """Get current tracking context."""
        return {
            "run_id": self.current_run_id,
            "action_id": self.current_action_id,
            "action_stack_depth": len(self._action_stack),
            "action_counter": self._action_counter,
            "stack_summary": [
                {
                    "id": str(action["action_id"]),
                    "type": action["action_type"],
                    "status": action.get("status", "unknown"),
                    "seq": action.get("sequence_number", 0),
                }
                for action in self._action_stack[-3:]
            ],
        }

    def _log_extra(self) -> Dict[str, Any]:
        return {"run_id": str(self.current_run_id) if self.current_run_id else "no-run-id"}

    async def _log_operation(
        self,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        level: str = "INFO",
        error: Optional[str] = None,
        **kwargs,
    ) -> None:
        """
        Log an operation with current tracking context.

        Args:
            operation: Description of the operation
            details: Additional details to log
            level: Log level
            error: Error message if applicable
            **kwargs: Additional fields attached to the log record
        """
        context = self._get_current_context()

        log_data = {
            **self._log_extra(),
            "operation": operation,
            "context": context,
            "details": details or {},
            "error": error,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **kwargs,
        }

        log_msg = f"{operation} (Run: {context['run_id']}, Action: {context['action_id']})"
        if error:
            log_msg = f"{log_msg} - Error: {error}"

        if level.upper() == "ERROR":
            logger.error(log_msg, extra=log_data)
        elif level.upper() == "WARNING":
            logger.warning(log_msg, extra=log_data)
        else:
            logger.info(log_msg, extra=log_data)
