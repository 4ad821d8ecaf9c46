"""In-memory registry of background pipeline runs.

Design Decisions:

1. One asyncio.Task per run:
   - Every triggered pipeline run is scheduled as its own task and tracked
     here under a run id (UUID)
   - Callers get the RunProgress back as soon as the task is scheduled and
     observe completion by polling the content record or the registry

2. Explicit instance, not a singleton:
   - The registry is created in the application lifespan and injected into
     the processing service, so its lifecycle follows process start/stop
   - shutdown() waits for in-flight runs before the engine is disposed

3. Cooperative cancellation:
   - cancel_run() only sets a flag; the pipeline checks it between steps and
     records a FAILED status itself, so the record never stays half-written

4. In-memory storage:
   - Run state is lost on restart; the durable outcome lives on the content
     record, which is the source of truth for clients
   - Only the most recent max_finished_runs terminal runs are kept; older
     ones are evicted when a run finishes, so get_run() returns None for them
"""

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_MAX_FINISHED_RUNS = 1000

RunStatus = Literal["pending", "running", "completed", "failed", "cancelled"]
TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed", "cancelled"})


class RunProgress(BaseModel):
    """Progress state of one pipeline run."""

    run_id: str = Field(description="Unique run identifier (UUID)")
    run_type: str = Field(description="Input kind of the run", examples=["pdf", "link"])
    subject_id: str = Field(description="Content id the run processes")
    status: RunStatus = Field(description="Current run status")
    current_step: str | None = Field(default=None, description="Pipeline step in progress")
    message: str | None = Field(default=None, description="Failure or skip reason")
    started_at: datetime = Field(description="Scheduling time (UTC)")
    completed_at: datetime | None = Field(default=None, description="Completion time (UTC)")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class RunHandle:
    """View of a run handed to the pipeline.

    Lets the pipeline report its current step and check for cancellation
    without depending on the registry itself.
    """

    def __init__(self, registry: "RunRegistry", run_id: str) -> None:
        self._registry = registry
        self.run_id = run_id

    def set_step(self, step: str) -> None:
        self._registry.set_step(self.run_id, step)

    def is_cancelled(self) -> bool:
        return self._registry.is_cancelled(self.run_id)


RunOutcomeFn = Callable[[RunHandle], Awaitable[Any]]


class RunRegistry:
    """Schedules pipeline runs as asyncio tasks and tracks their progress.

    Usage:
        registry = RunRegistry()
        progress = registry.submit("pdf", content_id, lambda handle: pipeline.run(..., handle=handle))
        await registry.wait(progress.run_id)
    """

    def __init__(self, max_finished_runs: int = DEFAULT_MAX_FINISHED_RUNS) -> None:
        if max_finished_runs < 1:
            raise ValueError(f"max_finished_runs must be positive, got {max_finished_runs}")
        self.max_finished_runs = max_finished_runs
        self._runs: dict[str, RunProgress] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._cancelled: set[str] = set()
        self._finished: deque[str] = deque()

    def submit(self, run_type: str, subject_id: str, run_fn: RunOutcomeFn) -> RunProgress:
        """Schedule a run and return its initial progress.

        Must be called from inside a running event loop. The returned
        progress is a snapshot; use get_run() for the live state.
        """
        run_id = str(uuid4())
        progress = RunProgress(
            run_id=run_id,
            run_type=run_type,
            subject_id=subject_id,
            status="pending",
            started_at=datetime.now(UTC),
        )
        self._runs[run_id] = progress

        handle = RunHandle(self, run_id)
        task = asyncio.create_task(self._execute(run_id, run_fn, handle), name=f"run-{run_id}")
        self._tasks[run_id] = task
        task.add_done_callback(lambda _task: self._tasks.pop(run_id, None))

        logger.info(f"Scheduled run {run_id} (type={run_type}, subject={subject_id})")
        return progress.model_copy()

    async def _execute(self, run_id: str, run_fn: RunOutcomeFn, handle: RunHandle) -> Any:
        progress = self._runs[run_id]
        progress.status = "running"
        try:
            outcome = await run_fn(handle)
        except Exception as e:
            # Pipelines record their own failures; this only catches bugs in the wiring.
            logger.exception(f"Run {run_id} raised unexpectedly")
            self._finish(run_id, "failed", str(e))
            return None

        status: RunStatus = "completed"
        message: str | None = None
        if outcome is not None and getattr(outcome, "succeeded", True) is False:
            status = "cancelled" if run_id in self._cancelled else "failed"
            message = getattr(outcome, "error_message", None)
        self._finish(run_id, status, message)
        return outcome

    def _finish(self, run_id: str, status: RunStatus, message: str | None) -> None:
        progress = self._runs[run_id]
        progress.status = status
        progress.message = message
        progress.current_step = None
        progress.completed_at = datetime.now(UTC)
        self._cancelled.discard(run_id)
        self._finished.append(run_id)
        while len(self._finished) > self.max_finished_runs:
            self._runs.pop(self._finished.popleft(), None)
        logger.info(f"Run {run_id} finished with status={status}")

    def set_step(self, run_id: str, step: str) -> None:
        """Record the pipeline step a run is executing.

        Raises:
            KeyError: If run_id not found
        """
        if run_id not in self._runs:
            raise KeyError(f"Run {run_id} not found")
        self._runs[run_id].current_step = step

    def cancel_run(self, run_id: str) -> bool:
        """Request cancellation (sets flag, pipeline must check).

        Returns:
            True if the run exists and is still active, False otherwise
        """
        progress = self._runs.get(run_id)
        if progress is None or progress.is_terminal:
            return False

        self._cancelled.add(run_id)
        logger.info(f"Cancellation requested for run {run_id}")
        return True

    def is_cancelled(self, run_id: str) -> bool:
        return run_id in self._cancelled

    def get_run(self, run_id: str) -> RunProgress | None:
        """Get a snapshot of a run's state, or None if unknown."""
        progress = self._runs.get(run_id)
        return progress.model_copy() if progress else None

    @property
    def active_count(self) -> int:
        return sum(1 for progress in self._runs.values() if not progress.is_terminal)

    async def wait(self, run_id: str) -> RunProgress:
        """Wait until a run reaches a terminal state.

        Raises:
            KeyError: If run_id not found
        """
        progress = self._runs.get(run_id)
        if progress is None:
            raise KeyError(f"Run {run_id} not found")

        task = self._tasks.get(run_id)
        if task is not None:
            await asyncio.shield(task)
        # Held by reference, so a run evicted meanwhile still reports its final state
        return progress.model_copy()

    async def shutdown(self) -> None:
        """Wait for all in-flight runs to finish."""
        pending = list(self._tasks.values())
        if not pending:
            return
        logger.info(f"Waiting for {len(pending)} pipeline run(s) to finish")
        await asyncio.gather(*pending, return_exceptions=True)
