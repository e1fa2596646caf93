import asyncio
from typing import Optional, Set

from wcag_audit.features.analysis.services.orchestrator import AnalysisOrchestrator
from wcag_audit.platform.logger import get_logger

logger = get_logger(__name__)


class AnalysisDispatcher:
    """
    Fire-and-forget handoff from the request path to the orchestrator.

    ``dispatch`` schedules the orchestration as a detached task on the running
    loop and returns immediately. References are held until each task ends so
    the loop cannot garbage-collect a task mid-flight.
    """

    def __init__(self, orchestrator: AnalysisOrchestrator):
        self.orchestrator = orchestrator
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, analysis_id: str) -> asyncio.Task:
        task = asyncio.create_task(self.orchestrator.run(analysis_id), name=f"analysis:{analysis_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        logger.info(f"[{analysis_id}] Dispatched analysis")
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"{task.get_name()} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"{task.get_name()} raised unexpectedly: {exc!r}")

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight analyses, up to ``timeout`` seconds."""
        if not self._tasks:
            return
        done, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} analyses still running after {timeout}s")
