import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from wcag_audit.features.analysis.services.dispatcher import AnalysisDispatcher


def make_dispatcher(run):
    orchestrator = MagicMock()
    orchestrator.run = run
    return AnalysisDispatcher(orchestrator)


@pytest.mark.asyncio
class TestAnalysisDispatcher:

    async def test_dispatch_returns_before_the_run_completes(self):
        release = asyncio.Event()

        async def run(analysis_id):
            await release.wait()

        dispatcher = make_dispatcher(run)
        task = dispatcher.dispatch("abc")

        assert not task.done()
        assert dispatcher.pending_count == 1

        release.set()
        await task
        await asyncio.sleep(0)
        assert dispatcher.pending_count == 0

    async def test_runs_orchestrator_for_the_given_id(self):
        run = AsyncMock()
        dispatcher = make_dispatcher(run)

        await dispatcher.dispatch("abc")

        run.assert_awaited_once_with("abc")

    async def test_task_is_named_after_the_analysis(self):
        dispatcher = make_dispatcher(AsyncMock())

        task = dispatcher.dispatch("abc")
        await task

        assert task.get_name() == "analysis:abc"

    async def test_unexpected_error_is_contained(self):
        dispatcher = make_dispatcher(AsyncMock(side_effect=RuntimeError("boom")))

        task = dispatcher.dispatch("abc")
        await asyncio.wait({task})
        await asyncio.sleep(0)

        assert dispatcher.pending_count == 0

    async def test_drain_waits_for_in_flight_runs(self):
        finished = []

        async def run(analysis_id):
            await asyncio.sleep(0.01)
            finished.append(analysis_id)

        dispatcher = make_dispatcher(run)
        for analysis_id in ("a", "b", "c"):
            dispatcher.dispatch(analysis_id)

        await dispatcher.drain(timeout=1)

        assert sorted(finished) == ["a", "b", "c"]

    async def test_drain_gives_up_after_timeout(self):
        release = asyncio.Event()

        async def run(analysis_id):
            await release.wait()

        dispatcher = make_dispatcher(run)
        task = dispatcher.dispatch("slow")

        await dispatcher.drain(timeout=0.01)

        assert not task.done()
        release.set()
        await task

    async def test_drain_with_nothing_in_flight(self):
        await make_dispatcher(AsyncMock()).drain(timeout=0.01)
