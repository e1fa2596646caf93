"""
Analysis Orchestrator

Drives one analysis through its state machine:

    pending -> fetching -> ongoing -> finished
                  \           \
                   +-> failed  +-> failed

Every transition is persisted first and then broadcast. Failures after
pending are caught here and recorded on the analysis; nothing escapes
``run`` since the detached task that calls it has no one to report to.
"""
import asyncio
from typing import Any, Callable, Dict, Optional

from wcag_audit.features.analysis.exceptions import FetchFailure, TransportFailure
from wcag_audit.features.analysis.models.analysis import Analysis, AnalysisStatus
from wcag_audit.features.analysis.schemas.analysis import ProgressPayload
from wcag_audit.features.analysis.services.analyser import WCAGAnalyser
from wcag_audit.features.analysis.services.dom import Document, parse_from_string
from wcag_audit.features.analysis.services.fetcher import PageFetcher
from wcag_audit.features.analysis.services.store import AnalysisStore
from wcag_audit.platform.logger import get_logger
from wcag_audit.platform.websocket_manager import ProgressBroadcaster

logger = get_logger(__name__)


class AnalysisOrchestrator:

    def __init__(
        self,
        store: AnalysisStore,
        fetcher: PageFetcher,
        analyser: WCAGAnalyser,
        broadcaster: ProgressBroadcaster,
        parse: Callable[[str], Document] = parse_from_string,
    ):
        self.store = store
        self.fetcher = fetcher
        self.analyser = analyser
        self.broadcaster = broadcaster
        self.parse = parse

    async def run(self, analysis_id: str) -> None:
        analysis = await self.store.find_by_id(analysis_id)
        if analysis is None:
            # Removed, or not visible yet: nothing to transition or announce
            logger.debug(f"[{analysis_id}] Analysis not found, skipping")
            return

        if analysis.status != AnalysisStatus.pending:
            logger.warning(f"[{analysis_id}] Analysis already {analysis.status.value}, skipping")
            return

        try:
            await self._transition(analysis, AnalysisStatus.fetching)
            html = await self.fetcher.fetch(analysis.url)

            await self._transition(analysis, AnalysisStatus.ongoing)
            results = await asyncio.to_thread(self._evaluate, html)

            await self._transition(analysis, AnalysisStatus.finished, results=results)
            logger.info(f"[{analysis_id}] Analysis finished for {analysis.url}")

        except (FetchFailure, TransportFailure) as e:
            logger.warning(f"[{analysis_id}] Fetch failed for {analysis.url}: {e}")
            await self._fail(analysis, str(e))
        except Exception as e:
            logger.exception(f"[{analysis_id}] Analysis failed during {analysis.status.value}: {e}")
            await self._fail(analysis, str(e) or type(e).__name__)

    def _evaluate(self, html: str) -> Dict[str, Any]:
        document = self.parse(html)
        return {
            name: result.model_dump(mode="json")
            for name, result in self.analyser.analyse(document).items()
        }

    async def _transition(
        self,
        analysis: Analysis,
        status: AnalysisStatus,
        *,
        results: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        previous = (analysis.status, analysis.results, analysis.error_message)
        analysis.transition_to(status, results=results, error_message=error_message)

        try:
            await self.store.save(analysis)
        except Exception:
            # Keep the in-memory record in line with what is persisted
            analysis.status, analysis.results, analysis.error_message = previous
            raise

        logger.info(f"[{analysis.id}] Status -> {status.value}")
        await self.broadcaster.notify(analysis.id, ProgressPayload.from_analysis(analysis).to_message())

    async def _fail(self, analysis: Analysis, error_message: str) -> None:
        if analysis.status.is_terminal:
            logger.error(f"[{analysis.id}] Failure after terminal status {analysis.status.value}: {error_message}")
            return

        try:
            await self._transition(analysis, AnalysisStatus.failed, error_message=error_message)
        except Exception as e:
            logger.exception(f"[{analysis.id}] Could not record failure: {e}")
