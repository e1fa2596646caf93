"""
Process-wide wiring of the analysis pipeline.

One orchestrator and one dispatcher are shared by every request, on top of
the singleton broadcaster. Routes receive them through FastAPI dependencies
so tests can override any piece.
"""
from functools import lru_cache

from wcag_audit.features.analysis.services.analyser import default_analyser
from wcag_audit.features.analysis.services.analysis_service import AnalysisService
from wcag_audit.features.analysis.services.dispatcher import AnalysisDispatcher
from wcag_audit.features.analysis.services.fetcher import PageFetcher
from wcag_audit.features.analysis.services.orchestrator import AnalysisOrchestrator
from wcag_audit.features.analysis.services.store import AnalysisStore
from wcag_audit.platform.db.session import SessionLocal
from wcag_audit.platform.websocket_manager import ProgressBroadcaster, broadcaster


def get_broadcaster() -> ProgressBroadcaster:
    return broadcaster


@lru_cache
def get_store() -> AnalysisStore:
    return AnalysisStore(SessionLocal)


@lru_cache
def get_dispatcher() -> AnalysisDispatcher:
    orchestrator = AnalysisOrchestrator(
        store=get_store(),
        fetcher=PageFetcher(),
        analyser=default_analyser(),
        broadcaster=get_broadcaster(),
    )
    return AnalysisDispatcher(orchestrator)


def get_analysis_service() -> AnalysisService:
    return AnalysisService(store=get_store(), dispatcher=get_dispatcher())
