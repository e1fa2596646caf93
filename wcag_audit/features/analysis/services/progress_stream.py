"""
SSE progress stream for a single analysis.

Subscribes to the broadcaster before reading the persisted record, so no
transition can fall between the snapshot and the live events. Events for
other analyses are filtered out and the stream ends at a terminal status.
"""
import json
from typing import Any, AsyncIterator, Awaitable, Callable, Dict

from wcag_audit.features.analysis.models.analysis import AnalysisStatus
from wcag_audit.features.analysis.schemas.analysis import ProgressPayload
from wcag_audit.features.analysis.services.store import AnalysisStore
from wcag_audit.platform.logger import get_logger
from wcag_audit.platform.websocket_manager import PROGRESS_EVENT, ProgressBroadcaster, QueueObserver

logger = get_logger(__name__)

TERMINAL_VALUES = {AnalysisStatus.finished.value, AnalysisStatus.failed.value}

# Position in the state machine; terminal statuses share the last rank
_RANK = {
    AnalysisStatus.pending.value: 0,
    AnalysisStatus.fetching.value: 1,
    AnalysisStatus.ongoing.value: 2,
    AnalysisStatus.finished.value: 3,
    AnalysisStatus.failed.value: 3,
}


def _event(data: Dict[str, Any]) -> Dict[str, str]:
    return {"event": PROGRESS_EVENT, "data": json.dumps(data)}


async def _never_disconnected() -> bool:
    return False


async def stream_analysis_progress(
    analysis_id: str,
    store: AnalysisStore,
    broadcaster: ProgressBroadcaster,
    is_disconnected: Callable[[], Awaitable[bool]] = _never_disconnected,
) -> AsyncIterator[Dict[str, str]]:
    observer = QueueObserver()
    broadcaster.add_observer(observer)
    try:
        analysis = await store.find_by_id(analysis_id)
        if analysis is None:
            return

        snapshot = ProgressPayload.from_analysis(analysis).to_message()
        yield _event(snapshot)
        last_rank = _RANK[snapshot["status"]]
        if analysis.status.is_terminal:
            return

        while True:
            message = await observer.get()
            if await is_disconnected():
                logger.info(f"[SSE] Client disconnected from analysis {analysis_id}")
                return

            data = message["data"]
            if data.get("analysisId") != analysis_id:
                continue
            # Events queued before the snapshot was read
            if _RANK.get(data.get("status"), -1) <= last_rank:
                continue
            last_rank = _RANK[data["status"]]

            yield _event(data)
            if data.get("status") in TERMINAL_VALUES:
                return
    finally:
        observer.close()
        broadcaster.disconnect(observer)
