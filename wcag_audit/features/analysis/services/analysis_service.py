import math

from wcag_audit.features.analysis.exceptions import AnalysisNotFoundError
from wcag_audit.features.analysis.schemas.analysis import AnalysisOut, AnalysisPage, AnalysisSubmitted
from wcag_audit.features.analysis.services.dispatcher import AnalysisDispatcher
from wcag_audit.features.analysis.services.store import AnalysisStore
from wcag_audit.platform.logger import get_logger

logger = get_logger(__name__)


class AnalysisService:
    """Request-facing operations: submit, list and get."""

    def __init__(self, store: AnalysisStore, dispatcher: AnalysisDispatcher):
        self.store = store
        self.dispatcher = dispatcher

    async def submit(self, url: str) -> AnalysisSubmitted:
        """
        Record a pending analysis and hand it to the dispatcher.

        Store errors propagate to the caller; nothing after creation does.
        """
        analysis = await self.store.create(url)
        self.dispatcher.dispatch(analysis.id)
        return AnalysisSubmitted.model_validate(analysis)

    async def list_analyses(self, page: int = 1, limit: int = 10) -> AnalysisPage:
        analyses, total = await self.store.list(skip=(page - 1) * limit, limit=limit)
        return AnalysisPage(
            items=[AnalysisOut.model_validate(analysis) for analysis in analyses],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    async def get(self, analysis_id: str) -> AnalysisOut:
        analysis = await self.store.find_by_id(analysis_id)
        if analysis is None:
            raise AnalysisNotFoundError(analysis_id)
        return AnalysisOut.model_validate(analysis)
