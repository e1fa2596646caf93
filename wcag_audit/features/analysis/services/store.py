from typing import List, Optional, Tuple

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from wcag_audit.features.analysis.exceptions import AnalysisNotFoundError
from wcag_audit.features.analysis.models.analysis import Analysis, AnalysisStatus
from wcag_audit.platform.db.base import utcnow
from wcag_audit.platform.logger import get_logger

logger = get_logger(__name__)


class AnalysisStore:
    """
    Durable record of submissions.

    Every call opens its own short-lived session, so records handed out are
    detached snapshots. Each record has a single writer (its orchestration
    task), so ``save`` is a plain per-row UPDATE with no locking.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def create(self, url: str) -> Analysis:
        async with self.session_factory() as db:
            analysis = Analysis(url=url, status=AnalysisStatus.pending)
            db.add(analysis)
            await db.commit()
            await db.refresh(analysis)

        logger.info(f"[{analysis.id}] Created analysis for {url}")
        return analysis

    async def find_by_id(self, analysis_id: str) -> Optional[Analysis]:
        async with self.session_factory() as db:
            result = await db.execute(select(Analysis).where(Analysis.id == analysis_id))
            return result.scalar_one_or_none()

    async def list(self, skip: int = 0, limit: int = 10) -> Tuple[List[Analysis], int]:
        """Page of analyses, newest first, with the total count."""
        async with self.session_factory() as db:
            total = await db.scalar(select(func.count()).select_from(Analysis))
            result = await db.execute(
                select(Analysis)
                .order_by(desc(Analysis.created_at), desc(Analysis.id))
                .offset(skip)
                .limit(limit)
            )
            return list(result.scalars().all()), total or 0

    async def save(self, analysis: Analysis) -> Analysis:
        """Persist status, results and error message, and bump updated_at."""
        updated_at = utcnow()
        async with self.session_factory() as db:
            result = await db.execute(
                update(Analysis)
                .where(Analysis.id == analysis.id)
                .values(
                    status=analysis.status,
                    results=analysis.results,
                    error_message=analysis.error_message,
                    updated_at=updated_at,
                )
            )
            if result.rowcount == 0:
                await db.rollback()
                raise AnalysisNotFoundError(analysis.id)
            await db.commit()

        analysis.updated_at = updated_at
        return analysis
