import enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, Enum, String, Text

from wcag_audit.features.analysis.exceptions import InvalidTransitionError
from wcag_audit.platform.db.base import BaseModel


class AnalysisStatus(enum.Enum):
    """Analysis status state machine"""
    pending = "pending"
    fetching = "fetching"
    ongoing = "ongoing"
    finished = "finished"
    failed = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({AnalysisStatus.finished, AnalysisStatus.failed})

# failed is reachable from every non-terminal status
ALLOWED_TRANSITIONS = {
    AnalysisStatus.pending: frozenset({AnalysisStatus.fetching, AnalysisStatus.failed}),
    AnalysisStatus.fetching: frozenset({AnalysisStatus.ongoing, AnalysisStatus.failed}),
    AnalysisStatus.ongoing: frozenset({AnalysisStatus.finished, AnalysisStatus.failed}),
    AnalysisStatus.finished: frozenset(),
    AnalysisStatus.failed: frozenset(),
}


class Analysis(BaseModel):

    __tablename__ = "analyses"

    url = Column(String(2048), nullable=False)

    status = Column(
        Enum(AnalysisStatus, values_callable=lambda e: [member.value for member in e]),
        default=AnalysisStatus.pending,
        nullable=False,
        index=True,
    )

    # rule name -> RuleResult dump; set only on finished
    results = Column(JSON, nullable=True)

    # set only on failed
    error_message = Column(Text, nullable=True)

    def transition_to(
        self,
        status: AnalysisStatus,
        *,
        results: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Move to ``status``, keeping results/error_message consistent with it.

        Raises InvalidTransitionError for regressions and for any change
        after a terminal status.
        """
        if status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(self.status, status)

        if status == AnalysisStatus.finished and results is None:
            raise ValueError("A finished analysis requires results")
        if status == AnalysisStatus.failed and error_message is None:
            raise ValueError("A failed analysis requires an error message")

        self.status = status
        self.results = results if status == AnalysisStatus.finished else None
        self.error_message = error_message if status == AnalysisStatus.failed else None

    def __repr__(self) -> str:
        return f"<Analysis id={self.id} status={self.status.value} url={self.url}>"
