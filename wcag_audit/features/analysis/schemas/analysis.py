"""
Analysis Schemas

Request and response models for the analysis API, plus the progress payload
pushed to observers. Field names are camelCase on the wire.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from wcag_audit.features.analysis.models.analysis import AnalysisStatus
from wcag_audit.features.analysis.services.rules.base import RuleResult


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AnalysisCreate(CamelModel):
    """Request to analyse a single page."""
    url: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"url": "https://example.com"}},
    )


class AnalysisSubmitted(CamelModel):
    """Response returned as soon as the analysis is recorded."""
    id: str
    url: str
    status: AnalysisStatus
    created_at: datetime


class AnalysisOut(CamelModel):
    id: str
    url: str
    status: AnalysisStatus
    results: Optional[Dict[str, RuleResult]] = None
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AnalysisPage(CamelModel):
    items: List[AnalysisOut]
    total: int
    page: int
    limit: int
    total_pages: int


class ProgressPayload(CamelModel):
    """
    Body of an ``analysis-progress`` event.

    ``results`` is only set on finished and ``error_message`` only on failed;
    use ``to_message`` so absent fields are left out.
    """
    analysis_id: str
    status: AnalysisStatus
    results: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None

    @classmethod
    def from_analysis(cls, analysis) -> "ProgressPayload":
        return cls(
            analysis_id=analysis.id,
            status=analysis.status,
            results=analysis.results,
            error_message=analysis.error_message,
        )

    def to_message(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
