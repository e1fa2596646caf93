from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from wcag_audit.features.analysis.services.dom import Document


class RuleResult(BaseModel):
    """Verdict of a single rule. ``details`` is rule-specific."""
    model_config = ConfigDict(frozen=True)

    passed: bool
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class WCAGRule(ABC):
    """
    A pure accessibility check.

    Implementations must not mutate the document or keep state between
    calls, and must pass when there is nothing to check.
    """

    name: str

    @abstractmethod
    def analyse(self, doc: Document) -> RuleResult:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name}>"
