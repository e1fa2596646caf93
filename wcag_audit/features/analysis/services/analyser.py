from typing import Dict, List, Tuple

from wcag_audit.features.analysis.exceptions import DuplicateRuleError
from wcag_audit.features.analysis.services.dom import Document
from wcag_audit.features.analysis.services.rules import (
    ImgAltRule,
    InputLabelRule,
    RuleResult,
    TitleRule,
    WCAGRule,
)


class WCAGAnalyser:
    """
    Ordered registry of rules.

    Results come back keyed by rule name in registration order. Names are
    unique: registering a second rule under an existing name raises
    DuplicateRuleError instead of letting it overwrite the first result.
    """

    def __init__(self):
        self._rules: List[WCAGRule] = []

    @property
    def rules(self) -> Tuple[WCAGRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: WCAGRule) -> "WCAGAnalyser":
        if any(existing.name == rule.name for existing in self._rules):
            raise DuplicateRuleError(rule.name)
        self._rules.append(rule)
        return self

    def analyse(self, doc: Document) -> Dict[str, RuleResult]:
        return {rule.name: rule.analyse(doc) for rule in self._rules}


def default_analyser() -> WCAGAnalyser:
    return (
        WCAGAnalyser()
        .add_rule(TitleRule())
        .add_rule(ImgAltRule())
        .add_rule(InputLabelRule())
    )
