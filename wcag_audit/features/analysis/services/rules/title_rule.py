from wcag_audit.features.analysis.services.dom import Document
from wcag_audit.features.analysis.services.rules.base import RuleResult, WCAGRule


class TitleRule(WCAGRule):
    """The page has a non-empty <title>."""

    name = "title-check"

    def analyse(self, doc: Document) -> RuleResult:
        title = doc.query_selector("title")
        title_text = title.text_content.strip() if title is not None else ""

        return RuleResult(
            passed=bool(title_text),
            message="Title exists and is not empty" if title_text else "Title missing or empty",
            details={"title": title_text or None},
        )
