from wcag_audit.features.analysis.services.dom import Document
from wcag_audit.features.analysis.services.rules.base import RuleResult, WCAGRule


class ImgAltRule(WCAGRule):
    """Every <img> carries a non-empty alt attribute."""

    name = "img-alt-check"

    def analyse(self, doc: Document) -> RuleResult:
        images = doc.get_elements_by_tag_name("img")

        missing = 0
        empty = 0
        for img in images:
            if not img.has_attribute("alt"):
                missing += 1
            elif not img.get_attribute("alt").strip():
                empty += 1

        flagged = missing + empty
        if flagged == 0:
            message = "All images have alt attributes"
        else:
            message = f"{flagged} of {len(images)} images missing or have empty alt attribute"

        return RuleResult(
            passed=flagged == 0,
            message=message,
            details={
                "totalImages": len(images),
                "imagesWithoutAlt": missing,
                "imagesWithEmptyAlt": empty,
            },
        )
