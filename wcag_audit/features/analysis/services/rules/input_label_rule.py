from wcag_audit.features.analysis.services.dom import Document
from wcag_audit.features.analysis.services.rules.base import RuleResult, WCAGRule


class InputLabelRule(WCAGRule):
    """
    Every <input> is explicitly associated with a <label for=...>.

    Only the ``for``/``id`` association counts; inputs without an id are
    unlabeled.
    """

    name = "input-label-check"

    def analyse(self, doc: Document) -> RuleResult:
        inputs = doc.get_elements_by_tag_name("input")
        label_targets = {
            label.get_attribute("for")
            for label in doc.get_elements_by_tag_name("label")
            if label.has_attribute("for")
        }

        unlabeled = 0
        for field in inputs:
            input_id = field.get_attribute("id")
            if not input_id or input_id not in label_targets:
                unlabeled += 1

        if unlabeled == 0:
            message = "All inputs have associated labels"
        else:
            message = f"{unlabeled} of {len(inputs)} inputs missing explicit label association"

        return RuleResult(
            passed=unlabeled == 0,
            message=message,
            details={
                "totalInputs": len(inputs),
                "inputsWithoutLabel": unlabeled,
            },
        )
