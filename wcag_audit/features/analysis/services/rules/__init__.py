from wcag_audit.features.analysis.services.rules.base import RuleResult, WCAGRule
from wcag_audit.features.analysis.services.rules.img_alt_rule import ImgAltRule
from wcag_audit.features.analysis.services.rules.input_label_rule import InputLabelRule
from wcag_audit.features.analysis.services.rules.title_rule import TitleRule

__all__ = [
    "ImgAltRule",
    "InputLabelRule",
    "RuleResult",
    "TitleRule",
    "WCAGRule",
]
