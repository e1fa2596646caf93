from wcag_audit.features.analysis.services.dom.document import Document, Element
from wcag_audit.features.analysis.services.dom.parser import DomParser, Html5DomParser, parse_from_string
from wcag_audit.features.analysis.services.dom.selectors import UnsupportedSelectorError

__all__ = [
    "Document",
    "DomParser",
    "Element",
    "Html5DomParser",
    "UnsupportedSelectorError",
    "parse_from_string",
]
