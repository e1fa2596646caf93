"""
Read-only document tree.

A Document owns an arena of nodes laid out in document (pre-)order. Each
node's subtree is the contiguous index range ``[index, subtree_end)``, and
its descendant text is the contiguous slice ``texts[text_start:text_end]``.
Element objects are handles into the arena; the document creates one per
node and hands out the same handle on every access.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from wcag_audit.features.analysis.services.dom.selectors import matches_any, parse_selector


@dataclass(frozen=True)
class Node:
    tag: str
    attributes: Mapping[str, str]
    parent: Optional[int]
    children: Tuple[int, ...]
    subtree_end: int
    text_start: int
    text_end: int


class Element:
    __slots__ = ("_document", "_index")

    def __init__(self, document: "Document", index: int):
        self._document = document
        self._index = index

    @property
    def _node(self) -> Node:
        return self._document._nodes[self._index]

    @property
    def tag_name(self) -> str:
        return self._node.tag

    @property
    def attributes(self) -> Mapping[str, str]:
        return self._node.attributes

    def get_attribute(self, name: str) -> Optional[str]:
        return self._node.attributes.get(name.lower())

    def has_attribute(self, name: str) -> bool:
        return name.lower() in self._node.attributes

    @property
    def text_content(self) -> str:
        node = self._node
        return "".join(self._document._texts[node.text_start:node.text_end])

    @property
    def parent(self) -> Optional["Element"]:
        parent = self._node.parent
        return self._document._elements[parent] if parent is not None else None

    @property
    def children(self) -> List["Element"]:
        return [self._document._elements[i] for i in self._node.children]

    def query_selector(self, selector: str) -> Optional["Element"]:
        return next(self._document._select(selector, self._index + 1, self._node.subtree_end), None)

    def query_selector_all(self, selector: str) -> List["Element"]:
        return list(self._document._select(selector, self._index + 1, self._node.subtree_end))

    def __repr__(self) -> str:
        return f"<Element {self.tag_name} #{self._index}>"


class Document:

    def __init__(self, nodes: Sequence[Node], texts: Sequence[str]):
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._texts: Tuple[str, ...] = tuple(texts)
        self._elements: Tuple[Element, ...] = tuple(Element(self, i) for i in range(len(self._nodes)))

    @property
    def elements(self) -> Tuple[Element, ...]:
        """Every element in document order."""
        return self._elements

    @property
    def document_element(self) -> Optional[Element]:
        return self._elements[0] if self._elements else None

    def get_elements_by_tag_name(self, tag: str) -> List[Element]:
        tag = tag.lower()
        if tag == "*":
            return list(self._elements)
        return [self._elements[i] for i, node in enumerate(self._nodes) if node.tag == tag]

    def query_selector(self, selector: str) -> Optional[Element]:
        return next(self._select(selector, 0, len(self._nodes)), None)

    def query_selector_all(self, selector: str) -> List[Element]:
        return list(self._select(selector, 0, len(self._nodes)))

    def _select(self, selector: str, start: int, end: int) -> Iterator[Element]:
        compounds = parse_selector(selector)
        for i in range(start, end):
            node = self._nodes[i]
            if matches_any(compounds, node.tag, node.attributes):
                yield self._elements[i]

    def __len__(self) -> int:
        return len(self._nodes)


def freeze_attributes(attrs: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(attrs))
