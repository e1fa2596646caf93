"""
HTML parsing.

BeautifulSoup drives the html5lib tree builder, which implements the WHATWG
parsing algorithm: malformed markup is recovered the way browsers do it
(implicit html/head/body, auto-closed tags, misnested formatting) and never
raises. The soup is then flattened once into a Document arena.
"""
from typing import Dict, List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from wcag_audit.features.analysis.services.dom.document import Document, Node, freeze_attributes

# String subclasses that are not part of textContent
_NON_TEXT = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

_CLOSE = object()


class DomParser(Protocol):
    def parse_from_string(self, html: str) -> Document:
        ...


class Html5DomParser:
    """Parses HTML into a Document using BeautifulSoup + html5lib."""

    features = "html5lib"

    def parse_from_string(self, html: str) -> Document:
        soup = BeautifulSoup(html or "", self.features, multi_valued_attributes=None)
        return _flatten(soup)


def _attributes(tag: Tag) -> Dict[str, str]:
    attrs = {}
    for name, value in tag.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        attrs[str(name).lower()] = "" if value is None else str(value)
    return attrs


def _flatten(soup: BeautifulSoup) -> Document:
    tags: List[str] = []
    attrs: List[Dict[str, str]] = []
    parents: List[Optional[int]] = []
    children: List[List[int]] = []
    subtree_ends: List[int] = []
    text_starts: List[int] = []
    text_ends: List[int] = []
    texts: List[str] = []

    # Iterative walk; deeply nested documents must not hit the recursion limit
    stack = [(child, None) for child in reversed(soup.contents)]
    while stack:
        item, parent = stack.pop()

        if item is _CLOSE:
            subtree_ends[parent] = len(tags)
            text_ends[parent] = len(texts)
            continue

        if isinstance(item, Tag):
            index = len(tags)
            tags.append(item.name.lower())
            attrs.append(_attributes(item))
            parents.append(parent)
            children.append([])
            subtree_ends.append(index + 1)
            text_starts.append(len(texts))
            text_ends.append(len(texts))
            if parent is not None:
                children[parent].append(index)

            stack.append((_CLOSE, index))
            stack.extend((child, index) for child in reversed(item.contents))
        elif isinstance(item, NavigableString) and not isinstance(item, _NON_TEXT):
            texts.append(str(item))

    nodes = [
        Node(
            tag=tags[i],
            attributes=freeze_attributes(attrs[i]),
            parent=parents[i],
            children=tuple(children[i]),
            subtree_end=subtree_ends[i],
            text_start=text_starts[i],
            text_end=text_ends[i],
        )
        for i in range(len(tags))
    ]
    return Document(nodes, texts)


_default_parser = Html5DomParser()


def parse_from_string(html: str) -> Document:
    return _default_parser.parse_from_string(html)
