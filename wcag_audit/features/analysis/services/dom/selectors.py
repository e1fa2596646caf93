"""
Minimal CSS selector matcher.

Supports what the rules need: a type selector (or ``*``), ``#id``,
``.class``, ``[attr]`` and ``[attr=value]``, combined into compounds such as
``input#email[type=text]`` and grouped with commas. Combinators and
pseudo-classes raise UnsupportedSelectorError.
"""
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

_TOKEN = re.compile(
    r"""
      (?P<tag>\*|[a-zA-Z][a-zA-Z0-9-]*)
    | \#(?P<id>[^\s.#\[\],:>+~]+)
    | \.(?P<cls>[^\s.#\[\],:>+~]+)
    | \[\s*(?P<attr>[^\s=\]~|^$*]+)\s*
        (?:=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<uq>[^\s\]"']+))\s*)?
      \]
    """,
    re.VERBOSE,
)


class UnsupportedSelectorError(ValueError):
    pass


@dataclass(frozen=True)
class CompoundSelector:
    tag: Optional[str] = None
    ids: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()
    # (name, expected value or None for presence only)
    attributes: Tuple[Tuple[str, Optional[str]], ...] = ()

    def matches(self, tag: str, attrs: Mapping[str, str]) -> bool:
        if self.tag is not None and self.tag != "*" and self.tag != tag:
            return False
        for id_ in self.ids:
            if attrs.get("id") != id_:
                return False
        if self.classes:
            present = attrs.get("class", "").split()
            if any(cls not in present for cls in self.classes):
                return False
        for name, value in self.attributes:
            if name not in attrs:
                return False
            if value is not None and attrs[name] != value:
                return False
        return True


@lru_cache(maxsize=256)
def parse_selector(selector: str) -> Tuple[CompoundSelector, ...]:
    """Parse a selector group into its compound selectors."""
    text = selector.strip()
    if not text:
        raise UnsupportedSelectorError("Empty selector")

    groups = []
    parts = {"tag": None, "ids": [], "classes": [], "attributes": []}
    seen_token = False
    pos = 0

    def finish():
        if not seen_token:
            raise UnsupportedSelectorError(f"Empty compound in selector '{selector}'")
        groups.append(
            CompoundSelector(
                tag=parts["tag"],
                ids=tuple(parts["ids"]),
                classes=tuple(parts["classes"]),
                attributes=tuple(parts["attributes"]),
            )
        )

    while pos < len(text):
        char = text[pos]

        if char == ",":
            finish()
            parts = {"tag": None, "ids": [], "classes": [], "attributes": []}
            seen_token = False
            pos += 1
            while pos < len(text) and text[pos].isspace():
                pos += 1
            continue

        if char.isspace():
            while pos < len(text) and text[pos].isspace():
                pos += 1
            if pos < len(text) and text[pos] != ",":
                raise UnsupportedSelectorError(f"Combinators are not supported: '{selector}'")
            continue

        match = _TOKEN.match(text, pos)
        if match is None:
            raise UnsupportedSelectorError(f"Unsupported selector syntax at {pos}: '{selector}'")

        if match.group("tag") is not None:
            if seen_token:
                raise UnsupportedSelectorError(f"Type selector must come first: '{selector}'")
            parts["tag"] = match.group("tag").lower()
        elif match.group("id") is not None:
            parts["ids"].append(match.group("id"))
        elif match.group("cls") is not None:
            parts["classes"].append(match.group("cls"))
        else:
            value = next(
                (v for v in (match.group("dq"), match.group("sq"), match.group("uq")) if v is not None),
                None,
            )
            parts["attributes"].append((match.group("attr").lower(), value))

        seen_token = True
        pos = match.end()

    finish()
    return tuple(groups)


def matches_any(compounds: Tuple[CompoundSelector, ...], tag: str, attrs: Mapping[str, str]) -> bool:
    return any(compound.matches(tag, attrs) for compound in compounds)
