"""Node model shared by fragments, validators, and the host bindings.

Documents are BeautifulSoup trees. A node is *block-level* when it is a tag
from the HTML flow-content set below and *inline-level* when it is a text
node or any other tag. Fragments produce nodes with :class:`ElementFactory`,
which is exposed to executed code as ``html``.
"""

from __future__ import annotations

from enum import Enum
from numbers import Real
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag


class FragmentLevel(Enum):
    """Position of a fragment in the document structure."""

    BLOCK = "Block"
    INLINE = "Inline"


BLOCK_TAGS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "dialog",
        "dd",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "summary",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "ul",
    }
)


def node_level(value: Any) -> FragmentLevel | None:
    """Return the structural level of a document node, or None for non-nodes.

    A whole document cannot be inserted into a tree, so it is not a node.
    """
    if isinstance(value, BeautifulSoup):
        return None
    if isinstance(value, Tag):
        return FragmentLevel.BLOCK if value.name in BLOCK_TAGS else FragmentLevel.INLINE
    if isinstance(value, NavigableString):
        return FragmentLevel.INLINE
    return None


def is_node(value: Any) -> bool:
    """Return True when the value can be inserted into a document tree."""
    return node_level(value) is not None


class ElementFactory:
    """Build nodes attached to a document so fragments can return them."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def text(self, value: Any) -> NavigableString:
        """Return a text node holding ``str(value)``."""
        return NavigableString(str(value))

    def tag(self, name: str, *children: Any, **attrs: Any) -> Tag:
        """Create a tag, appending children and setting attributes.

        Strings and numbers become text nodes, lists and tuples are flattened,
        ``None`` children are skipped. Trailing underscores are stripped from
        attribute names so ``class_`` maps to ``class``; underscores inside
        names map to dashes (``data_id`` becomes ``data-id``).
        """
        attributes: dict[str, str] = {}
        for key, value in attrs.items():
            if value is None or value is False:
                continue
            name_key = key.rstrip("_").replace("_", "-")
            if isinstance(value, (list, tuple)):
                attributes[name_key] = " ".join(str(item) for item in value)
            elif value is True:
                attributes[name_key] = ""
            else:
                attributes[name_key] = str(value)
        element = self._soup.new_tag(name, attrs=attributes)
        for child in self._flatten(children):
            element.append(child)
        return element

    def parse(self, markup: str) -> list[PageElement]:
        """Parse an HTML snippet and return its detached top-level nodes."""
        fragment = BeautifulSoup(markup, "html.parser")
        nodes = list(fragment.contents)
        for node in nodes:
            node.extract()
        return nodes

    def p(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("p", *children, **attrs)

    def div(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("div", *children, **attrs)

    def span(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("span", *children, **attrs)

    def em(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("em", *children, **attrs)

    def strong(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("strong", *children, **attrs)

    def code(self, *children: Any, **attrs: Any) -> Tag:
        return self.tag("code", *children, **attrs)

    def heading(self, level: int, *children: Any, **attrs: Any) -> Tag:
        if not 1 <= int(level) <= 6:
            raise ValueError(f"Heading level must be between 1 and 6, got {level!r}.")
        return self.tag(f"h{int(level)}", *children, **attrs)

    def ul(self, *items: Any, **attrs: Any) -> Tag:
        """Create a bullet list, wrapping items that are not ``<li>`` already."""
        entries = [
            item if isinstance(item, Tag) and item.name == "li" else self.tag("li", item)
            for item in self._flatten(items)
        ]
        return self.tag("ul", *entries, **attrs)

    def _flatten(self, children: Any) -> list[PageElement]:
        flattened: list[PageElement] = []
        for child in children:
            if child is None:
                continue
            if isinstance(child, PageElement):
                flattened.append(child)
            elif isinstance(child, (list, tuple)):
                flattened.extend(self._flatten(child))
            elif isinstance(child, (str, Real)):
                flattened.append(self.text(child))
            else:
                raise TypeError(f"Cannot convert {type(child).__name__} into a document node.")
        return flattened


__all__ = ["BLOCK_TAGS", "ElementFactory", "FragmentLevel", "is_node", "node_level"]
