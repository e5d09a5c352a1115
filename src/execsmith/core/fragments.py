"""Recognition of executable code fragments in a document tree.

Block fragments are fenced code blocks rendered as ``<pre><code>`` where the
``<code>`` (or the ``<pre>``) carries a marker class. Inline fragments are
``<code>`` elements with a marker class outside any ``<pre>``. Markdown such
as the following produces both kinds once ``fenced_code`` and ``attr_list``
are enabled::

    ```{.python exec="false"}
    print("shown, never run")
    ```

    The answer is `6 * 7`{.python}.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from bs4.element import Tag

from .elements import FragmentLevel
from .locator import UNKNOWN_POSITION, SourcePosition


@dataclass(slots=True)
class Fragment:
    """Code-bearing node eligible for execution."""

    level: FragmentLevel
    text: str
    node: Tag
    attributes: dict[str, str] = field(default_factory=dict)
    position: SourcePosition = UNKNOWN_POSITION

    @property
    def executes(self) -> bool:
        """Only the exact value ``false`` disables execution."""
        return self.attributes.get("exec") != "false"

    @property
    def included(self) -> bool:
        """Only the exact value ``false`` drops a disabled block fragment."""
        return self.attributes.get("include") != "false"

    @classmethod
    def from_node(cls, node: object, marker_classes: Iterable[str]) -> Fragment | None:
        """Return the fragment represented by ``node``, or None."""
        if not isinstance(node, Tag):
            return None
        markers = frozenset(marker_classes)
        if node.name == "pre":
            code = node.find("code", recursive=False)
            if not (_has_marker(node, markers) or (code is not None and _has_marker(code, markers))):
                return None
            attributes = _string_attributes(node)
            if code is not None:
                attributes.update(_string_attributes(code))
            text = (code if code is not None else node).get_text()
            return cls(FragmentLevel.BLOCK, text, node, attributes)
        if node.name == "code" and _has_marker(node, markers):
            if node.find_parent("pre") is not None:
                return None
            return cls(FragmentLevel.INLINE, node.get_text(), node, _string_attributes(node))
        return None


def _has_marker(node: Tag, markers: frozenset[str]) -> bool:
    classes = node.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return any(name in markers for name in classes)


def _string_attributes(node: Tag) -> dict[str, str]:
    attributes: dict[str, str] = {}
    for key, value in node.attrs.items():
        if key == "class":
            continue
        if isinstance(value, (list, tuple)):
            attributes[key] = " ".join(str(item) for item in value)
        else:
            attributes[key] = str(value)
    return attributes


__all__ = ["Fragment"]
