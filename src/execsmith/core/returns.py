"""Validation and normalisation of fragment return values.

Raw values are first classified into a closed set of shapes, then a single
``match`` decides, per level, whether the shape is acceptable and which nodes
it stands for:

1. Inline fragments may return a number or a string; it becomes a text node.
2. Block fragments may return ``None``; it becomes an empty list, which
   removes the fragment from the document.
3. A single node of the right level is accepted as-is.
4. A sequence whose elements are all nodes of the right level is accepted as
   a node list (an empty sequence included).
5. Anything else is rejected.

Inline fragments returning ``None`` are rejected on purpose: an inline
expression without a value is nearly always a bug and must not vanish
silently.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any

from bs4.element import NavigableString, PageElement

from .elements import FragmentLevel, is_node, node_level


@dataclass(frozen=True, slots=True)
class Nil:
    """The fragment returned nothing."""


@dataclass(frozen=True, slots=True)
class Scalar:
    """A number or a string."""

    value: Any


@dataclass(frozen=True, slots=True)
class SingleNode:
    """A single document node."""

    node: PageElement


@dataclass(frozen=True, slots=True)
class NodeList:
    """A sequence of arbitrary items, preserved in order."""

    items: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class Unrecognised:
    """Any other value."""

    value: Any


ReturnShape = Nil | Scalar | SingleNode | NodeList | Unrecognised


@dataclass(slots=True)
class ValidReturn:
    """Accepted return value normalised into a node list."""

    nodes: list[PageElement]

    @property
    def removes(self) -> bool:
        return not self.nodes


@dataclass(slots=True)
class InvalidReturn:
    """Rejected return value together with the level it was checked against."""

    value: Any
    level: FragmentLevel


def classify_return(value: Any) -> ReturnShape:
    """Map a raw value onto the closed set of return shapes."""
    # Text nodes are strings too; they count as nodes first.
    if is_node(value):
        return SingleNode(value)
    if value is None:
        return Nil()
    if isinstance(value, str) or (isinstance(value, Real) and not isinstance(value, bool)):
        return Scalar(value)
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return NodeList(tuple(value))
    return Unrecognised(value)


def validate_return(value: Any, level: FragmentLevel) -> ValidReturn | InvalidReturn:
    """Validate ``value`` for a fragment at ``level``."""
    match classify_return(value):
        case Scalar(scalar) if level is FragmentLevel.INLINE:
            return ValidReturn([NavigableString(str(scalar))])
        case Nil() if level is FragmentLevel.BLOCK:
            return ValidReturn([])
        case SingleNode(node) if node_level(node) is level:
            return ValidReturn([node])
        case NodeList(items) if all(node_level(item) is level for item in items):
            return ValidReturn(list(items))
        case _:
            return InvalidReturn(value, level)


def expected_shape(level: FragmentLevel) -> str:
    """Describe the accepted return values for ``level``."""
    if level is FragmentLevel.INLINE:
        return (
            "Expected an inline element, a list of inline elements, a number, or a string."
        )
    return "Expected a block-level element or a list of block-level elements."


__all__ = [
    "InvalidReturn",
    "Nil",
    "NodeList",
    "ReturnShape",
    "Scalar",
    "SingleNode",
    "Unrecognised",
    "ValidReturn",
    "classify_return",
    "expected_shape",
    "validate_return",
]
