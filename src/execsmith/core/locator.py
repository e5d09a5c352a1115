"""Best-effort mapping from fragment text back to the Markdown source.

The search is a plain substring lookup driven by a cursor that only moves
forward, so repeated fragments resolve to successive occurrences. Indented
code blocks, escaped characters, or a missing source all produce
:data:`UNKNOWN_POSITION`. Positions only decorate warnings; they never
influence whether or how a fragment runs.
"""

from __future__ import annotations

from dataclasses import dataclass

from .elements import FragmentLevel


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """Line (1-based) and column (0-based offset) of a fragment in the source."""

    line: int | None = None
    column: int | None = None

    @property
    def known(self) -> bool:
        return self.line is not None

    def describe(self, level: FragmentLevel) -> str:
        line = "??" if self.line is None else str(self.line)
        if level is FragmentLevel.INLINE:
            column = "??" if self.column is None else str(self.column)
            return f"line {line} column {column}"
        return f"line {line}"


UNKNOWN_POSITION = SourcePosition()


def normalise_newlines(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def locate(
    source: str, text: str, cursor: int, *, level: FragmentLevel
) -> tuple[SourcePosition, int]:
    """Find ``text`` in ``source`` at or after ``cursor``.

    Inline fragments are searched with their backtick delimiters so they do
    not match a block fragment holding the same code. Returns the position
    and the advanced cursor, or the unknown position and the unchanged cursor
    when nothing matches.
    """
    if not source:
        return UNKNOWN_POSITION, cursor
    needle = f"`{text}`" if level is FragmentLevel.INLINE else text
    start = source.find(needle, cursor)
    if start < 0:
        return UNKNOWN_POSITION, cursor

    line = source.count("\n", 0, start) + 1
    column: int | None = None
    if level is FragmentLevel.INLINE:
        column = start - (source.rfind("\n", 0, start) + 1)
    return SourcePosition(line=line, column=column), start + len(needle)


class SourceLocator:
    """Stateful locator owning the monotonic cursor of one document run."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.cursor = 0

    def locate(self, text: str, level: FragmentLevel) -> SourcePosition:
        position, self.cursor = locate(self.source, text, self.cursor, level=level)
        return position


__all__ = [
    "UNKNOWN_POSITION",
    "SourceLocator",
    "SourcePosition",
    "locate",
    "normalise_newlines",
]
