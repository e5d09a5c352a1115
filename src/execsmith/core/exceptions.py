"""Exception hierarchy for fragment execution failures.

Every failure is recoverable at fragment granularity: the executor reports it
as a warning and leaves the fragment untouched. The classes carry enough
context (level, source position, input name) to build the warning text.
"""

from __future__ import annotations

from typing import Any

from .elements import FragmentLevel
from .locator import SourcePosition


class FragmentError(RuntimeError):
    """Base exception for failures tied to a single code fragment."""

    def __init__(
        self,
        level: FragmentLevel,
        position: SourcePosition,
        input_name: str,
        detail: str = "",
    ) -> None:
        self.level = level
        self.position = position
        self.input_name = input_name
        self.detail = detail
        super().__init__(self.describe())

    @property
    def location(self) -> str:
        """Human-readable reference to the failing fragment."""
        element = "inline code element" if self.level is FragmentLevel.INLINE else "code block"
        return f"{element} in {self.input_name} at {self.position.describe(self.level)}"

    def describe(self) -> str:
        return f"Fragment failure in the {self.location}: {self.detail}"


class ParseError(FragmentError):
    """Raised when fragment text does not compile."""

    def describe(self) -> str:
        return f"The following error occurred while parsing the {self.location}:\n{self.detail}"


class ExecError(FragmentError):
    """Raised when compiled fragment code fails at runtime."""

    def describe(self) -> str:
        return f"The following error occurred while executing the {self.location}:\n{self.detail}"


class InvalidReturnValue(FragmentError):
    """Raised when a fragment returns a value of a disallowed shape."""

    def __init__(
        self,
        level: FragmentLevel,
        position: SourcePosition,
        input_name: str,
        value: Any,
        expectation: str,
    ) -> None:
        self.value = value
        self.expectation = expectation
        super().__init__(level, position, input_name, detail=_safe_repr(value))

    def describe(self) -> str:
        return (
            f"Received invalid return value `{self.detail}` from the {self.location}. "
            f"{self.expectation}"
        )


class CompileError(Exception):
    """Raised by evaluators when fragment text cannot be compiled."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def describe_exception(exc: BaseException) -> str:
    """Format an exception as ``Type: message`` for warning payloads."""
    text = str(exc).strip()
    name = type(exc).__name__
    return f"{name}: {text}" if text else name


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:  # noqa: BLE001 - arbitrary user objects
        return f"<{type(value).__name__} object>"


__all__ = [
    "CompileError",
    "ExecError",
    "FragmentError",
    "InvalidReturnValue",
    "ParseError",
    "describe_exception",
    "exception_messages",
]
