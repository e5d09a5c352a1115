"""Reporting channel between fragment execution and its host.

The core never prints. Fragment failures are handed to
:meth:`DiagnosticEmitter.warning` and every document run closes with one
structured event (``fragment_run`` or ``fragment_run_skipped``); the host
decides how either is shown.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Sink for fragment warnings and run events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter discarding every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return None

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return None


class LoggingEmitter:
    """Emitter writing warnings and run summaries to a :mod:`logging` logger."""

    def __init__(
        self, target: logging.Logger | None = None, *, debug_enabled: bool = False
    ) -> None:
        self.logger = target or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.logger.warning(message, exc_info=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message is None:
            self.logger.debug("%s: %s", name, dict(payload))
        else:
            self.logger.info(message)


@dataclass(slots=True)
class RecordingEmitter:
    """Emitter keeping diagnostics in memory, for hosts and tests."""

    debug_enabled: bool = False
    warnings: list[str] = field(default_factory=list)
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _describe_run(payload: Mapping[str, Any]) -> str:
    counts = [
        f"{payload[key]} {key}"
        for key in ("substituted", "removed", "unchanged")
        if payload.get(key)
    ]
    if payload.get("warnings"):
        counts.append(_plural(payload["warnings"], "warning"))
    summary = f"Processed {_plural(payload.get('fragments', 0), 'fragment')}"
    summary += f" in {payload.get('input') or '<input>'}"
    return f"{summary} ({', '.join(counts)})" if counts else summary


def _describe_skip(payload: Mapping[str, Any]) -> str:
    source = payload.get("input") or "<input>"
    return f"Skipping {source}: front matter does not set '{payload.get('key')}: true'"


_EVENT_FORMATTERS: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "fragment_run": _describe_run,
    "fragment_run_skipped": _describe_skip,
}


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return the one-line summary of a run event, or None for other events."""
    formatter = _EVENT_FORMATTERS.get(name)
    return formatter(payload) if formatter is not None else None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]
