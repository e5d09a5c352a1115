"""Rich rendering of fragment warnings and run summaries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rich.traceback import Traceback

from execsmith.core.diagnostics import format_event_message

from .state import CLIState, emit_warning, get_cli_state, render_message


class CliEmitter:
    """Show fragment warnings on stderr and run summaries at ``-v``.

    With ``--debug`` the exception behind a warning is printed as a rich
    traceback below it.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self.state = state or get_cli_state()
        self.debug_enabled = (
            self.state.show_tracebacks if debug_enabled is None else debug_enabled
        )

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)
        if exc is not None and self.debug_enabled:
            self.state.err_console.print(
                Traceback.from_exception(type(exc), exc, exc.__traceback__)
            )

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if self.state.verbosity < 1:
            return
        message = format_event_message(name, payload)
        if message is not None:
            render_message("info", message)


__all__ = ["CliEmitter"]
