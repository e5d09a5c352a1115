"""Settings of the running command and stderr rendering helpers.

Standard output carries the generated HTML, so every diagnostic goes to a
rich console bound to ``sys.stderr``.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys

from rich.console import Console
from rich.text import Text

from execsmith.core.exceptions import exception_messages


__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]


_LEVEL_STYLES = {"warning": "yellow", "error": "red"}


@dataclass(slots=True)
class CLIState:
    """Verbosity and traceback settings of one CLI invocation."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def err_console(self) -> Console:
        """Console writing to the current ``sys.stderr``."""
        # Test runners swap sys.stderr between invocations.
        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console


_STATE: ContextVar[CLIState | None] = ContextVar("execsmith_cli_state", default=None)


def get_cli_state() -> CLIState:
    """Return the active CLI state, creating a default one on first use."""
    state = _STATE.get()
    if state is None:
        state = CLIState()
        _STATE.set(state)
    return state


def set_cli_state(*, verbosity: int | None = None, debug: bool | None = None) -> CLIState:
    """Update the active CLI state and return it."""
    state = get_cli_state()
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print ``message`` on stderr; ``-v`` adds the messages of ``exception``."""
    state = get_cli_state()
    if level == "info":
        state.err_console.log(message)
        return

    style = _LEVEL_STYLES.get(level, "yellow")
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is not None and state.verbosity >= 1:
        causes = [line for line in exception_messages(exception) if line not in message]
        if causes:
            text.append("\n" + "\n".join(f"  caused by: {line}" for line in causes), style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    """Print a warning on stderr."""
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    """Print an error on stderr."""
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether ``--debug`` asked for full tracebacks."""
    return get_cli_state().show_tracebacks
