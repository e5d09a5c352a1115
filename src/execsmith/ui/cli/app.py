"""Typer application and console script entry point."""

from __future__ import annotations

from rich.traceback import Traceback
import typer

from execsmith.ui.cli.commands.run import run

from .state import emit_error, get_cli_state


app = typer.Typer(
    help="Execute Python fragments embedded in Markdown documents.",
    add_completion=False,
    pretty_exceptions_enable=False,
)
app.command()(run)


def main() -> None:
    """Run the CLI, turning unexpected failures into exit status 1."""
    try:
        app()
    except Exception as exc:  # pragma: no cover - bugs outside fragment code
        state = get_cli_state()
        if state.show_tracebacks:
            state.err_console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__))
        else:
            emit_error(str(exc) or type(exc).__name__, exception=exc)
        raise SystemExit(1) from exc


__all__ = ["app", "main"]
