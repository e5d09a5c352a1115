"""Implementation of the primary ``execsmith`` CLI command."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import ValidationError
import typer

from execsmith.adapters.markdown import (
    DEFAULT_MARKDOWN_EXTENSIONS,
    MarkdownConversionError,
    resolve_markdown_extensions,
)
from execsmith.api.pipeline import run_file
from execsmith.core.config import ExecConfig
from execsmith.version import get_version

from .._options import (
    DIAGNOSTICS_PANEL,
    DisableMarkdownExtensionsOption,
    EnableKeyOption,
    InputPathArgument,
    MarkdownExtensionsOption,
    MarkerClassOption,
    OutputPathOption,
)
from ..diagnostics import CliEmitter
from ..state import emit_error, set_cli_state
from ..utils import write_output_file


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


def run(
    ctx: typer.Context,
    inputs: InputPathArgument = None,
    output: OutputPathOption = None,
    markdown_extensions: MarkdownExtensionsOption = None,
    disable_markdown_extensions: DisableMarkdownExtensionsOption = None,
    enable_key: EnableKeyOption = None,
    marker_classes: MarkerClassOption = None,
    list_extensions: Annotated[
        bool,
        typer.Option(
            "--list-extensions",
            help="List Markdown extensions enabled by default and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Attach tracebacks to fragment warnings and unexpected errors.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the installed version and exit.",
            rich_help_panel=DIAGNOSTICS_PANEL,
        ),
    ] = False,
) -> None:
    """Execute Python fragments of a Markdown document and emit HTML."""
    if list_extensions:
        for extension in DEFAULT_MARKDOWN_EXTENSIONS:
            typer.echo(extension)
        raise typer.Exit()

    if inputs is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    state = set_cli_state(verbosity=verbose, debug=debug)
    emitter = CliEmitter(state=state)

    overrides: dict[str, Any] = {}
    if enable_key is not None:
        overrides["enable_key"] = enable_key
    if marker_classes:
        overrides["marker_classes"] = tuple(marker_classes)
    try:
        config = ExecConfig(**overrides)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    extensions = resolve_markdown_extensions(markdown_extensions, disable_markdown_extensions)

    try:
        result = run_file(inputs, config=config, emitter=emitter, extensions=extensions)
    except (OSError, UnicodeDecodeError) as exc:
        emit_error(f"Failed to read '{inputs}': {exc}", exception=exc)
        raise typer.Exit(code=1) from exc
    except MarkdownConversionError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if output is None:
        typer.echo(result.html)
    else:
        write_output_file(output, result.html)
        if state.verbosity >= 1:
            state.err_console.log(f"Wrote {output}")


__all__ = ["run"]
