"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
EXECUTION_PANEL = "Execution"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"

InputPathArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="INPUT",
        help="Markdown document whose Python fragments should be executed.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

MarkdownExtensionsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--enable-extension",
        "-x",
        help="Additional Markdown extensions to enable (comma or space separated).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

DisableMarkdownExtensionsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--disable-extension",
        "-d",
        help="Markdown extensions to disable (comma or space separated).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

EnableKeyOption = Annotated[
    str | None,
    typer.Option(
        "--enable-key",
        help="Front matter key that must be set to true to run fragments.",
        show_default=False,
        rich_help_panel=EXECUTION_PANEL,
    ),
]

MarkerClassOption = Annotated[
    list[str] | None,
    typer.Option(
        "--marker-class",
        help="Class marking executable code elements (repeatable).",
        show_default=False,
        rich_help_panel=EXECUTION_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Output HTML file. Defaults to stdout.",
        show_default=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]
