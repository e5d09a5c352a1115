"""Markdown-to-HTML pipeline running executable fragments.

Architecture
: `run_markdown` renders Markdown through the adapter, parses the HTML with
  BeautifulSoup, hands the tree to :class:`DocumentController`, and
  serialises the mutated tree back to HTML.
: `run_file` reads a Markdown file and forwards its path so warnings name the
  input and positions can be resolved against the raw file.

Usage Example
:
    >>> from execsmith.api.pipeline import run_markdown
    >>> result = run_markdown("---\\npython-elements: true\\n---\\n6 * 7 is `6 * 7`{.python}\\n")
    >>> result.html
    '<p>6 * 7 is 42</p>'
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup

from ..adapters.markdown import render_markdown
from ..core.config import ExecConfig
from ..core.controller import DocumentController, DocumentRun
from ..core.diagnostics import DiagnosticEmitter, NullEmitter


__all__ = ["PipelineResult", "run_file", "run_markdown"]


@dataclass(slots=True)
class PipelineResult:
    """HTML produced by a pipeline run together with its execution record."""

    html: str
    run: DocumentRun
    front_matter: dict[str, Any] = field(default_factory=dict)


def run_markdown(
    source: str,
    *,
    input_path: str | Path | None = None,
    config: ExecConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
    extensions: Sequence[str] | None = None,
    bindings: Mapping[str, Any] | None = None,
) -> PipelineResult:
    """Render Markdown to HTML, executing fragments when the document opts in."""
    document = render_markdown(source, extensions)
    soup = BeautifulSoup(document.html, "html.parser")
    controller = DocumentController(config, emitter=emitter or NullEmitter())
    run = controller.process(
        soup,
        document.front_matter,
        input_path=input_path,
        source=source,
        bindings=bindings,
    )
    return PipelineResult(html=str(soup), run=run, front_matter=document.front_matter)


def run_file(
    path: str | Path,
    *,
    config: ExecConfig | None = None,
    emitter: DiagnosticEmitter | None = None,
    extensions: Sequence[str] | None = None,
    bindings: Mapping[str, Any] | None = None,
) -> PipelineResult:
    """Read ``path`` as UTF-8 Markdown and run it through :func:`run_markdown`."""
    source_path = Path(path)
    source = source_path.read_text(encoding="utf-8")
    return run_markdown(
        source,
        input_path=source_path,
        config=config,
        emitter=emitter,
        extensions=extensions,
        bindings=bindings,
    )
