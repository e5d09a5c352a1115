"""Facade over the fragment execution pipeline.

Architecture
: `run_markdown` and `run_file` cover the common case of turning a Markdown
  document into HTML with its fragments executed.
: `DocumentController`, `ExecConfig`, and the diagnostic emitters are
  re-exported for hosts that already own a parsed document tree.
"""

from __future__ import annotations

from ..core.config import ExecConfig
from ..core.controller import DocumentController, DocumentRun
from ..core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter, RecordingEmitter
from .pipeline import PipelineResult, run_file, run_markdown


__all__ = [
    "DiagnosticEmitter",
    "DocumentController",
    "DocumentRun",
    "ExecConfig",
    "LoggingEmitter",
    "NullEmitter",
    "PipelineResult",
    "RecordingEmitter",
    "run_file",
    "run_markdown",
]
