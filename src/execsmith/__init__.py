"""Primary public API for execsmith."""

from __future__ import annotations

from execsmith.api import (
    DiagnosticEmitter,
    DocumentController,
    DocumentRun,
    ExecConfig,
    LoggingEmitter,
    NullEmitter,
    PipelineResult,
    RecordingEmitter,
    run_file,
    run_markdown,
)
from execsmith.core.elements import ElementFactory, FragmentLevel
from execsmith.core.environment import ExecutionEnvironment
from execsmith.core.evaluator import CompileMode, Evaluator, PythonEvaluator
from execsmith.core.exceptions import ExecError, FragmentError, InvalidReturnValue, ParseError
from execsmith.core.executor import FragmentExecutor, Removed, Substituted, Unchanged
from execsmith.core.fragments import Fragment
from execsmith.core.locator import UNKNOWN_POSITION, SourceLocator, SourcePosition
from execsmith.version import get_version


__version__ = get_version()

__all__ = [
    "UNKNOWN_POSITION",
    "CompileMode",
    "DiagnosticEmitter",
    "DocumentController",
    "DocumentRun",
    "ElementFactory",
    "Evaluator",
    "ExecConfig",
    "ExecError",
    "ExecutionEnvironment",
    "Fragment",
    "FragmentError",
    "FragmentExecutor",
    "FragmentLevel",
    "InvalidReturnValue",
    "LoggingEmitter",
    "NullEmitter",
    "ParseError",
    "PipelineResult",
    "PythonEvaluator",
    "RecordingEmitter",
    "Removed",
    "SourceLocator",
    "SourcePosition",
    "Substituted",
    "Unchanged",
    "__version__",
    "get_version",
    "run_file",
    "run_markdown",
]
