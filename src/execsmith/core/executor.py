"""Execution of individual code fragments.

Each fragment passes through four gates, each of which may settle the
outcome on its own:

`Classify`
: nodes that are not fragments are ignored (``process`` returns None).

`Gate`
: ``exec="false"`` keeps the fragment as authored, or removes a block
  fragment that also sets ``include="false"``. The code is never compiled.

`Parse`
: inline fragments compile as an expression first and fall back to
  statements; block fragments only compile as statements.

`Execute`
: the compiled code runs against the shared environment. Whatever it
  returns is validated for the fragment level and turned into an outcome.

Parse, runtime, and return-value failures are reported as warnings and leave
the fragment untouched; no failure escapes the fragment that caused it. The
same holds for a tree edit that BeautifulSoup refuses while an outcome is
applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bs4.element import PageElement, Tag

from .config import DEFAULT_MARKER_CLASSES
from .diagnostics import DiagnosticEmitter, NullEmitter
from .elements import FragmentLevel
from .environment import ExecutionEnvironment
from .evaluator import CompiledFragment, CompileMode, Evaluator, PythonEvaluator
from .exceptions import (
    CompileError,
    ExecError,
    FragmentError,
    InvalidReturnValue,
    ParseError,
    describe_exception,
)
from .fragments import Fragment
from .locator import SourceLocator, SourcePosition
from .returns import InvalidReturn, expected_shape, validate_return


@dataclass(slots=True)
class Substituted:
    """The fragment is replaced by ``nodes``, in order."""

    nodes: list[PageElement]


@dataclass(slots=True)
class Removed:
    """The fragment is deleted from the document."""


@dataclass(slots=True)
class Unchanged:
    """The fragment stays as authored; ``warning`` explains why, if it failed."""

    warning: FragmentError | None = field(default=None)


ExecutionOutcome = Substituted | Removed | Unchanged


class FragmentExecutor:
    """Run fragments one at a time against a shared environment."""

    def __init__(
        self,
        environment: ExecutionEnvironment,
        locator: SourceLocator,
        *,
        marker_classes: tuple[str, ...] = DEFAULT_MARKER_CLASSES,
        evaluator: Evaluator | None = None,
        emitter: DiagnosticEmitter | None = None,
        input_name: str = "<input>",
    ) -> None:
        self.environment = environment
        self.locator = locator
        self.marker_classes = marker_classes
        self.evaluator = evaluator or PythonEvaluator()
        self.emitter = emitter or NullEmitter()
        self.input_name = input_name

    def process(self, node: Any) -> tuple[Fragment, ExecutionOutcome] | None:
        """Classify ``node`` and, when it is a fragment, execute it."""
        fragment = Fragment.from_node(node, self.marker_classes)
        if fragment is None:
            return None
        return fragment, self.execute(fragment)

    def execute(self, fragment: Fragment) -> ExecutionOutcome:
        """Return the outcome of ``fragment`` without touching the tree."""
        if not fragment.executes:
            if fragment.level is FragmentLevel.BLOCK and not fragment.included:
                return Removed()
            return Unchanged()

        position = fragment.position = self.locator.locate(fragment.text, fragment.level)

        try:
            compiled = self._compile(fragment)
        except CompileError as exc:
            return self._fail(ParseError(fragment.level, position, self.input_name, str(exc)), exc)

        try:
            value = self.evaluator.invoke(compiled, self.environment)
        except Exception as exc:  # noqa: BLE001 - fragment code is arbitrary
            error = ExecError(fragment.level, position, self.input_name, describe_exception(exc))
            return self._fail(error, exc)

        return self._outcome_for(fragment, position, value)

    def _compile(self, fragment: Fragment) -> CompiledFragment:
        if fragment.level is FragmentLevel.INLINE:
            try:
                return self.evaluator.compile(fragment.text, CompileMode.EXPRESSION)
            except CompileError:
                pass
        return self.evaluator.compile(fragment.text, CompileMode.STATEMENTS)

    def _outcome_for(
        self, fragment: Fragment, position: SourcePosition, value: Any
    ) -> ExecutionOutcome:
        result = validate_return(value, fragment.level)
        if isinstance(result, InvalidReturn):
            error = InvalidReturnValue(
                fragment.level,
                position,
                self.input_name,
                value,
                expected_shape(fragment.level),
            )
            return self._fail(error)
        if result.removes:
            return Removed()
        if fragment.node.parent is None:
            detail = "The fragment was removed from the document while it ran."
            return self._fail(ExecError(fragment.level, position, self.input_name, detail))
        if _encloses(result.nodes, fragment.node):
            error = InvalidReturnValue(
                fragment.level,
                position,
                self.input_name,
                value,
                "Returned elements cannot contain the fragment that produced them.",
            )
            return self._fail(error)
        return Substituted(result.nodes)

    def apply(self, fragment: Fragment, outcome: ExecutionOutcome) -> ExecutionOutcome:
        """Apply ``outcome`` to the tree, downgrading a refused edit to a warning."""
        try:
            apply_outcome(fragment, outcome)
        except ValueError as exc:
            error = ExecError(
                fragment.level, fragment.position, self.input_name, describe_exception(exc)
            )
            return self._fail(error, exc)
        return outcome

    def _fail(self, error: FragmentError, cause: BaseException | None = None) -> Unchanged:
        if cause is not None:
            error.__cause__ = cause
        self.emitter.warning(str(error), cause if self.emitter.debug_enabled else None)
        return Unchanged(error)


def _encloses(nodes: list[PageElement], node: Tag) -> bool:
    ancestors = {id(parent) for parent in node.parents}
    return any(id(candidate) in ancestors for candidate in nodes)


def apply_outcome(fragment: Fragment, outcome: ExecutionOutcome) -> None:
    """Reflect ``outcome`` in the document tree holding ``fragment``."""
    node: Tag = fragment.node
    match outcome:
        case Substituted(nodes):
            node.replace_with(*nodes)
        case Removed():
            node.extract()
        case Unchanged():
            pass


__all__ = [
    "ExecutionOutcome",
    "FragmentExecutor",
    "Removed",
    "Substituted",
    "Unchanged",
    "apply_outcome",
]
