"""Whole-document driver for fragment execution.

The controller checks the front matter switch once, prepares the per-run
state (raw source for diagnostics, shared environment, locator cursor), and
walks the tree top-down in document order. Outcomes are applied in place
before the walk moves on, so later fragments see both the mutated namespace
and the mutated tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from .config import ExecConfig
from .diagnostics import DiagnosticEmitter, NullEmitter
from .elements import ElementFactory
from .environment import ExecutionEnvironment
from .evaluator import Evaluator, PythonEvaluator
from .exceptions import FragmentError
from .executor import (
    ExecutionOutcome,
    FragmentExecutor,
    Removed,
    Substituted,
    Unchanged,
)
from .fragments import Fragment
from .locator import SourceLocator, normalise_newlines


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DocumentRun:
    """Record of a single document pass."""

    enabled: bool
    input_name: str = "<input>"
    results: list[tuple[Fragment, ExecutionOutcome]] = field(default_factory=list)

    def record(self, fragment: Fragment, outcome: ExecutionOutcome) -> None:
        self.results.append((fragment, outcome))

    @property
    def outcomes(self) -> list[ExecutionOutcome]:
        return [outcome for _, outcome in self.results]

    @property
    def substituted(self) -> int:
        return sum(isinstance(outcome, Substituted) for outcome in self.outcomes)

    @property
    def removed(self) -> int:
        return sum(isinstance(outcome, Removed) for outcome in self.outcomes)

    @property
    def unchanged(self) -> int:
        return sum(isinstance(outcome, Unchanged) for outcome in self.outcomes)

    @property
    def warnings(self) -> list[FragmentError]:
        return [
            outcome.warning
            for outcome in self.outcomes
            if isinstance(outcome, Unchanged) and outcome.warning is not None
        ]

    def summary(self) -> dict[str, Any]:
        return {
            "input": self.input_name,
            "fragments": len(self.results),
            "substituted": self.substituted,
            "removed": self.removed,
            "unchanged": self.unchanged,
            "warnings": len(self.warnings),
        }


class DocumentController:
    """Gate, prepare, and drive fragment execution for whole documents."""

    def __init__(
        self,
        config: ExecConfig | None = None,
        *,
        emitter: DiagnosticEmitter | None = None,
        evaluator: Evaluator | None = None,
    ) -> None:
        self.config = config or ExecConfig()
        self.emitter = emitter or NullEmitter()
        self._evaluator = evaluator

    def enabled_for(self, metadata: Mapping[str, Any] | None) -> bool:
        """Return True when the front matter explicitly enables execution."""
        if not metadata:
            return False
        return metadata.get(self.config.enable_key) is True

    def process(
        self,
        document: Tag,
        metadata: Mapping[str, Any] | None,
        *,
        input_path: str | Path | None = None,
        source: str | None = None,
        bindings: Mapping[str, Any] | None = None,
    ) -> DocumentRun:
        """Execute every fragment of ``document`` and mutate it in place."""
        input_name = str(input_path) if input_path is not None else "<input>"
        if not self.enabled_for(metadata):
            self.emitter.event(
                "fragment_run_skipped", {"input": input_name, "key": self.config.enable_key}
            )
            return DocumentRun(enabled=False, input_name=input_name)

        raw_source = self._load_source(input_path, source)
        environment = ExecutionEnvironment.create(
            self._bindings(document, metadata or {}, bindings)
        )
        executor = FragmentExecutor(
            environment,
            SourceLocator(raw_source),
            marker_classes=self.config.marker_classes,
            evaluator=self._evaluator or PythonEvaluator(self.config.filename),
            emitter=self.emitter,
            input_name=input_name,
        )

        run = DocumentRun(enabled=True, input_name=input_name)
        self._walk(document, executor, run)
        self.emitter.event("fragment_run", run.summary())
        return run

    def _walk(self, parent: Tag, executor: FragmentExecutor, run: DocumentRun) -> None:
        for child in list(parent.children):
            # Earlier fragments may have detached or moved later siblings.
            if child.parent is not parent:
                continue
            result = executor.process(child)
            if result is not None:
                fragment, outcome = result
                outcome = executor.apply(fragment, outcome)
                run.record(fragment, outcome)
                continue
            if isinstance(child, Tag):
                self._walk(child, executor, run)

    def _load_source(self, input_path: str | Path | None, source: str | None) -> str:
        if source is None:
            if input_path is None:
                return ""
            try:
                source = Path(input_path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Source of %s is unavailable for diagnostics: %s", input_path, exc)
                return ""
        return normalise_newlines(source)

    def _bindings(
        self,
        document: Tag,
        metadata: Mapping[str, Any],
        extra: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        bindings: dict[str, Any] = {
            "document": document,
            "metadata": metadata,
            "html": ElementFactory(_owning_soup(document)),
        }
        if extra:
            bindings.update(extra)
        return bindings


def _owning_soup(node: Tag) -> BeautifulSoup:
    current: Tag | None = node
    while current is not None:
        if isinstance(current, BeautifulSoup):
            return current
        current = current.parent
    return BeautifulSoup("", "html.parser")


__all__ = ["DocumentController", "DocumentRun"]
