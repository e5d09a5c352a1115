from __future__ import annotations

from bs4 import BeautifulSoup
import pytest

from execsmith.core.diagnostics import RecordingEmitter
from execsmith.core.elements import ElementFactory
from execsmith.core.environment import ExecutionEnvironment
from execsmith.core.exceptions import ExecError, InvalidReturnValue, ParseError
from execsmith.core.executor import (
    FragmentExecutor,
    Removed,
    Substituted,
    Unchanged,
    apply_outcome,
)
from execsmith.core.locator import SourceLocator


def _executor(
    soup: BeautifulSoup, source: str = "", emitter: RecordingEmitter | None = None
) -> FragmentExecutor:
    environment = ExecutionEnvironment.create({"html": ElementFactory(soup), "document": soup})
    return FragmentExecutor(
        environment,
        SourceLocator(source),
        emitter=emitter or RecordingEmitter(),
        input_name="doc.md",
    )


def _block(code: str, **attrs: str) -> BeautifulSoup:
    attributes = "".join(f' {key}="{value}"' for key, value in attrs.items())
    return BeautifulSoup(
        f'<div><pre><code class="language-python"{attributes}>{code}</code></pre></div>',
        "html.parser",
    )


def _inline(code: str, **attrs: str) -> BeautifulSoup:
    attributes = "".join(f' {key}="{value}"' for key, value in attrs.items())
    return BeautifulSoup(f'<p>A <code class="python"{attributes}>{code}</code>.</p>', "html.parser")


def test_non_fragment_nodes_are_ignored() -> None:
    soup = BeautifulSoup("<p>plain</p>", "html.parser")

    assert _executor(soup).process(soup.p) is None


def test_block_returning_nothing_is_removed_without_warning() -> None:
    soup = _block("x = 1\n")
    emitter = RecordingEmitter()
    executor = _executor(soup, emitter=emitter)

    fragment, outcome = executor.process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Removed)
    assert emitter.warnings == []
    assert str(soup) == "<div></div>"
    assert executor.environment.get("x") == 1


def test_block_returning_empty_list_is_removed() -> None:
    soup = _block("return []\n")
    emitter = RecordingEmitter()

    _, outcome = _executor(soup, emitter=emitter).process(soup.pre)

    assert isinstance(outcome, Removed)
    assert emitter.warnings == []


def test_block_returning_nodes_is_substituted_in_order() -> None:
    soup = _block("return [html.p('one'), html.p('two')]\n")
    executor = _executor(soup)

    fragment, outcome = executor.process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Substituted)
    assert str(soup) == "<div><p>one</p><p>two</p></div>"


def test_block_returning_mixed_list_warns_and_is_unchanged() -> None:
    soup = _block("return [html.p('one'), 'two']\n")
    emitter = RecordingEmitter()
    before = str(soup)

    fragment, outcome = _executor(soup, emitter=emitter).process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Unchanged)
    assert isinstance(outcome.warning, InvalidReturnValue)
    assert len(emitter.warnings) == 1
    assert "Received invalid return value" in emitter.warnings[0]
    assert "block-level element" in emitter.warnings[0]
    assert str(soup) == before


def test_inline_returning_none_warns_and_is_unchanged() -> None:
    soup = _inline("x = 3")
    emitter = RecordingEmitter()
    before = str(soup)

    fragment, outcome = _executor(soup, emitter=emitter).process(soup.code)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Unchanged)
    assert isinstance(outcome.warning, InvalidReturnValue)
    assert "a number, or a string" in emitter.warnings[0]
    assert str(soup) == before


def test_inline_number_is_substituted_with_text() -> None:
    soup = _inline("3.14")

    fragment, outcome = _executor(soup).process(soup.code)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Substituted)
    assert str(soup) == "<p>A 3.14.</p>"


def test_inline_falls_back_to_statements() -> None:
    soup = _inline("value = 2; return value * 21")

    fragment, outcome = _executor(soup).process(soup.code)
    apply_outcome(fragment, outcome)

    assert str(soup) == "<p>A 42.</p>"


def test_inline_returning_inline_node_is_substituted() -> None:
    soup = _inline("html.em('hi')")

    fragment, outcome = _executor(soup).process(soup.code)
    apply_outcome(fragment, outcome)

    assert str(soup) == "<p>A <em>hi</em>.</p>"


def test_block_does_not_use_expression_shortcut() -> None:
    soup = _block("html.p('x')\n")
    emitter = RecordingEmitter()

    _, outcome = _executor(soup, emitter=emitter).process(soup.pre)

    # The expression statement runs, but nothing is returned.
    assert isinstance(outcome, Removed)
    assert emitter.warnings == []


def test_disabled_block_without_include_is_kept_verbatim() -> None:
    soup = _block("this is not python(\n", exec="false")
    emitter = RecordingEmitter()
    before = str(soup)

    fragment, outcome = _executor(soup, emitter=emitter).process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Unchanged)
    assert outcome.warning is None
    assert emitter.warnings == []
    assert str(soup) == before


def test_disabled_block_with_include_false_is_removed_unparsed() -> None:
    soup = _block("this is not python(\n", exec="false", include="false")
    emitter = RecordingEmitter()

    fragment, outcome = _executor(soup, emitter=emitter).process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Removed)
    assert emitter.warnings == []
    assert str(soup) == "<div></div>"


def test_disabled_inline_ignores_include() -> None:
    soup = _inline("1", exec="false", include="false")

    _, outcome = _executor(soup).process(soup.code)

    assert isinstance(outcome, Unchanged)
    assert outcome.warning is None


def test_disabled_fragment_never_runs() -> None:
    soup = _block("ran = True\n", exec="false")
    executor = _executor(soup)

    executor.process(soup.pre)

    assert "ran" not in executor.environment


def test_unknown_exec_values_still_execute() -> None:
    soup = _inline("1 + 1", exec="flase")

    _, outcome = _executor(soup).process(soup.code)

    assert isinstance(outcome, Substituted)


def test_parse_error_warns_with_position() -> None:
    source = "Intro\n\n```python\ndef broken(:\n```\n"
    soup = _block("def broken(:\n")
    emitter = RecordingEmitter()

    _, outcome = _executor(soup, source, emitter).process(soup.pre)

    assert isinstance(outcome, Unchanged)
    assert isinstance(outcome.warning, ParseError)
    assert outcome.warning.position.line == 4
    assert emitter.warnings[0].startswith(
        "The following error occurred while parsing the code block in doc.md at line 4:"
    )


def test_exec_error_warns_with_exception_text() -> None:
    source = "Value: `1 / 0`\n"
    soup = _inline("1 / 0")
    emitter = RecordingEmitter()

    _, outcome = _executor(soup, source, emitter).process(soup.code)

    assert isinstance(outcome, Unchanged)
    assert isinstance(outcome.warning, ExecError)
    assert isinstance(outcome.warning.__cause__, ZeroDivisionError)
    assert "inline code element in doc.md at line 1 column 7" in emitter.warnings[0]
    assert "ZeroDivisionError: division by zero" in emitter.warnings[0]


def test_unknown_position_is_reported_with_placeholders() -> None:
    soup = _inline("undefined_name")
    emitter = RecordingEmitter()

    _executor(soup, "no match here", emitter).process(soup.code)

    assert "at line ?? column ??" in emitter.warnings[0]
    assert "NameError" in emitter.warnings[0]


def test_failure_does_not_stop_later_fragments() -> None:
    soup = BeautifulSoup(
        '<p><code class="python">1 / 0</code><code class="python">2</code></p>', "html.parser"
    )
    executor = _executor(soup)

    outcomes = [executor.process(node) for node in soup.find_all("code")]

    assert isinstance(outcomes[0][1], Unchanged)
    assert isinstance(outcomes[1][1], Substituted)


class _CapturingEmitter:
    def __init__(self, debug_enabled: bool) -> None:
        self.debug_enabled = debug_enabled
        self.exceptions: list[BaseException | None] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.exceptions.append(exc)

    def event(self, name: str, payload: object) -> None:
        return


@pytest.mark.parametrize("debug_enabled", [False, True])
def test_exception_is_forwarded_only_in_debug_mode(debug_enabled: bool) -> None:
    emitter = _CapturingEmitter(debug_enabled)
    soup = _inline("1 / 0")
    executor = FragmentExecutor(
        ExecutionEnvironment.create(), SourceLocator(""), emitter=emitter
    )

    executor.process(soup.code)

    assert (emitter.exceptions[0] is not None) is debug_enabled


def test_inline_returning_the_document_is_rejected() -> None:
    soup = _inline("document")
    executor = _executor(soup)

    _, outcome = executor.process(soup.code)

    assert isinstance(outcome, Unchanged)
    assert isinstance(outcome.warning, InvalidReturnValue)
    assert str(soup) == '<p>A <code class="python">document</code>.</p>'


def test_block_returning_its_ancestor_is_rejected() -> None:
    soup = _block('return document.find("div")\n')
    emitter = RecordingEmitter()

    _, outcome = _executor(soup, emitter=emitter).process(soup.pre)

    assert isinstance(outcome.warning, InvalidReturnValue)
    assert "cannot contain the fragment that produced them" in emitter.warnings[0]


def test_block_detaching_itself_is_reported() -> None:
    soup = _block('document.find("pre").extract()\nreturn html.p("late")\n')

    _, outcome = _executor(soup).process(soup.pre)

    assert isinstance(outcome.warning, ExecError)
    assert "removed from the document while it ran" in str(outcome.warning)
    assert str(soup) == "<div></div>"


def test_refused_tree_edit_becomes_a_warning() -> None:
    soup = _inline("1")
    emitter = RecordingEmitter()
    executor = _executor(soup, emitter=emitter)
    fragment, outcome = executor.process(soup.code)
    fragment.node.extract()

    applied = executor.apply(fragment, outcome)

    assert isinstance(applied, Unchanged)
    assert isinstance(applied.warning, ExecError)
    assert "ValueError" in emitter.warnings[0]
    assert str(soup) == "<p>A .</p>"


def test_apply_returns_the_outcome_it_applied() -> None:
    soup = _inline("6 * 7")
    executor = _executor(soup)
    fragment, outcome = executor.process(soup.code)

    assert executor.apply(fragment, outcome) is outcome
    assert str(soup) == "<p>A 42.</p>"


def test_block_with_star_import_is_substituted() -> None:
    soup = _block("from math import *\nreturn html.p(str(floor(2.5)))\n")

    fragment, outcome = _executor(soup).process(soup.pre)
    apply_outcome(fragment, outcome)

    assert isinstance(outcome, Substituted)
    assert str(soup) == "<div><p>2</p></div>"
