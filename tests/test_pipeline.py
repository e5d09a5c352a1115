from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup

from execsmith.api import RecordingEmitter, run_file, run_markdown
from execsmith.core.executor import Removed, Substituted, Unchanged


FRONT_MATTER = "---\npython-elements: true\n---\n\n"


def test_inline_expression_is_substituted() -> None:
    result = run_markdown(FRONT_MATTER + "The answer is `6 * 7`{.python}.\n")

    assert result.html == "<p>The answer is 42.</p>"
    assert result.front_matter == {"python-elements": True}


def test_documents_without_front_matter_switch_are_not_executed() -> None:
    body = "```{.python}\nraise RuntimeError('never')\n```\n\nInline `1 + 1`{.python}.\n"
    emitter = RecordingEmitter()

    result = run_markdown(body, emitter=emitter)

    soup = BeautifulSoup(result.html, "html.parser")
    assert result.run.enabled is False
    assert soup.find("pre") is not None
    assert soup.find("code", class_="python").get_text() == "1 + 1"
    assert emitter.warnings == []


def test_blocks_build_shared_state_and_render_nodes() -> None:
    source = FRONT_MATTER + (
        "```python\n"
        "items = ['alpha', 'beta']\n"
        "```\n"
        "\n"
        "```python\n"
        "return html.ul(*items)\n"
        "```\n"
        "\n"
        "There are `len(items)`{.python} items.\n"
    )

    result = run_markdown(source)

    assert result.html.strip() == "<ul><li>alpha</li><li>beta</li></ul>\n<p>There are 2 items.</p>"
    assert [type(outcome) for outcome in result.run.outcomes] == [Removed, Substituted, Substituted]


def test_exec_and_include_attributes() -> None:
    source = FRONT_MATTER + (
        '```{.python exec="false"}\n'
        "print('shown, not run')\n"
        "```\n"
        "\n"
        '```{.python exec="false" include="false"}\n'
        "this is not python (\n"
        "```\n"
    )
    emitter = RecordingEmitter()

    result = run_markdown(source, emitter=emitter)

    soup = BeautifulSoup(result.html, "html.parser")
    blocks = soup.find_all("pre")
    assert len(blocks) == 1
    assert blocks[0].get_text() == "print('shown, not run')\n"
    assert emitter.warnings == []
    assert [type(outcome) for outcome in result.run.outcomes] == [Unchanged, Removed]


def test_warnings_point_at_markdown_lines(tmp_path: Path) -> None:
    path = tmp_path / "report.md"
    path.write_text(
        FRONT_MATTER
        + "Intro paragraph.\n\n```python\nreturn 'not a node'\n```\n\nBroken `1 +`{.python}.\n",
        encoding="utf-8",
    )
    emitter = RecordingEmitter()

    result = run_file(path, emitter=emitter)

    assert len(emitter.warnings) == 2
    assert f"code block in {path} at line 8." in emitter.warnings[0]
    assert f"inline code element in {path} at line 11 column 7:" in emitter.warnings[1]
    assert "<pre><code" in result.html
    assert "1 +" in result.html
