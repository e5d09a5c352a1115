from __future__ import annotations

import logging

import pytest

from execsmith.core.diagnostics import (
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    format_event_message,
)
from execsmith.ui.cli.diagnostics import CliEmitter
from execsmith.ui.cli.state import emit_warning, set_cli_state


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False


def test_logging_emitter_logs_warnings(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.WARNING):
        emitter.warning("careful")
        emitter.warning("with cause", ValueError("boom"))
    assert [record.message for record in caplog.records] == ["careful", "with cause"]
    assert caplog.records[0].exc_info is None
    assert caplog.records[1].exc_info[0] is ValueError
    assert emitter.debug_enabled is True


def test_logging_emitter_accepts_custom_logger(caplog: pytest.LogCaptureFixture) -> None:
    target = logging.getLogger("execsmith.tests.host")
    with caplog.at_level(logging.DEBUG, logger="execsmith.tests.host"):
        LoggingEmitter(target).event("custom", {"flag": True})
    assert [record.name for record in caplog.records] == ["execsmith.tests.host"]
    assert caplog.records[0].levelno == logging.DEBUG


def test_logging_emitter_summarises_known_events(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.INFO):
        emitter.event(
            "fragment_run",
            {"input": "doc.md", "fragments": 2, "substituted": 2, "warnings": 0},
        )
    assert [record.message for record in caplog.records] == [
        "Processed 2 fragments in doc.md (2 substituted)"
    ]


def test_recording_emitter_keeps_everything() -> None:
    emitter = RecordingEmitter()

    emitter.warning("first")
    emitter.warning("second", ValueError("x"))
    emitter.event("custom", {"flag": True})

    assert emitter.warnings == ["first", "second"]
    assert emitter.events == [("custom", {"flag": True})]


def test_format_event_message_for_runs() -> None:
    message = format_event_message(
        "fragment_run",
        {
            "input": "notes.md",
            "fragments": 1,
            "substituted": 0,
            "removed": 0,
            "unchanged": 1,
            "warnings": 1,
        },
    )

    assert message == "Processed 1 fragment in notes.md (1 unchanged, 1 warning)"


def test_format_event_message_for_skipped_documents() -> None:
    message = format_event_message("fragment_run_skipped", {"input": "a.md", "key": "run"})

    assert message == "Skipping a.md: front matter does not set 'run: true'"
    assert format_event_message("unknown", {}) is None


def test_cli_emitter_renders_warnings_and_summaries(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state(verbosity=1, debug=False)
    emitter = CliEmitter(state=state)

    emitter.warning("Heads up", exc=None)
    emitter.event("fragment_run", {"input": "doc.md", "fragments": 0})
    emitter.event("custom", {"flag": True})

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "warning: Heads up" in captured.err
    assert "Processed 0 fragments in doc.md" in captured.err
    assert "flag" not in captured.err


def test_cli_emitter_hides_summaries_without_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    state = set_cli_state(verbosity=0, debug=False)

    CliEmitter(state=state).event("fragment_run", {"input": "doc.md", "fragments": 1})

    assert capsys.readouterr().err == ""


def test_warning_causes_are_listed_at_verbose(capsys: pytest.CaptureFixture[str]) -> None:
    set_cli_state(verbosity=1, debug=False)
    try:
        try:
            raise KeyError("missing")
        except KeyError as exc:
            raise RuntimeError("lookup failed") from exc
    except RuntimeError as error:
        emit_warning("Fragment failed", exception=error)

    err = capsys.readouterr().err
    assert "caused by: lookup failed" in err
    assert "caused by: 'missing'" in err
    set_cli_state(verbosity=0)


def test_cli_emitter_follows_debug_flag() -> None:
    state = set_cli_state(verbosity=0, debug=True)

    assert CliEmitter(state=state).debug_enabled is True
    assert CliEmitter(state=state, debug_enabled=False).debug_enabled is False

    set_cli_state(debug=False)
