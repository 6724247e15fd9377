"""Tests for the action report and history log."""

import tempfile

from crit.daemon import append_history, get_history, get_last_action, report_actions
from crit.daemon.reporter import format_actions, record_actions
from crit.models import ChangeAction, HistoryAction, HistoryEntry, ProcessResult
from crit.paths import get_history_path


def _actions():
    return [
        ProcessResult(action=ChangeAction.SUGGEST_TEST, details="New source file: src/a.ts"),
        ProcessResult(action=ChangeAction.UPDATE_CONTEXT, details="Documentation updated: README.md"),
        ProcessResult(action=ChangeAction.SUGGEST_TEST, details="New source file: src/b.ts"),
    ]


class TestReport:
    """Tests for last_action.md."""

    def test_format_groups_by_action(self):
        text = format_actions(_actions(), timestamp="2024-05-01T00:00:00.000Z")

        assert text.startswith("# Last Daemon Actions")
        assert "**Time:** 2024-05-01T00:00:00.000Z" in text
        assert "**Actions:** 3" in text
        assert text.index("## Test Suggestions") < text.index("## Context Updates")
        assert "- New source file: src/a.ts\n- New source file: src/b.ts" in text

    def test_report_and_read_back(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert get_last_action(tmpdir) is None

            report_actions(tmpdir, _actions())

            assert "## Test Suggestions" in get_last_action(tmpdir)

    def test_empty_batch_writes_nothing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert report_actions(tmpdir, []) is None
            assert get_last_action(tmpdir) is None


class TestHistory:
    """Tests for history.jsonl."""

    def test_append_and_read(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            append_history(tmpdir, HistoryEntry(action=HistoryAction.UPDATE_DOCS, description="one"))
            append_history(tmpdir, HistoryEntry(action=HistoryAction.SUGGEST, description="two"))

            entries = get_history(tmpdir)
            latest = get_history(tmpdir, limit=1)

        assert [e.description for e in entries] == ["one", "two"]
        assert [e.description for e in latest] == ["two"]

    def test_record_actions_maps_action_names(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            actions = _actions() + [
                ProcessResult(action=ChangeAction.CHECK_RULES, details="Source file modified: c.ts"),
                ProcessResult(action=ChangeAction.NONE, details="File add: data.json"),
            ]

            written = record_actions(tmpdir, actions, ["src/a.ts", "README.md"])
            entries = get_history(tmpdir)

        assert written == 4
        assert [e.action for e in entries] == [
            HistoryAction.SUGGEST,
            HistoryAction.UPDATE_DOCS,
            HistoryAction.SUGGEST,
            HistoryAction.APPLY_RULE,
        ]
        assert entries[0].files == ["src/a.ts", "README.md"]

    def test_missing_history(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert get_history(tmpdir) == []

    def test_corrupt_history(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = get_history_path(tmpdir)
            path.parent.mkdir(parents=True)
            path.write_text('{"action": "fix"\n')

            assert get_history(tmpdir) == []
