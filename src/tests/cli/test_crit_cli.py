"""Tests for the crit command line."""

import tempfile
from pathlib import Path

from click.testing import CliRunner

from crit.cli import main
from crit.criticism import CriticismStore, PreferenceLog, generate_criticism_id
from crit.models import Criticism, CriticismCategory, CriticismStatus
from crit.paths import get_config_path, get_preferences_path


def _seed(root: Path) -> Criticism:
    subject = "unused import: spare"
    criticism = Criticism(
        id=generate_criticism_id(CriticismCategory.ELIM, subject, ["src/a.ts"]),
        category=CriticismCategory.ELIM,
        subject=subject,
        description="Found 1 unused import: spare.",
        files=["src/a.ts"],
        location="src/a.ts:1",
    )
    CriticismStore(root).add_criticism(criticism)
    return criticism


class TestCli:
    """Tests for CLI commands."""

    def test_init(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            runner = CliRunner()
            result = runner.invoke(main, ["--root", tmpdir, "init"])

            assert result.exit_code == 0
            assert get_preferences_path(tmpdir).exists()
            assert get_config_path(tmpdir).exists()

    def test_analyze(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "a.ts").write_text('import { spare } from "./lib";\n')

            result = CliRunner().invoke(main, ["--root", tmpdir, "analyze"])

            assert result.exit_code == 0
            assert "Files analyzed" in result.output
            assert len(CriticismStore(tmpdir).get_all()) == 1

    def test_list_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = CliRunner().invoke(main, ["--root", tmpdir, "list"])

            assert result.exit_code == 0
            assert "No pending criticisms" in result.output

    def test_list_by_category(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            criticism = _seed(Path(tmpdir))

            shown = CliRunner().invoke(main, ["--root", tmpdir, "list", "--category", "elim"])
            hidden = CliRunner().invoke(main, ["--root", tmpdir, "list", "--category", "TEST"])

            assert criticism.id in shown.output
            assert "No pending criticisms" in hidden.output

    def test_reject_logs_preference(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            criticism = _seed(Path(tmpdir))

            result = CliRunner().invoke(
                main, ["--root", tmpdir, "reject", criticism.id, "--reason", "re-exported"]
            )

            assert result.exit_code == 0
            assert CriticismStore(tmpdir).get(criticism.id).status == CriticismStatus.REJECTED
            assert PreferenceLog(tmpdir).get_rejection_reason(
                criticism.category, criticism.subject
            ) == "re-exported"

    def test_review_unknown_id(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            result = CliRunner().invoke(main, ["--root", tmpdir, "accept", "elim-00000000"])

            assert result.exit_code == 1
            assert "No criticism" in result.output

    def test_skip_and_clean(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            criticism = _seed(Path(tmpdir))
            runner = CliRunner()

            runner.invoke(main, ["--root", tmpdir, "skip", criticism.id])
            result = runner.invoke(main, ["--root", tmpdir, "clean"])

            assert "Removed 0 resolved criticisms" in result.output
            assert CriticismStore(tmpdir).get(criticism.id).status == CriticismStatus.SKIPPED

    def test_invalid_config_does_not_crash(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = get_config_path(tmpdir)
            path.parent.mkdir(parents=True)
            path.write_text("debounce_seconds: abc\n")

            result = CliRunner().invoke(main, ["--root", tmpdir, "list"])

            assert result.exit_code == 0
            assert "No pending criticisms" in result.output
