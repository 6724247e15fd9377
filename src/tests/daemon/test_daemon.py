"""Tests for daemon analysis and wiring."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from crit.config import CritConfig
from crit.criticism import CriticismStore, review_criticism
from crit.daemon import (
    CritDaemon,
    analyze_changes,
    analyze_project,
    find_test_path,
    get_history,
    get_last_action,
    run_clone_detection,
    start_daemon,
)
from crit.models import CriticismCategory, CriticismStatus, WatchEvent, WatchEventType
from crit.watcher import file_watcher

DUPLICATED = """export function total(items) {
  let sum = 0;
  for (const item of items) {
    sum += item.price * item.quantity;
  }
  return sum;
}
"""


UNUSED_IMPORT = 'import { spare } from "./lib";\nexport const value = 1;\n'


def _write(root: Path, name: str, content: str = "export const value = 1;\n") -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def _add(path):
    return WatchEvent(type=WatchEventType.ADD, path=path)


class TestFindTestPath:
    """Tests for locating test files."""

    @pytest.mark.parametrize(
        "test_name",
        ["util.test.ts", "util.spec.ts", "__tests__/util.ts", "__tests__/util.test.ts"],
    )
    def test_conventions(self, test_name):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            source = _write(root, "src/util.ts")
            expected = _write(root, f"src/{test_name}")

            assert find_test_path(source) == expected

    def test_no_test(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            source = _write(Path(tmpdir), "src/util.ts")
            assert find_test_path(source) is None


class TestAnalyzeChanges:
    """Tests for batch analysis."""

    @pytest.mark.asyncio
    async def test_new_file_without_test(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")

            result = await analyze_changes(root, [_add("src/util.ts")])
            stored = CriticismStore(root).get_pending_criticisms()

        assert len(result.criticisms) == 1
        criticism = result.criticisms[0]
        assert criticism.category == CriticismCategory.TEST
        assert criticism.subject == "missing tests for util.ts"
        assert criticism.location == "src/util.ts"
        assert [c.id for c in stored] == [criticism.id]

    @pytest.mark.asyncio
    async def test_new_file_with_test(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")
            _write(root, "src/util.test.ts")

            result = await analyze_changes(root, [_add("src/util.ts")])

        assert result.criticisms == []

    @pytest.mark.asyncio
    async def test_non_source_events_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "README.md", "# readme\n")
            _write(root, "src/util.test.ts")

            result = await analyze_changes(root, [
                _add("README.md"),
                _add("src/util.test.ts"),
                WatchEvent(type=WatchEventType.UNLINK, path="src/gone.ts"),
            ])

        assert result.criticisms == []
        assert result.stats.files_analyzed == 0

    @pytest.mark.asyncio
    async def test_modified_file_gets_no_test_criticism(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")

            result = await analyze_changes(
                root, [WatchEvent(type=WatchEventType.CHANGE, path="src/util.ts")]
            )

        assert result.criticisms == []
        assert result.stats.files_analyzed == 1

    @pytest.mark.asyncio
    async def test_rejected_criticism_not_resuggested(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")

            first = await analyze_changes(root, [_add("src/util.ts")])
            review_criticism(root, first.criticisms[0].id, "rejected", "tested elsewhere")
            CriticismStore(root).clear_resolved()

            second = await analyze_changes(root, [_add("src/util.ts")])

            assert second.criticisms == []
            assert CriticismStore(root).get_all() == []


class TestProjectAnalysis:
    """Tests for cold-start and clone runs."""

    @pytest.mark.asyncio
    async def test_rerun_does_not_reset_review(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "a.ts", DUPLICATED)
            _write(root, "b.ts", DUPLICATED)

            first = await analyze_project(root)
            clone = first.criticisms[0]
            review_criticism(root, clone.id, CriticismStatus.SKIPPED)

            await analyze_project(root)
            store = CriticismStore(root)

            assert len(store.get_all()) == 1
            assert store.get(clone.id).status == CriticismStatus.SKIPPED

    @pytest.mark.asyncio
    async def test_run_clone_detection(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "a.ts", DUPLICATED)
            _write(root, "b.ts", DUPLICATED)

            result = await run_clone_detection(root)

            assert result.stats.clones_found == 1
            assert len(CriticismStore(root).get_all()) == 1
            assert CriticismStore(root).load().last_analysis

    @pytest.mark.asyncio
    async def test_rejected_clone_not_resuggested(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "a.ts", DUPLICATED)
            _write(root, "b.ts", DUPLICATED)

            first = await analyze_project(root)
            clone = first.criticisms[0]
            assert clone.subject == "duplicated code block (6+ lines)"
            review_criticism(root, clone.id, CriticismStatus.REJECTED, "generated code")
            CriticismStore(root).clear_resolved()

            second = await analyze_project(root)

            assert second.stats.clones_found == 1
            assert second.criticisms == []
            assert CriticismStore(root).get_by_category(CriticismCategory.SIMPLIFY) == []


class TestCritDaemon:
    """Tests for CritDaemon."""

    @pytest.mark.asyncio
    async def test_handle_batch_side_effects(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")
            actions, counts = [], []

            daemon = CritDaemon(
                root,
                config=CritConfig(),
                on_actions=actions.append,
                on_criticisms=counts.append,
            )
            result = await daemon.handle_batch([_add("src/util.ts")])

            assert len(result.criticisms) == 1
            assert counts == [1]
            assert len(actions) == 1
            assert "New source file: src/util.ts" in get_last_action(root)
            assert [e.files for e in get_history(root)] == [["src/util.ts"]]

    @pytest.mark.asyncio
    async def test_side_effects_can_be_disabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")
            config = CritConfig(write_history=False, write_reports=False, analyze_criticisms=False)

            daemon = CritDaemon(root, config=config)
            result = await daemon.handle_batch([_add("src/util.ts")])

            assert result is None
            assert get_last_action(root) is None
            assert get_history(root) == []
            assert CriticismStore(root).get_all() == []

    @pytest.mark.asyncio
    async def test_end_to_end(self):
        """Test a new file flows through watcher, batcher and analyzers."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            events = []
            config = CritConfig(debounce_seconds=0.05)
            daemon = await start_daemon(root, config=config, on_event=events.append)
            try:
                _write(daemon.project_root, "util.ts", UNUSED_IMPORT)

                store = CriticismStore(daemon.project_root)
                for _ in range(100):
                    if store.get_all():
                        break
                    await asyncio.sleep(0.05)
            finally:
                daemon.stop()
                daemon.stop()
                await daemon.batcher.drain()

            assert events
            assert "unused import: spare" in [c.subject for c in store.get_all()]
            assert not daemon.is_running

    @pytest.mark.asyncio
    async def test_observer_failure_does_not_stop_daemon(self, monkeypatch, caplog):
        """Test the daemon keeps processing batches without live events."""
        def fail(self):
            raise OSError("inotify watch limit reached")

        monkeypatch.setattr(file_watcher.Observer, "start", fail)

        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "src/util.ts")

            daemon = await start_daemon(root, config=CritConfig())
            try:
                assert not daemon.is_running
                assert "Live watching unavailable" in caplog.text

                result = await daemon.handle_batch([_add("src/util.ts")])
                assert len(result.criticisms) == 1
            finally:
                daemon.stop()
