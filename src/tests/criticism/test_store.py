"""Tests for criticism storage."""

import json
import tempfile
from pathlib import Path

import pytest

from crit.criticism import CriticismStore, generate_criticism_id
from crit.models import (
    Criticism,
    CriticismCategory,
    CriticismSeverity,
    CriticismStatus,
)
from crit.paths import get_criticisms_path


def _criticism(subject="unused import: spare", files=None, category=CriticismCategory.ELIM):
    files = files or ["src/a.ts"]
    return Criticism(
        id=generate_criticism_id(category, subject, files),
        category=category,
        subject=subject,
        description="Found 1 unused import: spare.",
        files=files,
        location=f"{files[0]}:1",
    )


class TestGenerateCriticismId:
    """Tests for deterministic IDs."""

    def test_format(self):
        criticism_id = generate_criticism_id("ELIM", "subject", ["a.ts"])

        prefix, digest = criticism_id.split("-")
        assert prefix == "elim"
        assert len(digest) == 8
        int(digest, 16)

    def test_deterministic_and_order_independent(self):
        first = generate_criticism_id(CriticismCategory.SIMPLIFY, "dup", ["b.ts", "a.ts"])
        second = generate_criticism_id(CriticismCategory.SIMPLIFY, "dup", ["a.ts", "b.ts"])
        assert first == second

    def test_inputs_change_id(self):
        base = generate_criticism_id("TEST", "missing tests for a.ts", ["a.ts"])
        assert generate_criticism_id("ELIM", "missing tests for a.ts", ["a.ts"]) != base
        assert generate_criticism_id("TEST", "missing tests for b.ts", ["a.ts"]) != base
        assert generate_criticism_id("TEST", "missing tests for a.ts", ["b.ts"]) != base

    def test_invalid_category(self):
        with pytest.raises(ValueError):
            generate_criticism_id("BOGUS", "subject", [])


class TestCriticismStore:
    """Tests for CriticismStore."""

    def test_load_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            document = CriticismStore(tmpdir).load()

        assert document.criticisms == []
        assert document.last_analysis

    def test_add_is_idempotent(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            store.add_criticism(_criticism())
            store.add_criticism(_criticism())

            assert len(store.get_all()) == 1

    def test_add_upserts_in_place(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            store.add_criticism(_criticism("first"))
            store.add_criticism(_criticism("second"))

            updated = _criticism("first")
            updated.description = "changed"
            store.add_criticism(updated)

            criticisms = store.get_all()
            assert [c.subject for c in criticisms] == ["first", "second"]
            assert criticisms[0].description == "changed"

    def test_add_new_keeps_reviewed_status(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            criticism = _criticism()
            store.add_criticism(criticism)
            store.update_status(criticism.id, CriticismStatus.SKIPPED)

            added = store.add_new([_criticism(), _criticism("other")])

            assert [c.subject for c in added] == ["other"]
            assert store.get(criticism.id).status == CriticismStatus.SKIPPED

    def test_persisted_layout_uses_camel_case(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            store.add_criticism(_criticism())

            data = json.loads(get_criticisms_path(tmpdir).read_text())

        assert "lastAnalysis" in data
        record = data["criticisms"][0]
        assert "createdAt" in record
        assert record["category"] == "ELIM"
        assert record["status"] == "pending"
        assert "reasoning" not in record

    def test_update_status(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            criticism = _criticism()
            store.add_criticism(criticism)

            updated = store.update_status(criticism.id, "rejected", "intentional")

            assert updated.status == CriticismStatus.REJECTED
            assert store.get(criticism.id).reasoning == "intentional"
            assert store.get_pending_criticisms() == []

    def test_update_status_miss_returns_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            store.add_criticism(_criticism())

            assert store.update_status("elim-00000000", CriticismStatus.ACCEPTED) is None
            assert store.get_all()[0].status == CriticismStatus.PENDING

    def test_corrupt_file_loads_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = get_criticisms_path(tmpdir)
            path.parent.mkdir(parents=True)
            path.write_text("{not json")

            assert CriticismStore(tmpdir).get_all() == []

    def test_invalid_record_loads_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = get_criticisms_path(tmpdir)
            path.parent.mkdir(parents=True)
            path.write_text(json.dumps({"criticisms": [{"id": "x", "category": "NOPE"}]}))

            assert CriticismStore(tmpdir).get_all() == []

    def test_get_by_category_returns_pending_only(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            elim = _criticism("one")
            reviewed = _criticism("two")
            test = _criticism("missing tests for a.ts", category=CriticismCategory.TEST)
            for criticism in (elim, reviewed, test):
                store.add_criticism(criticism)
            store.update_status(reviewed.id, CriticismStatus.ACCEPTED)

            assert [c.subject for c in store.get_by_category("ELIM")] == ["one"]
            assert [c.subject for c in store.get_by_category(CriticismCategory.TEST)] == [
                "missing tests for a.ts"
            ]

    def test_remove_criticism(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            criticism = _criticism()
            store.add_criticism(criticism)

            assert store.remove_criticism(criticism.id)
            assert not store.remove_criticism(criticism.id)
            assert store.get_all() == []

    def test_clear_resolved(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            subjects = ["accepted", "rejected", "skipped", "pending"]
            for subject in subjects:
                store.add_criticism(_criticism(subject))
            for subject in subjects[:3]:
                store.update_status(_criticism(subject).id, subject)

            removed = store.clear_resolved()

            assert removed == 2
            assert sorted(c.subject for c in store.get_all()) == ["pending", "skipped"]

    def test_touch_analysis(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(tmpdir)
            document = store.load()
            document.last_analysis = "2000-01-01T00:00:00.000Z"
            store.save(document)

            store.touch_analysis()

            assert store.load().last_analysis > "2000-01-01T00:00:00.000Z"

    def test_severity_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = CriticismStore(Path(tmpdir))
            criticism = _criticism()
            criticism.severity = CriticismSeverity.HIGH
            criticism.diff = "--- a/x\n+++ b/x\n"
            store.add_criticism(criticism)

            loaded = store.get(criticism.id)

        assert loaded.severity == CriticismSeverity.HIGH
        assert loaded.diff == "--- a/x\n+++ b/x\n"
