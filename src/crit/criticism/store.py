"""Persisted, deduplicated criticism storage."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from ..models import (
    Criticism,
    CriticismCategory,
    CriticismDocument,
    CriticismStatus,
    utc_now_iso,
)
from ..paths import get_criticisms_path

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = (CriticismStatus.ACCEPTED, CriticismStatus.REJECTED)


def generate_criticism_id(
    category: Union[CriticismCategory, str],
    subject: str,
    files: Iterable[str],
) -> str:
    """
    Derive the deduplication ID of a criticism.

    The file list is sorted first, so the ID does not depend on file order.

    Args:
        category: Criticism category
        subject: Short subject label
        files: Affected files

    Returns:
        ID of the form "<category>-<8 hex chars>"
    """
    category = CriticismCategory(category)
    base = f"{category.value}-{subject}-{','.join(sorted(files))}"
    digest = hashlib.sha256(base.encode("utf-8")).hexdigest()[:8]
    return f"{category.value.lower()}-{digest}"


class CriticismStore:
    """
    Criticism storage backed by .crit/state/criticisms.json.

    PATTERN: Full load, in-memory filter, full rewrite
    CRITICAL: IDs are unique; adding an existing ID replaces it in place
    """

    def __init__(self, project_root: Union[str, Path]):
        """
        Initialize store.

        Args:
            project_root: Project root containing the .crit directory
        """
        self.project_root = Path(project_root)
        self.path = get_criticisms_path(self.project_root)

    def load(self) -> CriticismDocument:
        """
        Load the persisted document.

        Returns:
            The stored document, or an empty one if missing or unreadable
        """
        if not self.path.exists():
            return CriticismDocument()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return CriticismDocument.model_validate(data)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Discarding unreadable criticism store {self.path}: {e}")
            return CriticismDocument()

    def save(self, document: CriticismDocument) -> None:
        """Write the document back to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(document.to_json_dict(), f, indent=2)

    def add_criticism(self, criticism: Criticism) -> None:
        """Insert a criticism, replacing any stored one with the same ID."""
        document = self.load()

        for index, existing in enumerate(document.criticisms):
            if existing.id == criticism.id:
                document.criticisms[index] = criticism
                break
        else:
            document.criticisms.append(criticism)

        self.save(document)

    def add_new(self, criticisms: Iterable[Criticism]) -> List[Criticism]:
        """
        Add criticisms whose IDs are not stored yet.

        Stored records keep their review status; re-detecting a finding the
        user already reviewed does not reset it to pending.

        Returns:
            The criticisms that were actually inserted
        """
        document = self.load()
        existing_ids = {c.id for c in document.criticisms}

        added = []
        for criticism in criticisms:
            if criticism.id in existing_ids:
                continue
            existing_ids.add(criticism.id)
            document.criticisms.append(criticism)
            added.append(criticism)

        if added:
            self.save(document)
        return added

    def get(self, criticism_id: str) -> Optional[Criticism]:
        for criticism in self.load().criticisms:
            if criticism.id == criticism_id:
                return criticism
        return None

    def get_all(self) -> List[Criticism]:
        return self.load().criticisms

    def update_status(
        self,
        criticism_id: str,
        status: Union[CriticismStatus, str],
        reasoning: Optional[str] = None,
    ) -> Optional[Criticism]:
        """
        Change the review status of one criticism.

        Args:
            criticism_id: ID to update
            status: New status
            reasoning: Optional user reasoning

        Returns:
            The updated criticism, or None if no criticism has that ID
        """
        status = CriticismStatus(status)
        document = self.load()

        for criticism in document.criticisms:
            if criticism.id == criticism_id:
                criticism.status = status
                if reasoning:
                    criticism.reasoning = reasoning
                self.save(document)
                return criticism

        logger.debug(f"No criticism with id {criticism_id}")
        return None

    def get_pending_criticisms(self) -> List[Criticism]:
        return [c for c in self.load().criticisms if c.status == CriticismStatus.PENDING]

    def get_by_category(self, category: Union[CriticismCategory, str]) -> List[Criticism]:
        """Pending criticisms of one category."""
        category = CriticismCategory(category)
        return [
            c for c in self.get_pending_criticisms()
            if c.category == category
        ]

    def remove_criticism(self, criticism_id: str) -> bool:
        """
        Delete one criticism.

        Returns:
            True if a criticism was removed
        """
        document = self.load()
        remaining = [c for c in document.criticisms if c.id != criticism_id]
        if len(remaining) == len(document.criticisms):
            return False

        document.criticisms = remaining
        self.save(document)
        return True

    def clear_resolved(self) -> int:
        """
        Drop accepted and rejected criticisms, keeping pending and skipped.

        Returns:
            Number of criticisms removed
        """
        document = self.load()
        before = len(document.criticisms)
        document.criticisms = [
            c for c in document.criticisms if c.status not in RESOLVED_STATUSES
        ]
        self.save(document)
        return before - len(document.criticisms)

    def touch_analysis(self) -> None:
        """Record that an analysis run just finished."""
        document = self.load()
        document.last_analysis = utc_now_iso()
        self.save(document)
