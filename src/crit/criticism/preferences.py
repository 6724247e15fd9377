"""User decision log stored as markdown in .crit/context/preferences.md.

The log doubles as LLM-readable context, so its line format is fixed:

    - YYYY-MM-DD: CATEGORY `subject` in location - "reasoning"

Entries are only ever added, directly under the ``## Accepted`` or
``## Rejected`` header, newest first.
"""

import logging
import re
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from ..models import (
    Criticism,
    CriticismCategory,
    PreferenceDecision,
    PreferenceEntry,
)
from ..paths import get_preferences_path

logger = logging.getLogger(__name__)

ACCEPTED_HEADER = "## Accepted"
REJECTED_HEADER = "## Rejected"

INITIAL_CONTENT = f"""# User Preferences

This file tracks user decisions on suggested changes.
The LLM should use this to avoid suggesting rejected patterns again.

{ACCEPTED_HEADER}

{REJECTED_HEADER}

"""

ENTRY_PATTERN = re.compile(
    r'^- (\d{4}-\d{2}-\d{2}): (ELIM|SIMPLIFY|TEST) `([^`]+)` in (\S+)(?:\s+-\s+"(.*)")?\s*$'
)


def format_entry(criticism: Criticism, on: Optional[date] = None) -> str:
    """Render one decision line for a reviewed criticism."""
    day = (on or date.today()).isoformat()
    subject = criticism.subject.replace("`", "'")
    location = criticism.location or (criticism.files[0] if criticism.files else "project")
    location = "_".join(location.split())

    line = f"- {day}: {criticism.category.value} `{subject}` in {location}"
    if criticism.reasoning:
        reasoning = " ".join(criticism.reasoning.split())
        line += f' - "{reasoning}"'
    return line


def parse_preferences(content: str) -> List[PreferenceEntry]:
    """
    Parse decision entries out of preference log text.

    Lines outside the Accepted/Rejected sections and lines that do not
    match the entry format are ignored.

    Args:
        content: Markdown text of the log

    Returns:
        Entries in file order
    """
    entries: List[PreferenceEntry] = []
    section: Optional[PreferenceDecision] = None

    for line in content.splitlines():
        if line.startswith(ACCEPTED_HEADER):
            section = PreferenceDecision.ACCEPTED
            continue
        if line.startswith(REJECTED_HEADER):
            section = PreferenceDecision.REJECTED
            continue
        if line.startswith("## "):
            section = None
            continue

        if section is None or not line.startswith("- "):
            continue

        match = ENTRY_PATTERN.match(line)
        if not match:
            continue

        entries.append(PreferenceEntry(
            date=match.group(1),
            category=CriticismCategory(match.group(2)),
            subject=match.group(3),
            location=match.group(4),
            reasoning=match.group(5),
            decision=section,
        ))

    return entries


class PreferenceLog:
    """
    Append-only log of accept/reject decisions for one project.

    PATTERN: Re-parse on every lookup; the log is small and local
    CRITICAL: Suppression key is (category, subject), ignoring files
    """

    def __init__(self, project_root: Union[str, Path]):
        self.project_root = Path(project_root)
        self.path = get_preferences_path(self.project_root)

    def init(self) -> None:
        """Create the log with empty sections if it does not exist."""
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(INITIAL_CONTENT, encoding="utf-8")
        logger.debug(f"Created preference log {self.path}")

    def load(self) -> str:
        """Return the log text, creating the file on first use."""
        self.init()
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read preference log {self.path}: {e}")
            return ""

    def log_accepted(self, criticism: Criticism) -> str:
        return self._insert(ACCEPTED_HEADER, format_entry(criticism))

    def log_rejected(self, criticism: Criticism) -> str:
        return self._insert(REJECTED_HEADER, format_entry(criticism))

    def _insert(self, header: str, entry: str) -> str:
        content = self.load()
        marker = f"{header}\n"
        index = content.find(marker)

        if index >= 0:
            position = index + len(marker)
            content = content[:position] + entry + "\n" + content[position:]
        else:
            # Section missing; recreate it at the end
            if content and not content.endswith("\n"):
                content += "\n"
            content += f"\n{header}\n{entry}\n"

        self.path.write_text(content, encoding="utf-8")
        logger.info(f"Logged decision: {entry}")
        return entry

    def parse(self) -> List[PreferenceEntry]:
        return parse_preferences(self.load())

    def _find_rejection(
        self,
        category: Union[CriticismCategory, str],
        subject: str,
    ) -> Optional[PreferenceEntry]:
        category = CriticismCategory(category)
        wanted = subject.lower()
        for entry in self.parse():
            if (
                entry.decision == PreferenceDecision.REJECTED
                and entry.category == category
                and entry.subject.lower() == wanted
            ):
                return entry
        return None

    def was_rejected(self, category: Union[CriticismCategory, str], subject: str) -> bool:
        """Check whether this (category, subject) pair was rejected before."""
        return self._find_rejection(category, subject) is not None

    def get_rejection_reason(
        self,
        category: Union[CriticismCategory, str],
        subject: str,
    ) -> Optional[str]:
        entry = self._find_rejection(category, subject)
        return entry.reasoning if entry else None

    def filter_rejected(self, criticisms: List[Criticism]) -> List[Criticism]:
        """Drop criticisms whose suppression key was rejected before."""
        kept = [c for c in criticisms if not self.was_rejected(c.category, c.subject)]
        dropped = len(criticisms) - len(kept)
        if dropped:
            logger.debug(f"Suppressed {dropped} previously rejected criticisms")
        return kept
