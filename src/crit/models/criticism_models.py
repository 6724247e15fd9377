"""Data models for criticisms and user preferences.

Criticisms are persisted as JSON with camelCase keys so the file format stays
stable for the review surfaces that read it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CriticismCategory(str, Enum):
    """Kinds of criticism."""

    ELIM = "ELIM"  # Dead or unnecessary code
    SIMPLIFY = "SIMPLIFY"  # A better pattern exists
    TEST = "TEST"  # Missing coverage


class CriticismSeverity(str, Enum):
    """Criticism severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CriticismStatus(str, Enum):
    """Review status of a criticism."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class Criticism(BaseModel):
    """One reported code-quality finding awaiting user disposition."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Deterministic ID from category, subject and files")
    category: CriticismCategory = Field(description="Criticism category")
    subject: str = Field(description="Short label, part of the suppression key")
    description: str = Field(description="Full explanation")
    files: List[str] = Field(default_factory=list, description="Affected project-relative files")
    location: Optional[str] = Field(default=None, description="file:line of the finding")
    severity: CriticismSeverity = Field(default=CriticismSeverity.LOW)
    status: CriticismStatus = Field(default=CriticismStatus.PENDING)
    diff: Optional[str] = Field(default=None, description="Proposed change (unified diff)")
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")
    reasoning: Optional[str] = Field(default=None, description="User reasoning on review")

    def to_json_dict(self) -> dict:
        """Serialize using the persisted camelCase layout."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CriticismDocument(BaseModel):
    """Top-level layout of criticisms.json."""

    model_config = ConfigDict(populate_by_name=True)

    criticisms: List[Criticism] = Field(default_factory=list)
    last_analysis: str = Field(default_factory=utc_now_iso, alias="lastAnalysis")

    def to_json_dict(self) -> dict:
        return {
            "criticisms": [c.to_json_dict() for c in self.criticisms],
            "lastAnalysis": self.last_analysis,
        }


class PreferenceDecision(str, Enum):
    """Decisions recorded in the preference log."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PreferenceEntry(BaseModel):
    """A single parsed line of the preference log."""

    date: str = Field(description="YYYY-MM-DD")
    category: CriticismCategory
    subject: str
    location: str
    reasoning: Optional[str] = None
    decision: PreferenceDecision
