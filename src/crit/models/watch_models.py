"""Data models for file watching and change classification."""

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field

from .criticism_models import utc_now_iso


class WatchEventType(str, Enum):
    """Kinds of file system change."""

    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


class WatchEvent(BaseModel):
    """A single classified file system notification."""

    type: WatchEventType = Field(description="Change type")
    path: str = Field(description="Path relative to the project root")
    timestamp: datetime = Field(default_factory=datetime.now)


class ChangeAction(str, Enum):
    """Coarse action category derived from a change."""

    NONE = "none"
    UPDATE_CONTEXT = "update_context"
    CHECK_RULES = "check_rules"
    SUGGEST_TEST = "suggest_test"


class ProcessResult(BaseModel):
    """Outcome of classifying one watch event."""

    action: ChangeAction
    details: str


class HistoryAction(str, Enum):
    """Action kinds recorded in the project history."""

    UPDATE_DOCS = "update_docs"
    APPLY_RULE = "apply_rule"
    SUGGEST = "suggest"


class HistoryEntry(BaseModel):
    """One line of .crit/state/history.jsonl."""

    action: HistoryAction
    description: str
    files: List[str] = Field(default_factory=list)
    timestamp: str = Field(default_factory=utc_now_iso)
