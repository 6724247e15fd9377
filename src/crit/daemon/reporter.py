"""Human-readable action report and append-only action history."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from ..models import (
    ChangeAction,
    HistoryAction,
    HistoryEntry,
    ProcessResult,
    utc_now_iso,
)
from ..paths import get_history_path, get_last_action_path

logger = logging.getLogger(__name__)

ACTION_TITLES: Dict[ChangeAction, str] = {
    ChangeAction.UPDATE_CONTEXT: "Context Updates",
    ChangeAction.CHECK_RULES: "Rule Checks",
    ChangeAction.SUGGEST_TEST: "Test Suggestions",
    ChangeAction.NONE: "Observed (No Action)",
}

HISTORY_ACTIONS: Dict[ChangeAction, HistoryAction] = {
    ChangeAction.UPDATE_CONTEXT: HistoryAction.UPDATE_DOCS,
    ChangeAction.CHECK_RULES: HistoryAction.APPLY_RULE,
    ChangeAction.SUGGEST_TEST: HistoryAction.SUGGEST,
}


def format_actions(actions: List[ProcessResult], timestamp: Optional[str] = None) -> str:
    """
    Render a batch of actions as markdown, grouped by action in first-seen order.

    Args:
        actions: Classified actions of one batch
        timestamp: ISO-8601 time shown in the header (default: now)

    Returns:
        Markdown text
    """
    grouped: Dict[ChangeAction, List[str]] = {}
    for result in actions:
        grouped.setdefault(result.action, []).append(result.details)

    sections = [
        f"# Last Daemon Actions\n\n"
        f"**Time:** {timestamp or utc_now_iso()}\n\n"
        f"**Actions:** {len(actions)}"
    ]
    for action, details in grouped.items():
        lines = "\n".join(f"- {d}" for d in details)
        sections.append(f"## {ACTION_TITLES.get(action, action.value)}\n\n{lines}")

    return "\n\n".join(sections) + "\n"


def report_actions(project_root: Union[str, Path], actions: List[ProcessResult]) -> Optional[Path]:
    """
    Overwrite .crit/last_action.md with one batch of actions.

    Returns:
        The report path, or None if there was nothing to report
    """
    if not actions:
        return None

    path = get_last_action_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_actions(actions), encoding="utf-8")
    logger.debug(f"Reported {len(actions)} actions to {path}")
    return path


def get_last_action(project_root: Union[str, Path]) -> Optional[str]:
    """Contents of the last action report, if one was written."""
    path = get_last_action_path(project_root)
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def to_history_action(action: ChangeAction) -> Optional[HistoryAction]:
    """Map a daemon action to its history kind; NONE is not recorded."""
    return HISTORY_ACTIONS.get(action)


def append_history(project_root: Union[str, Path], entry: HistoryEntry) -> None:
    """Append one entry to .crit/state/history.jsonl."""
    path = get_history_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry.model_dump(mode="json")) + "\n")


def record_actions(
    project_root: Union[str, Path],
    actions: List[ProcessResult],
    files: List[str],
) -> int:
    """
    Append a history entry for every recordable action of a batch.

    Args:
        project_root: Project root
        actions: Classified actions of one batch
        files: Paths of every event in the batch

    Returns:
        Number of entries written
    """
    written = 0
    for result in actions:
        history_action = to_history_action(result.action)
        if history_action is None:
            continue
        append_history(project_root, HistoryEntry(
            action=history_action,
            description=result.details,
            files=files,
        ))
        written += 1
    return written


def get_history(project_root: Union[str, Path], limit: Optional[int] = None) -> List[HistoryEntry]:
    """
    Read the history log.

    Args:
        project_root: Project root
        limit: Only return the most recent entries

    Returns:
        Entries oldest first; empty if the log is missing or corrupt
    """
    path = get_history_path(project_root)
    if not path.exists():
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = [
                HistoryEntry.model_validate(json.loads(line))
                for line in f
                if line.strip()
            ]
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Discarding unreadable history {path}: {e}")
        return []

    if limit is not None:
        return entries[-limit:] if limit > 0 else []
    return entries
