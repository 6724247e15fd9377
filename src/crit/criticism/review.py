"""Review operations shared by the CLI and other review surfaces."""

import logging
from pathlib import Path
from typing import Optional, Union

from ..models import Criticism, CriticismStatus
from .preferences import PreferenceLog
from .store import CriticismStore

logger = logging.getLogger(__name__)


def review_criticism(
    project_root: Union[str, Path],
    criticism_id: str,
    decision: Union[CriticismStatus, str],
    reasoning: Optional[str] = None,
) -> Optional[Criticism]:
    """
    Record the user's decision on a pending criticism.

    Accepted and rejected decisions are also appended to the preference
    log; a rejection suppresses the same (category, subject) from then on.

    Args:
        project_root: Project root
        criticism_id: Criticism to review
        decision: accepted, rejected or skipped
        reasoning: Optional free-text reasoning

    Returns:
        The updated criticism, or None if the ID is unknown
    """
    decision = CriticismStatus(decision)
    if decision == CriticismStatus.PENDING:
        raise ValueError("A reviewed criticism cannot go back to pending")

    criticism = CriticismStore(project_root).update_status(criticism_id, decision, reasoning)
    if criticism is None:
        logger.info(f"Criticism {criticism_id} not found")
        return None

    preferences = PreferenceLog(project_root)
    if decision == CriticismStatus.ACCEPTED:
        preferences.log_accepted(criticism)
    elif decision == CriticismStatus.REJECTED:
        preferences.log_rejected(criticism)

    return criticism
