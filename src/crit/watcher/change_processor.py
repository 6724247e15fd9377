"""Classification of file changes into coarse actions."""

import logging
from pathlib import PurePosixPath
from typing import Iterable, List, Optional

from ..config import DEFAULT_SOURCE_EXTENSIONS
from ..models import ChangeAction, ProcessResult, WatchEvent, WatchEventType

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = frozenset({
    "package.json",
    "tsconfig.json",
    "bun.lock",
    "bun.lockb",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
})

TEST_DIR_NAME = "__tests__"


def is_test_file(path: str) -> bool:
    """Check test-file naming conventions (.test., .spec., __tests__/)."""
    posix = PurePosixPath(path)
    if ".test." in posix.name or ".spec." in posix.name:
        return True
    return TEST_DIR_NAME in posix.parent.parts


def classify(
    event: WatchEvent,
    source_extensions: Optional[Iterable[str]] = None,
) -> ProcessResult:
    """
    Map a watch event to the action it warrants.

    Rules are ordered and the first match wins; every event yields exactly
    one result, including the no-op case.

    Args:
        event: Event to classify
        source_extensions: Extensions considered source code

    Returns:
        ProcessResult with action and human-readable details
    """
    extensions = set(source_extensions or DEFAULT_SOURCE_EXTENSIONS)
    path = PurePosixPath(event.path)
    is_add = event.type == WatchEventType.ADD

    if event.type == WatchEventType.UNLINK:
        return ProcessResult(
            action=ChangeAction.UPDATE_CONTEXT,
            details=f"File removed: {event.path}",
        )

    if path.name in CONFIG_FILENAMES:
        return ProcessResult(
            action=ChangeAction.UPDATE_CONTEXT,
            details=f"Config changed: {event.path}",
        )

    if path.suffix == ".md":
        verb = "added" if is_add else "updated"
        return ProcessResult(
            action=ChangeAction.UPDATE_CONTEXT,
            details=f"Documentation {verb}: {event.path}",
        )

    # Tests warrant a rule-compliance pass
    if is_test_file(event.path):
        verb = "added" if is_add else "modified"
        return ProcessResult(
            action=ChangeAction.CHECK_RULES,
            details=f"Test file {verb}: {event.path}",
        )

    if path.suffix in extensions:
        if is_add:
            return ProcessResult(
                action=ChangeAction.SUGGEST_TEST,
                details=f"New source file: {event.path}",
            )
        return ProcessResult(
            action=ChangeAction.CHECK_RULES,
            details=f"Source file modified: {event.path}",
        )

    return ProcessResult(
        action=ChangeAction.NONE,
        details=f"File {event.type.value}: {event.path}",
    )


def process_batch(
    events: List[WatchEvent],
    source_extensions: Optional[Iterable[str]] = None,
) -> List[ProcessResult]:
    """Classify every event of a batch, preserving order."""
    results = [classify(event, source_extensions) for event in events]
    logger.debug(f"Classified {len(results)} events")
    return results
