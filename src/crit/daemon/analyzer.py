"""Criticism generation for the daemon.

Runs the analyzers, drops findings the user rejected before and adds the
rest to the store without disturbing criticisms that were already reviewed.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from ..analysis import analyze_changed_files, detect_code_clones, is_source_file
from ..analysis import analyze_project as run_full_analysis
from ..config import CritConfig
from ..criticism import CriticismStore, PreferenceLog, generate_criticism_id
from ..models import (
    AnalysisResult,
    AnalysisStats,
    Criticism,
    CriticismCategory,
    CriticismSeverity,
    WatchEvent,
    WatchEventType,
)

logger = logging.getLogger(__name__)


def find_test_path(file_path: Union[str, Path]) -> Optional[Path]:
    """
    Locate the test file belonging to a source file.

    Looks for name.test.ext and name.spec.ext beside the file, and for
    name.ext and name.test.ext in a sibling __tests__ directory.

    Returns:
        The first existing candidate, or None
    """
    path = Path(file_path)
    name, ext = path.stem, path.suffix
    candidates = [
        path.parent / f"{name}.test{ext}",
        path.parent / f"{name}.spec{ext}",
        path.parent / "__tests__" / f"{name}{ext}",
        path.parent / "__tests__" / f"{name}.test{ext}",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def missing_test_criticism(relative_path: str) -> Criticism:
    """TEST criticism for a new source file that has no test beside it."""
    basename = PurePosixPath(relative_path).name
    subject = f"missing tests for {basename}"
    return Criticism(
        id=generate_criticism_id(CriticismCategory.TEST, subject, [relative_path]),
        category=CriticismCategory.TEST,
        subject=subject,
        description=(
            f"New file {basename} was added without corresponding tests. "
            f"Consider adding test coverage for this module."
        ),
        files=[relative_path],
        location=relative_path,
        severity=CriticismSeverity.MEDIUM,
    )


def persist_criticisms(project_root: Union[str, Path], criticisms: List[Criticism]) -> List[Criticism]:
    """
    Filter out previously rejected criticisms and store the rest.

    Criticisms already in the store keep their current status.

    Returns:
        The criticisms that survived the preference filter
    """
    kept = PreferenceLog(project_root).filter_rejected(criticisms)

    store = CriticismStore(project_root)
    added = store.add_new(kept)
    store.touch_analysis()

    if added:
        logger.info(f"Stored {len(added)} new criticisms")
    return kept


async def analyze_project(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> AnalysisResult:
    """
    Cold-start analysis of the whole project.

    Args:
        project_root: Project root
        config: Analyzer settings

    Returns:
        Analysis result holding only the criticisms that were not suppressed
    """
    result = await run_full_analysis(project_root, config)
    result.criticisms = persist_criticisms(project_root, result.criticisms)
    return result


async def analyze_changes(
    project_root: Union[str, Path],
    events: List[WatchEvent],
    config: Optional[CritConfig] = None,
) -> AnalysisResult:
    """
    Analyze the source files touched by one batch of events.

    New source files without a matching test file also get a TEST criticism.

    Args:
        project_root: Project root
        events: One flushed batch
        config: Analyzer settings

    Returns:
        Analysis result holding only the criticisms that were not suppressed
    """
    config = config or CritConfig()
    root = Path(project_root)

    source_events = [
        e for e in events
        if e.type != WatchEventType.UNLINK and is_source_file(e.path, config)
    ]
    if not source_events:
        return AnalysisResult()

    result = await analyze_changed_files(root, [e.path for e in source_events], config)

    for event in source_events:
        if event.type != WatchEventType.ADD:
            continue
        full_path = root / event.path
        if full_path.is_file() and find_test_path(full_path) is None:
            result.criticisms.append(missing_test_criticism(event.path))

    result.criticisms = persist_criticisms(root, result.criticisms)
    return result


async def run_clone_detection(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> AnalysisResult:
    """Stand-alone project-wide clone detection run."""
    clones = await detect_code_clones(project_root, config)
    return AnalysisResult(
        criticisms=persist_criticisms(project_root, clones.criticisms),
        stats=AnalysisStats(clones_found=clones.total_clones),
    )
