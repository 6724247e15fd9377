"""Analysis engine - runs the analyzer set over files and projects."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Dict, List, Optional, Union

from ..config import CritConfig
from ..models import (
    AnalysisResult,
    AnalysisStats,
    AnalyzerError,
    AnalyzerOutcome,
    Criticism,
)
from .clones import detect_code_clones
from .imports import find_unused_imports
from .rules import ProjectRule, check_file_against_rules, load_project_rules
from .secrets import scan_file_for_secrets, secrets_to_criticisms
from .sources import find_source_files, to_relative

logger = logging.getLogger(__name__)

SECRETS = "secrets"
RULES = "rules"
IMPORTS = "imports"
CLONES = "clones"

# Stats counter incremented once per criticism an analyzer produces
STATS_FIELDS: Dict[str, str] = {
    SECRETS: "secrets_found",
    RULES: "rule_violations",
    IMPORTS: "unused_imports",
    CLONES: "clones_found",
}


async def _find_secrets(file_path: Path, relative_path: str) -> List[Criticism]:
    findings = await scan_file_for_secrets(file_path, relative_path)
    return secrets_to_criticisms(relative_path, findings)


async def _find_clones(project_root: Path, config: CritConfig) -> List[Criticism]:
    result = await detect_code_clones(project_root, config)
    return result.criticisms


def _to_outcome(
    analyzer: str,
    result: Union[List[Criticism], BaseException],
    file: Optional[str] = None,
) -> AnalyzerOutcome:
    if isinstance(result, BaseException):
        logger.warning(
            f"Analyzer {analyzer} failed" + (f" on {file}" if file else "") + f": {result}"
        )
        error = AnalyzerError(
            analyzer=analyzer,
            message=str(result) or type(result).__name__,
            file=file,
        )
        return AnalyzerOutcome(analyzer=analyzer, error=error)
    return AnalyzerOutcome(analyzer=analyzer, criticisms=list(result))


async def _run_all(
    calls: Dict[str, Awaitable[List[Criticism]]],
    file: Optional[str] = None,
) -> List[AnalyzerOutcome]:
    names = list(calls)
    results = await asyncio.gather(*calls.values(), return_exceptions=True)
    for result in results:
        # Cancellation is not an analyzer failure
        if isinstance(result, asyncio.CancelledError):
            raise result
    return [_to_outcome(name, result, file) for name, result in zip(names, results)]


async def analyze_file(
    file_path: Union[str, Path],
    project_root: Union[str, Path],
    rules: Optional[List[ProjectRule]] = None,
    config: Optional[CritConfig] = None,
) -> List[AnalyzerOutcome]:
    """
    Run the per-file analyzers on one file.

    PATTERN: Analyzers run concurrently and fail independently
    GOTCHA: A failed analyzer yields an outcome with an error, not an exception

    Args:
        file_path: File to analyze
        project_root: Project root used to relativize paths
        rules: Mined project rules
        config: Analyzer settings

    Returns:
        One outcome per analyzer (secrets, rules, imports)
    """
    config = config or CritConfig()
    path = Path(file_path)
    relative_path = to_relative(path, project_root)

    return await _run_all(
        {
            SECRETS: _find_secrets(path, relative_path),
            RULES: check_file_against_rules(path, relative_path, rules, config),
            IMPORTS: find_unused_imports(path, relative_path, config),
        },
        file=relative_path,
    )


def merge_outcomes(result: AnalysisResult, outcomes: List[AnalyzerOutcome]) -> None:
    """Fold analyzer outcomes into a result, counting findings per analyzer."""
    for outcome in outcomes:
        if outcome.error is not None:
            result.degraded.append(outcome.error)
            continue

        result.criticisms.extend(outcome.criticisms)
        field = STATS_FIELDS.get(outcome.analyzer)
        if field:
            setattr(result.stats, field, getattr(result.stats, field) + len(outcome.criticisms))


async def analyze_project(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> AnalysisResult:
    """
    Full project analysis: every non-test source file plus clone detection.

    Args:
        project_root: Project root
        config: Analyzer settings

    Returns:
        Merged criticisms, per-analyzer stats and degraded analyzers
    """
    config = config or CritConfig()
    root = Path(project_root)

    rules = await load_project_rules(root)
    files = find_source_files(root, config)
    logger.info(f"Analyzing {len(files)} source files in {root}")

    per_file = [analyze_file(root / f, root, rules, config) for f in files]
    clone_run = _run_all({CLONES: _find_clones(root, config)})

    outcome_lists = await asyncio.gather(*per_file, clone_run)

    result = AnalysisResult(stats=AnalysisStats(files_analyzed=len(files)))
    for outcomes in outcome_lists:
        merge_outcomes(result, outcomes)

    if result.degraded:
        logger.warning(f"{len(result.degraded_analyzers)} analyzers degraded")
    logger.info(f"Analysis found {len(result.criticisms)} criticisms")
    return result


async def analyze_changed_files(
    project_root: Union[str, Path],
    changed_files: List[str],
    config: Optional[CritConfig] = None,
) -> AnalysisResult:
    """
    Incremental analysis of changed files.

    Clone detection is project-wide and is not part of the incremental pass.
    Files that no longer exist are skipped.

    Args:
        project_root: Project root
        changed_files: Project-relative or absolute paths
        config: Analyzer settings

    Returns:
        Merged criticisms, per-analyzer stats and degraded analyzers
    """
    config = config or CritConfig()
    root = Path(project_root)

    existing = []
    for changed in changed_files:
        path = Path(changed)
        full_path = path if path.is_absolute() else root / path
        if full_path.is_file():
            existing.append(full_path)

    result = AnalysisResult(stats=AnalysisStats(files_analyzed=len(existing)))
    if not existing:
        return result

    rules = await load_project_rules(root)
    outcome_lists = await asyncio.gather(
        *(analyze_file(path, root, rules, config) for path in existing)
    )
    for outcomes in outcome_lists:
        merge_outcomes(result, outcomes)

    return result
