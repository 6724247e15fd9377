"""Data models for crit."""

from .criticism_models import (
    Criticism,
    CriticismCategory,
    CriticismDocument,
    CriticismSeverity,
    CriticismStatus,
    PreferenceDecision,
    PreferenceEntry,
    utc_now_iso,
)
from .watch_models import (
    ChangeAction,
    HistoryAction,
    HistoryEntry,
    ProcessResult,
    WatchEvent,
    WatchEventType,
)
from .analysis_models import (
    AnalysisResult,
    AnalysisStats,
    AnalyzerError,
    AnalyzerOutcome,
    CloneResult,
    SecretFinding,
)

__all__ = [
    # Criticisms
    "Criticism",
    "CriticismCategory",
    "CriticismDocument",
    "CriticismSeverity",
    "CriticismStatus",
    "PreferenceDecision",
    "PreferenceEntry",
    "utc_now_iso",
    # Watching
    "ChangeAction",
    "HistoryAction",
    "HistoryEntry",
    "ProcessResult",
    "WatchEvent",
    "WatchEventType",
    # Analysis
    "AnalysisResult",
    "AnalysisStats",
    "AnalyzerError",
    "AnalyzerOutcome",
    "CloneResult",
    "SecretFinding",
]
