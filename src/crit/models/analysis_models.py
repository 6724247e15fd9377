"""Data models for analyzer results."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .criticism_models import Criticism, CriticismSeverity


class AnalysisStats(BaseModel):
    """Counters collected during one analysis run."""

    files_analyzed: int = 0
    clones_found: int = 0
    secrets_found: int = 0
    rule_violations: int = 0
    unused_imports: int = 0


class AnalyzerError(BaseModel):
    """Failure of a single analyzer call."""

    analyzer: str = Field(description="Analyzer name")
    message: str = Field(description="Error message")
    file: Optional[str] = Field(default=None, description="File being analyzed, if any")


class AnalyzerOutcome(BaseModel):
    """Result of one analyzer call: findings, or the error that stopped it."""

    analyzer: str
    criticisms: List[Criticism] = Field(default_factory=list)
    error: Optional[AnalyzerError] = None


class AnalysisResult(BaseModel):
    """Merged result of running the analyzer set."""

    criticisms: List[Criticism] = Field(default_factory=list)
    stats: AnalysisStats = Field(default_factory=AnalysisStats)
    degraded: List[AnalyzerError] = Field(default_factory=list)

    @property
    def degraded_analyzers(self) -> List[str]:
        """Distinct names of analyzers that failed at least once."""
        names: List[str] = []
        for error in self.degraded:
            if error.analyzer not in names:
                names.append(error.analyzer)
        return names


class CloneResult(BaseModel):
    """Result of project-wide clone detection."""

    criticisms: List[Criticism] = Field(default_factory=list)
    total_clones: int = 0
    duplicated_lines: int = 0


class SecretFinding(BaseModel):
    """A suspected hardcoded secret on one line."""

    pattern: str = Field(description="Name of the matching pattern")
    line: int = Field(description="1-based line number")
    severity: CriticismSeverity
    preview: str = Field(description="Truncated, non-reversible preview of the match")
