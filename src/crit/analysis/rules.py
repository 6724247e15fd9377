"""Rule enforcement - checks code against project rules.

Rules come from a built-in table of preferred native alternatives and from
sentences mined out of the project's rule documents (CLAUDE.md,
.claude/CLAUDE.md, .crit/rules.md). Only "avoid" rules are enforced, and only
against import statements.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Callable, List, Match, Optional, Pattern, Tuple, Union

from pydantic import BaseModel, Field

from ..config import CritConfig
from ..criticism.store import generate_criticism_id
from ..models import Criticism, CriticismCategory, CriticismSeverity
from ..paths import CRIT_DIR, RULES_FILE
from .sources import read_source

logger = logging.getLogger(__name__)

RULE_DOCUMENTS = [
    Path("CLAUDE.md"),
    Path(".claude") / "CLAUDE.md",
    Path(CRIT_DIR) / RULES_FILE,
]


class RuleType(str, Enum):
    """How a mined rule is meant to be applied."""

    PREFER = "prefer"
    AVOID = "avoid"
    REQUIRE = "require"
    CONVENTION = "convention"


class ProjectRule(BaseModel):
    """A rule mined from a rules document."""

    type: RuleType
    pattern: str = Field(description="Literal name the rule is about")
    description: str
    source: str = Field(description="Document the rule came from")


@dataclass(frozen=True)
class Substitution:
    """A legacy import with a preferred native alternative."""

    avoid: Pattern[str]
    prefer: str
    description: str


def _import_of(module: str) -> Pattern[str]:
    return re.compile(rf"""^\s*import\s+.*from\s+["']{re.escape(module)}["']""")


KNOWN_SUBSTITUTIONS: List[Substitution] = [
    Substitution(_import_of("express"), "Bun.serve", "Use Bun.serve instead of express"),
    Substitution(_import_of("node-fetch"), "fetch", "Use native fetch instead of node-fetch"),
    Substitution(_import_of("axios"), "fetch", "Use native fetch instead of axios"),
    Substitution(
        _import_of("better-sqlite3"), "bun:sqlite", "Use bun:sqlite instead of better-sqlite3"
    ),
    Substitution(_import_of("ws"), "WebSocket", "Use native WebSocket instead of ws"),
    Substitution(
        _import_of("dotenv"), "Bun auto-loads .env", "Bun auto-loads .env, dotenv not needed"
    ),
    Substitution(_import_of("ioredis"), "Bun.redis", "Use Bun.redis instead of ioredis"),
    Substitution(_import_of("pg"), "Bun.sql", "Use Bun.sql instead of pg"),
    Substitution(
        re.compile(r"""^\s*(?:const|let|var)\s+\w+\s*=\s*require\s*\(\s*["']fs["']\s*\)"""),
        "Bun.file",
        "Use Bun.file instead of require('fs')",
    ),
]

# A module-ish name: letters, digits, @, /, dots and dashes, not ending in punctuation
_NAME = r"""[`"']?([\w@](?:[\w@/.\-]*\w)?)[`"']?"""

RuleExtractor = Callable[[Match[str]], Tuple[RuleType, str, str]]

RULE_PATTERNS: List[Tuple[Pattern[str], RuleExtractor]] = [
    (
        re.compile(rf"use\s+{_NAME}\s+instead\s+of\s+{_NAME}", re.I),
        lambda m: (RuleType.PREFER, m.group(2), f"Use {m.group(1)} instead of {m.group(2)}"),
    ),
    (
        re.compile(rf"(?:don't|don’t|do not|never)\s+use\s+{_NAME}", re.I),
        lambda m: (RuleType.AVOID, m.group(1), f"Avoid using {m.group(1)}"),
    ),
    (
        re.compile(rf"prefer\s+{_NAME}\s+(?:over|to)\s+{_NAME}", re.I),
        lambda m: (RuleType.PREFER, m.group(2), f"Prefer {m.group(1)} over {m.group(2)}"),
    ),
    (
        re.compile(rf"always\s+use\s+{_NAME}", re.I),
        lambda m: (RuleType.REQUIRE, m.group(1), f"Always use {m.group(1)}"),
    ),
]


def extract_rules(content: str, source: str) -> List[ProjectRule]:
    """
    Mine rules from document text by sentence pattern.

    Args:
        content: Document text
        source: Name recorded as the rule's origin

    Returns:
        Rules in pattern-table order
    """
    rules: List[ProjectRule] = []

    for pattern, extract in RULE_PATTERNS:
        for match in pattern.finditer(content):
            rule_type, name, description = extract(match)
            rules.append(ProjectRule(
                type=rule_type,
                pattern=name,
                description=description,
                source=source,
            ))

    return rules


def find_rule_documents(project_root: Union[str, Path]) -> List[Path]:
    """Rule documents that exist in the project."""
    root = Path(project_root)
    return [root / doc for doc in RULE_DOCUMENTS if (root / doc).is_file()]


async def load_project_rules(project_root: Union[str, Path]) -> List[ProjectRule]:
    """Mine rules from every rule document in the project."""
    root = Path(project_root)
    rules: List[ProjectRule] = []

    for document in find_rule_documents(root):
        content = await read_source(document)
        if content is None:
            continue
        rules.extend(extract_rules(content, document.relative_to(root).as_posix()))

    logger.debug(f"Loaded {len(rules)} project rules")
    return rules


def build_import_pattern(module: str) -> Pattern[str]:
    """Regex matching import or require statements of one module."""
    escaped = re.escape(module)
    return re.compile(
        rf"""^\s*import\s+.*from\s+["']{escaped}["']"""
        rf"""|^\s*import\s+["']{escaped}["']"""
        rf"""|\brequire\s*\(\s*["']{escaped}["']\s*\)""",
        re.I,
    )


def check_content_against_rules(
    content: str,
    relative_path: str,
    rules: Optional[List[ProjectRule]] = None,
) -> List[Criticism]:
    """
    Check file text against built-in substitutions and mined avoid rules.

    Built-in substitutions produce at most one reminder per file; each
    avoid rule produces at most one violation per file.

    Args:
        content: File text
        relative_path: Project-relative file path
        rules: Mined project rules

    Returns:
        SIMPLIFY criticisms
    """
    criticisms: List[Criticism] = []
    lines = content.split("\n")

    builtin = _first_substitution(lines)
    if builtin is not None:
        substitution, index = builtin
        subject = substitution.description
        criticisms.append(Criticism(
            id=generate_criticism_id(CriticismCategory.SIMPLIFY, subject, [relative_path]),
            category=CriticismCategory.SIMPLIFY,
            subject=subject,
            description=(
                f"{substitution.description}. Found import that could use a "
                f"native/preferred alternative ({substitution.prefer})."
            ),
            files=[relative_path],
            location=f"{relative_path}:{index + 1}",
            severity=CriticismSeverity.LOW,
        ))

    checked = set()
    for rule in rules or []:
        if rule.type != RuleType.AVOID or rule.description in checked:
            continue
        checked.add(rule.description)

        import_pattern = build_import_pattern(rule.pattern)
        for index, line in enumerate(lines):
            if not import_pattern.search(line):
                continue
            criticisms.append(Criticism(
                id=generate_criticism_id(
                    CriticismCategory.SIMPLIFY, rule.description, [relative_path]
                ),
                category=CriticismCategory.SIMPLIFY,
                subject=rule.description,
                description=(
                    f"Rule from {rule.source}: {rule.description}. "
                    f"Consider using the recommended alternative."
                ),
                files=[relative_path],
                location=f"{relative_path}:{index + 1}",
                severity=CriticismSeverity.MEDIUM,
            ))
            break

    return criticisms


def _first_substitution(lines: List[str]) -> Optional[Tuple[Substitution, int]]:
    for substitution in KNOWN_SUBSTITUTIONS:
        for index, line in enumerate(lines):
            if substitution.avoid.search(line):
                return substitution, index
    return None


async def check_file_against_rules(
    file_path: Union[str, Path],
    relative_path: str,
    rules: Optional[List[ProjectRule]] = None,
    config: Optional[CritConfig] = None,
) -> List[Criticism]:
    """Read one source file and check it against the project rules."""
    config = config or CritConfig()
    if PurePosixPath(relative_path).suffix not in config.source_extensions:
        return []

    content = await read_source(file_path)
    if content is None:
        return []
    return check_content_against_rules(content, relative_path, rules)
