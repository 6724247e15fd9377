"""Secret detection - finds hardcoded credentials.

The patterns are intentionally broad; placeholder and environment-variable
lines are suppressed so documentation examples are not flagged.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Pattern, Union

from ..criticism.store import generate_criticism_id
from ..models import (
    Criticism,
    CriticismCategory,
    CriticismSeverity,
    SecretFinding,
)
from .sources import read_source

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 20


@dataclass(frozen=True)
class SecretPattern:
    """A named credential pattern."""

    name: str
    pattern: Pattern[str]
    severity: CriticismSeverity


HIGH = CriticismSeverity.HIGH
MEDIUM = CriticismSeverity.MEDIUM

# Vendor-specific formats come before the generic assignments that would
# also match them; the first pattern that matches a line wins.
SECRET_PATTERNS: List[SecretPattern] = [
    SecretPattern("Anthropic API Key", re.compile(r"sk-ant-[A-Za-z0-9_-]{32,}"), HIGH),
    SecretPattern("OpenAI API Key", re.compile(r"sk-[A-Za-z0-9]{48}"), HIGH),
    SecretPattern("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}"), HIGH),
    SecretPattern("GitHub Token", re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,}"), HIGH),
    SecretPattern(
        "Slack Token",
        re.compile(r"xox[baprs]-[0-9]{10,}-[0-9]{10,}-[a-zA-Z0-9]{24}"),
        HIGH,
    ),
    SecretPattern(
        "Discord Token",
        re.compile(r"[MN][A-Za-z\d]{23,}\.[\w-]{6}\.[\w-]{27}"),
        HIGH,
    ),
    SecretPattern(
        "Private Key",
        re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----"),
        HIGH,
    ),
    SecretPattern(
        "Database URL with Credentials",
        re.compile(r"(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis)://[^:\s/]+:[^@\s]+@", re.I),
        HIGH,
    ),
    SecretPattern(
        "Generic API Key",
        re.compile(r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"']?[A-Za-z0-9_\-]{20,}[\"']?", re.I),
        HIGH,
    ),
    SecretPattern("Bearer Token", re.compile(r"bearer\s+[A-Za-z0-9_\-.]{16,}", re.I), HIGH),
    SecretPattern(
        "Password Assignment",
        re.compile(r"(?:password|passwd|pwd)\s*[:=]\s*[\"'`][^\"'`\n]{4,}[\"'`]", re.I),
        HIGH,
    ),
    SecretPattern(
        "JWT Token",
        re.compile(r"eyJ[A-Za-z0-9_-]*\.eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]*"),
        MEDIUM,
    ),
    SecretPattern(
        "AWS Secret Key",
        re.compile(r"[A-Za-z0-9/+=]{40}(?=.*(?:aws|secret))", re.I),
        HIGH,
    ),
    SecretPattern(
        "Secret Assignment",
        re.compile(r"(?:secret|token|auth)\s*[:=]\s*[\"'][A-Za-z0-9_\-]{16,}[\"']", re.I),
        MEDIUM,
    ),
]

# Files/paths to skip entirely
SKIP_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\.env\.(?:example|sample|template)$"),
    re.compile(r"package-lock\.json$"),
    re.compile(r"bun\.lockb?$"),
    re.compile(r"yarn\.lock$"),
    re.compile(r"pnpm-lock\.yaml$"),
    re.compile(r"(?:^|/)node_modules/"),
    re.compile(r"(?:^|/)\.git/"),
    re.compile(r"\.test\."),
    re.compile(r"\.spec\."),
    re.compile(r"mock", re.I),
    re.compile(r"fixture", re.I),
    re.compile(r"(?:^|/)secrets\.(?:py|ts|js)$"),
]

TRAILING_COMMENT = re.compile(r"(?<![:/])//|\s#")

PLACEHOLDER_MARKERS = (
    "xxx",
    "your-",
    "your_",
    "<",
    "${",
    "process.env",
    "import.meta.env",
    "os.environ",
    "os.getenv",
)


def should_skip_file(path: str) -> bool:
    """Check the path denylist."""
    posix = path.replace("\\", "/")
    return any(p.search(posix) for p in SKIP_PATTERNS)


def _is_documentation_comment(line: str) -> bool:
    # Commented lines, or lines with a trailing comment, that mention "example";
    # the slashes of a URL scheme do not start a comment
    stripped = line.strip()
    commented = stripped.startswith(("//", "#", "*")) or bool(TRAILING_COMMENT.search(stripped))
    return commented and "example" in stripped.lower()


def _has_placeholder(line: str) -> bool:
    lowered = line.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


def _preview(match: str) -> str:
    if len(match) > PREVIEW_LENGTH:
        return match[:PREVIEW_LENGTH] + "..."
    return match


def scan_content_for_secrets(content: str) -> List[SecretFinding]:
    """
    Scan text line by line for credential patterns.

    Args:
        content: File text

    Returns:
        At most one finding per line
    """
    findings: List[SecretFinding] = []

    for number, line in enumerate(content.split("\n"), start=1):
        if not line.strip():
            continue
        if _is_documentation_comment(line) or _has_placeholder(line):
            continue

        for secret in SECRET_PATTERNS:
            match = secret.pattern.search(line)
            if match:
                findings.append(SecretFinding(
                    pattern=secret.name,
                    line=number,
                    severity=secret.severity,
                    preview=_preview(match.group(0)),
                ))
                break

    return findings


async def scan_file_for_secrets(
    file_path: Union[str, Path],
    relative_path: str = "",
) -> List[SecretFinding]:
    """
    Scan one file for hardcoded secrets.

    Args:
        file_path: File to read
        relative_path: Project-relative path used for the denylist

    Returns:
        Findings, empty if the file is denylisted or unreadable
    """
    if should_skip_file(relative_path or str(file_path)):
        return []

    content = await read_source(file_path)
    if content is None:
        return []
    return scan_content_for_secrets(content)


def secrets_to_criticisms(relative_path: str, findings: List[SecretFinding]) -> List[Criticism]:
    """Turn findings for one file into ELIM criticisms."""
    criticisms = []

    for finding in findings:
        subject = f"potential {finding.pattern.lower()}"
        criticisms.append(Criticism(
            id=generate_criticism_id(CriticismCategory.ELIM, subject, [relative_path]),
            category=CriticismCategory.ELIM,
            subject=subject,
            description=(
                f"Found what appears to be a hardcoded {finding.pattern} at line "
                f"{finding.line}. Hardcoded secrets should be moved to environment "
                f'variables or a secrets manager. Detected pattern: "{finding.preview}"'
            ),
            files=[relative_path],
            location=f"{relative_path}:{finding.line}",
            severity=finding.severity,
        ))

    return criticisms
