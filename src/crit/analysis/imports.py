"""Import analysis - finds imports that are never used in their file.

Only single-line ES module imports are recognized. Usage is a whole-word
search over the non-import lines, so a name that only appears in a comment
or string still counts as used.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from ..config import CritConfig
from ..criticism.store import generate_criticism_id
from ..models import Criticism, CriticismCategory, CriticismSeverity
from .sources import read_source

logger = logging.getLogger(__name__)

DEFAULT_IMPORT = re.compile(r"^\s*import\s+(?:type\s+)?([\w$]+)\s*(?:,|\s+from\b)")
NAMED_IMPORT = re.compile(r"^\s*import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\{([^}]+)\}")
NAMESPACE_IMPORT = re.compile(
    r"^\s*import\s+(?:type\s+)?(?:[\w$]+\s*,\s*)?\*\s+as\s+([\w$]+)"
)
ALIAS = re.compile(r"([\w$]+)\s+as\s+([\w$]+)")
IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

SUBJECT_NAMES_LENGTH = 40


@dataclass
class ImportedName:
    """A local binding introduced by an import statement."""

    name: str
    line: int
    is_default: bool = False
    is_type: bool = False


def extract_imports(content: str) -> List[ImportedName]:
    """
    Parse the local names bound by import statements.

    Handles default, named (with "as" aliases), namespace and type-only
    imports, including a default combined with named or namespace imports.

    Args:
        content: File text

    Returns:
        Imported names in line order
    """
    imports: List[ImportedName] = []

    for number, line in enumerate(content.split("\n"), start=1):
        if "import" not in line:
            continue
        type_only = bool(re.match(r"^\s*import\s+type\b", line))

        default = DEFAULT_IMPORT.match(line)
        if default:
            imports.append(ImportedName(
                name=default.group(1),
                line=number,
                is_default=True,
                is_type=type_only,
            ))

        named = NAMED_IMPORT.match(line)
        if named:
            for part in named.group(1).split(","):
                part = part.strip()
                is_type = type_only
                if part.startswith("type "):
                    is_type = True
                    part = part[len("type "):].strip()

                alias = ALIAS.match(part)
                name = alias.group(2) if alias else part.split(" ")[0]

                # Single-letter and malformed names are too noisy to report
                if len(name) < 2 or not IDENTIFIER.match(name):
                    continue
                imports.append(ImportedName(name=name, line=number, is_type=is_type))

        namespace = NAMESPACE_IMPORT.match(line)
        if namespace:
            imports.append(ImportedName(
                name=namespace.group(1),
                line=number,
                is_type=type_only,
            ))

    return imports


def is_import_used(name: str, lines: List[str], import_line: int) -> bool:
    """Whole-word search for a name outside of import statements."""
    pattern = re.compile(rf"(?<![\w$]){re.escape(name)}(?![\w$])")

    for number, line in enumerate(lines, start=1):
        if number == import_line or line.strip().startswith("import "):
            continue
        if pattern.search(line):
            return True

    return False


def find_unused_in_content(
    content: str,
    relative_path: str,
    medium_threshold: int = 5,
) -> List[Criticism]:
    """
    Merge every unused import of one file into a single ELIM criticism.

    Args:
        content: File text
        relative_path: Project-relative file path
        medium_threshold: Unused count at which severity becomes medium

    Returns:
        Zero or one criticism
    """
    lines = content.split("\n")
    unused = [
        imported for imported in extract_imports(content)
        if not is_import_used(imported.name, lines, imported.line)
    ]
    if not unused:
        return []

    count = len(unused)
    plural = "s" if count > 1 else ""
    names = ", ".join(imported.name for imported in unused)
    shown = names[:SUBJECT_NAMES_LENGTH]
    if len(names) > SUBJECT_NAMES_LENGTH:
        shown += "..."
    subject = f"unused import{plural}: {shown}"

    severity = CriticismSeverity.MEDIUM if count >= medium_threshold else CriticismSeverity.LOW

    return [Criticism(
        id=generate_criticism_id(CriticismCategory.ELIM, subject, [relative_path]),
        category=CriticismCategory.ELIM,
        subject=subject,
        description=(
            f"Found {count} unused import{plural}: {names}. These can be safely "
            f"removed to reduce bundle size and improve clarity."
        ),
        files=[relative_path],
        location=f"{relative_path}:{unused[0].line}",
        severity=severity,
    )]


async def find_unused_imports(
    file_path: Union[str, Path],
    relative_path: str,
    config: Optional[CritConfig] = None,
) -> List[Criticism]:
    """Read one source file and report its unused imports."""
    config = config or CritConfig()
    if PurePosixPath(relative_path).suffix not in config.source_extensions:
        return []

    content = await read_source(file_path)
    if content is None:
        return []
    return find_unused_in_content(content, relative_path, config.unused_import_medium_threshold)
