"""Clone detection - finds duplicated code blocks.

Uses exact hashing of normalized sliding windows. Near-duplicates that differ
by more than whitespace, comments or literal values are not detected.
"""

import asyncio
import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from ..config import CritConfig
from ..criticism.store import generate_criticism_id
from ..models import (
    CloneResult,
    Criticism,
    CriticismCategory,
    CriticismSeverity,
)
from .sources import find_source_files, read_source, to_relative

logger = logging.getLogger(__name__)

STRING_LITERAL = re.compile(
    r'"(?:[^"\\\n]|\\.)*"'
    r"|'(?:[^'\\\n]|\\.)*'"
    r"|`(?:[^`\\]|\\.)*`"
)
BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
NUMERIC_LITERAL = re.compile(r"\b\d+(?:\.\d+)?\b")
WHITESPACE = re.compile(r"\s+")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class CodeBlock:
    """A window of consecutive lines in one file."""

    file: str
    start_line: int
    end_line: int
    hash: str


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return sign + "".join(reversed(digits))


def hash_code(text: str) -> str:
    """
    Polynomial string hash (h * 31 + c) with 32-bit signed wraparound.

    Returns:
        The hash rendered in base 36
    """
    h = 0
    for char in text:
        h = ((h << 5) - h + ord(char)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


def normalize_code(code: str) -> str:
    """Strip comments, blank out literals and collapse whitespace."""
    code = STRING_LITERAL.sub('""', code)
    code = BLOCK_COMMENT.sub("", code)
    code = LINE_COMMENT.sub("", code)
    code = NUMERIC_LITERAL.sub("0", code)
    return WHITESPACE.sub(" ", code).strip()


def extract_blocks(
    content: str,
    relative_path: str,
    window_lines: int = 6,
    min_chars: int = 50,
) -> List[CodeBlock]:
    """
    Slide a fixed-size window over a file's lines.

    Args:
        content: File text
        relative_path: Project-relative file path
        window_lines: Lines per window
        min_chars: Windows shorter than this after normalization are dropped

    Returns:
        Hashed blocks in file order
    """
    lines = content.split("\n")
    blocks: List[CodeBlock] = []

    for start in range(len(lines) - window_lines + 1):
        normalized = normalize_code("\n".join(lines[start:start + window_lines]))

        # Too trivial to be meaningful duplication
        if len(normalized) < min_chars:
            continue

        blocks.append(CodeBlock(
            file=relative_path,
            start_line=start + 1,
            end_line=start + window_lines,
            hash=hash_code(normalized),
        ))

    return blocks


def _clone_criticism(first: CodeBlock, second: CodeBlock, window_lines: int) -> Criticism:
    subject = f"duplicated code block ({window_lines}+ lines)"
    same_file = first.file == second.file

    if same_file:
        description = (
            f"Found duplicated code within the same file. Lines "
            f"{first.start_line}-{first.end_line} and {second.start_line}-{second.end_line} "
            f"are nearly identical. Consider extracting to a shared function."
        )
        files = [first.file]
    else:
        description = (
            f'Found duplicated code across files. Similar code exists in both '
            f'"{first.file}" and "{second.file}". Consider consolidating into a shared module.'
        )
        files = [first.file, second.file]

    return Criticism(
        id=generate_criticism_id(CriticismCategory.SIMPLIFY, subject, [first.file, second.file]),
        category=CriticismCategory.SIMPLIFY,
        subject=subject,
        description=description,
        files=files,
        location=f"{first.file}:{first.start_line}",
        severity=CriticismSeverity.MEDIUM,
    )


async def detect_code_clones(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> CloneResult:
    """
    Find duplicated blocks across all non-test source files.

    Only the first two occurrences of each duplicated block are reported,
    and each unordered file pair is reported at most once per run.

    Args:
        project_root: Project root
        config: Window size and minimum length settings

    Returns:
        CloneResult with one SIMPLIFY criticism per reported pair
    """
    config = config or CritConfig()
    root = Path(project_root)
    window = config.clone_window_lines

    files = find_source_files(root, config)
    contents = await asyncio.gather(*(read_source(root / f) for f in files))

    groups: Dict[str, List[CodeBlock]] = defaultdict(list)
    for relative_path, content in zip(files, contents):
        if content is None:
            continue
        for block in extract_blocks(content, relative_path, window, config.clone_min_chars):
            groups[block.hash].append(block)

    criticisms: List[Criticism] = []
    reported_pairs: Set[str] = set()

    for blocks in groups.values():
        if len(blocks) < 2:
            continue

        # Report first pair only to avoid noise
        first, second = blocks[0], blocks[1]

        pair_key = "::".join(sorted([first.file, second.file]))
        if pair_key in reported_pairs:
            continue
        reported_pairs.add(pair_key)

        criticisms.append(_clone_criticism(first, second, window))

    logger.info(f"Clone detection: {len(criticisms)} clones in {len(files)} files")

    return CloneResult(
        criticisms=criticisms,
        total_clones=len(criticisms),
        duplicated_lines=len(criticisms) * window,
    )


async def check_file_for_clones(
    file_path: str,
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> List[Criticism]:
    """Clones involving one file, found by a full project scan."""
    relative_path = to_relative(file_path, project_root)
    result = await detect_code_clones(project_root, config)
    return [c for c in result.criticisms if relative_path in c.files]
