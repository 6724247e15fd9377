"""Source file discovery and reading shared by the analyzers."""

import asyncio
import logging
import os
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union

from ..config import CritConfig
from ..watcher.change_processor import is_test_file

logger = logging.getLogger(__name__)


def is_source_file(relative_path: str, config: Optional[CritConfig] = None) -> bool:
    """Check whether a path is analyzable, non-test source code."""
    config = config or CritConfig()
    suffix = PurePosixPath(relative_path).suffix
    return suffix in config.source_extensions and not is_test_file(relative_path)


def find_source_files(
    project_root: Union[str, Path],
    config: Optional[CritConfig] = None,
) -> List[str]:
    """
    Recursively find non-test source files.

    Unreadable directories are skipped without aborting the walk.

    Args:
        project_root: Directory to search
        config: Extension and ignored-directory settings

    Returns:
        Sorted project-relative POSIX paths
    """
    config = config or CritConfig()
    root = Path(project_root)
    ignored = set(config.ignored_dirs)
    files: List[str] = []

    def on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory: {error}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored)
        for filename in filenames:
            relative = Path(dirpath, filename).relative_to(root).as_posix()
            if is_source_file(relative, config):
                files.append(relative)

    files.sort()
    return files


def to_relative(path: Union[str, Path], project_root: Union[str, Path]) -> str:
    """Express a path relative to the project root in POSIX form."""
    path = Path(path)
    if not path.is_absolute():
        return path.as_posix()
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Skipping unreadable file {path}: {e}")
        return None


async def read_source(path: Union[str, Path]) -> Optional[str]:
    """
    Read a file without blocking the event loop.

    Returns:
        File text, or None if the file could not be read
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _read_text, Path(path))
