"""File watcher for real-time change tracking."""

from .file_watcher import ProjectWatcher
from .debouncer import ChangeBatcher
from .change_processor import classify, is_test_file, process_batch

__all__ = [
    "ProjectWatcher",
    "ChangeBatcher",
    "classify",
    "is_test_file",
    "process_batch",
]
