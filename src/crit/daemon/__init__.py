"""Background daemon that turns file changes into criticisms."""

from .analyzer import analyze_changes, analyze_project, find_test_path, run_clone_detection
from .daemon import CritDaemon, start_daemon
from .reporter import append_history, get_history, get_last_action, report_actions

__all__ = [
    "CritDaemon",
    "start_daemon",
    "analyze_project",
    "analyze_changes",
    "run_clone_detection",
    "find_test_path",
    "report_actions",
    "get_last_action",
    "append_history",
    "get_history",
]
