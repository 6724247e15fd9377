"""Locations of crit's per-project state under the .crit directory."""

from pathlib import Path
from typing import Union

CRIT_DIR = ".crit"

CONFIG_FILE = "config.yaml"
RULES_FILE = "rules.md"
CONTEXT_DIR = "context"
STATE_DIR = "state"
CRITICISMS_FILE = "criticisms.json"
PREFERENCES_FILE = "preferences.md"
HISTORY_FILE = "history.jsonl"
LAST_ACTION_FILE = "last_action.md"

PathLike = Union[str, Path]


def get_crit_dir(root: PathLike) -> Path:
    """Return the .crit directory for a project root."""
    return Path(root) / CRIT_DIR


def crit_exists(root: PathLike) -> bool:
    """Check whether the project has been initialized."""
    return get_crit_dir(root).is_dir()


def get_state_dir(root: PathLike) -> Path:
    return get_crit_dir(root) / STATE_DIR


def get_context_dir(root: PathLike) -> Path:
    return get_crit_dir(root) / CONTEXT_DIR


def get_criticisms_path(root: PathLike) -> Path:
    return get_state_dir(root) / CRITICISMS_FILE


def get_preferences_path(root: PathLike) -> Path:
    return get_context_dir(root) / PREFERENCES_FILE


def get_history_path(root: PathLike) -> Path:
    return get_state_dir(root) / HISTORY_FILE


def get_last_action_path(root: PathLike) -> Path:
    return get_crit_dir(root) / LAST_ACTION_FILE


def get_config_path(root: PathLike) -> Path:
    return get_crit_dir(root) / CONFIG_FILE


def ensure_directories(root: PathLike) -> None:
    """Create the .crit layout if missing."""
    get_state_dir(root).mkdir(parents=True, exist_ok=True)
    get_context_dir(root).mkdir(parents=True, exist_ok=True)
