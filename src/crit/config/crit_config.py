"""Project configuration management."""

import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from ..paths import get_config_path

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

ENV_PREFIX = "CRIT_"

DEFAULT_SOURCE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx"]
DEFAULT_WATCHED_EXTENSIONS = DEFAULT_SOURCE_EXTENSIONS + [".json", ".md"]
DEFAULT_IGNORED_DIRS = [
    "node_modules",
    ".git",
    ".crit",
    "dist",
    "build",
    ".next",
    ".nuxt",
    "coverage",
    ".orchestra",
]


class CritConfig(BaseModel):
    """Configuration for the watcher, analyzers and daemon."""

    # Watcher
    debounce_seconds: float = Field(
        default=0.1,
        gt=0,
        description="Debounce window applied per path",
    )
    watched_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_WATCHED_EXTENSIONS),
        description="Extensions that produce watch events",
    )
    source_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS),
        description="Extensions treated as analyzable source code",
    )
    ignored_dirs: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_DIRS),
        description="Directory names ignored anywhere in a path",
    )

    # Analyzers
    clone_window_lines: int = Field(default=6, ge=2, description="Lines per clone window")
    clone_min_chars: int = Field(
        default=50,
        ge=1,
        description="Minimum normalized window length worth reporting",
    )
    unused_import_medium_threshold: int = Field(
        default=5,
        ge=1,
        description="Unused imports in one file that escalate severity to medium",
    )

    # Daemon side effects
    write_history: bool = Field(default=True, description="Append actions to history.jsonl")
    write_reports: bool = Field(default=True, description="Rewrite last_action.md")
    analyze_criticisms: bool = Field(default=True, description="Run analyzers on batches")

    log_level: str = Field(default="INFO", description="Root log level")


def load_config(
    root: Optional[Union[str, Path]] = None,
    config_path: Optional[str] = None,
) -> CritConfig:
    """
    Load configuration for a project.

    Configuration is merged in this order (later overrides earlier):
    1. Default values
    2. Project config (<root>/.crit/config.yaml)
    3. Explicit config_path if provided
    4. Environment variables (CRIT_*)

    Args:
        root: Project root directory (default: current directory)
        config_path: Optional explicit config file path

    Returns:
        Merged CritConfig instance
    """
    merged_config: Dict[str, Any] = {}

    config_paths = [get_config_path(root or Path.cwd())]
    if config_path:
        config_paths.append(Path(config_path))

    for path in config_paths:
        if path.exists():
            try:
                with open(path) as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top level must be a mapping")
                merged_config.update(file_config)
                logger.debug(f"Loaded config from {path}")
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {path}: {e}")

    merged_config.update(_get_env_overrides())

    try:
        return CritConfig(**merged_config)
    except ValidationError as e:
        logger.warning(f"Invalid configuration, using defaults: {e}")
        return CritConfig()


def _get_env_overrides() -> Dict[str, Any]:
    """
    Get configuration overrides from environment variables.

    CRIT_DEBOUNCE_MS is accepted in milliseconds; other CRIT_* variables map
    onto field names directly (CRIT_LOG_LEVEL -> log_level).
    """
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue

        config_key = key[len(ENV_PREFIX):].lower()

        if config_key == "debounce_ms":
            try:
                overrides["debounce_seconds"] = int(value) / 1000.0
            except ValueError:
                logger.warning(f"Ignoring invalid {key}={value!r}")
            continue

        if config_key not in CritConfig.model_fields:
            continue

        if CritConfig.model_fields[config_key].annotation == List[str]:
            overrides[config_key] = [v.strip() for v in value.split(",") if v.strip()]
        elif value.lower() in ("true", "yes"):
            overrides[config_key] = True
        elif value.lower() in ("false", "no"):
            overrides[config_key] = False
        else:
            overrides[config_key] = value

    return overrides


def save_config(config: CritConfig, root: Optional[Union[str, Path]] = None) -> Path:
    """
    Save configuration to the project config file.

    Args:
        config: Configuration to save
        root: Project root (default: current directory)

    Returns:
        Path written
    """
    path = get_config_path(root or Path.cwd())
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved config to {path}")
    return path
