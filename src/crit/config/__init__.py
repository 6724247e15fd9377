"""Configuration module."""

from .crit_config import (
    CritConfig,
    DEFAULT_IGNORED_DIRS,
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_WATCHED_EXTENSIONS,
    load_config,
    save_config,
)

__all__ = [
    "CritConfig",
    "DEFAULT_IGNORED_DIRS",
    "DEFAULT_SOURCE_EXTENSIONS",
    "DEFAULT_WATCHED_EXTENSIONS",
    "load_config",
    "save_config",
]
