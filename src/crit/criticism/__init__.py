"""Criticism storage, preferences and review."""

from .store import CriticismStore, generate_criticism_id
from .preferences import PreferenceLog, format_entry, parse_preferences
from .review import review_criticism

__all__ = [
    "CriticismStore",
    "generate_criticism_id",
    "PreferenceLog",
    "format_entry",
    "parse_preferences",
    "review_criticism",
]
