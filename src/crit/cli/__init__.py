"""Command-line interface for crit."""

from .app import main

__all__ = ["main"]
