"""
crit - continuous code criticism.

Watches a project directory, runs text-based analyzers on changed files and
keeps a deduplicated, reviewable list of criticisms.
"""

__version__ = "0.1.0"
