"""
Static analyzers for code-quality criticisms.

Combines the clone detector, secret scanner, rule checker and unused-import
detector behind a per-file and per-project engine.
"""

from .clones import check_file_for_clones, detect_code_clones
from .engine import analyze_changed_files, analyze_file, analyze_project
from .imports import extract_imports, find_unused_imports
from .rules import check_file_against_rules, extract_rules, load_project_rules
from .secrets import scan_file_for_secrets, secrets_to_criticisms
from .sources import find_source_files, is_source_file

__all__ = [
    "analyze_project",
    "analyze_changed_files",
    "analyze_file",
    "detect_code_clones",
    "check_file_for_clones",
    "scan_file_for_secrets",
    "secrets_to_criticisms",
    "check_file_against_rules",
    "extract_rules",
    "load_project_rules",
    "extract_imports",
    "find_unused_imports",
    "find_source_files",
    "is_source_file",
]
