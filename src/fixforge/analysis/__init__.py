"""
Analysis package: producers of Issues.

Analyzers only emit findings and candidate edits; applying them is the
editing package's job.
"""

from .base import Analyzer, AnalyzeOptions, SuggestionProvider
from .suggester import HeuristicSuggester, is_weak_name, sanitize_identifier
from .python_analyzer import PythonAnalyzer

ANALYZERS = {
    PythonAnalyzer.name: PythonAnalyzer,
}

__all__ = [
    "Analyzer",
    "AnalyzeOptions",
    "SuggestionProvider",
    "HeuristicSuggester",
    "PythonAnalyzer",
    "ANALYZERS",
    "is_weak_name",
    "sanitize_identifier",
]
