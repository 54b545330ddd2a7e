"""
This facade exposes the public API for the scanner module.
Other parts of the application should only import from here.
"""
from .facade import collect_files
from .config import DEFAULT_IGNORE_PATTERNS, DEFAULT_EXTENSIONS

__all__ = ["collect_files", "DEFAULT_IGNORE_PATTERNS", "DEFAULT_EXTENSIONS"]
