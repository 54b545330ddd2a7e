from typing import List

from fixforge.exceptions import ConfigError

# Default patterns to ignore, mimicking common global gitignore settings
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".fixforge/",
    "__pycache__/",
    ".pytest_cache/",
    "build/",
    "dist/",
    "*.egg-info/",
    ".venv/",
    "venv/",
    "node_modules/",
    "*.pyc",
    "*.pyo",
    "*.bak",
]

DEFAULT_EXTENSIONS = [".py"]


def validate_extensions(extensions: List[str]) -> None:
    """
    Validate file extension filters.

    Args:
        extensions: List of file extensions (e.g., ['.py', '.pyi'])

    Raises:
        ConfigError: If extensions are invalid.
    """
    if not isinstance(extensions, list):
        raise ConfigError("Extensions must be a list of strings")

    for ext in extensions:
        if not isinstance(ext, str):
            raise ConfigError(f"Invalid extension: {ext} (must be a string)")
        if not ext.startswith('.'):
            raise ConfigError(f"Extension '{ext}' must start with a dot (e.g., '.py')")
        if len(ext) < 2:
            raise ConfigError(f"Extension '{ext}' is too short (minimum: 2 characters)")
