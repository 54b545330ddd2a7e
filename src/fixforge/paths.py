"""
fixforge path configuration.

All per-project state lives under a single directory in the project root:

.fixforge/
├── config.json          # Local config overrides (see user_config)
└── logs/                # Opt-in log files

Backups are NOT stored here: each backup sits next to the file it protects
(``<file>.bak`` by default) so it survives moving the project around.
"""

from pathlib import Path
from typing import Optional


class FixForgePaths:
    """
    Centralized path configuration for fixforge.

    Paths are lazily resolved relative to project_root, which defaults to
    the current working directory.
    """

    FIXFORGE_DIR = ".fixforge"
    GLOBAL_DIR = Path.home() / ".fixforge"

    CONFIG_NAME = "config.json"
    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        self._project_root = project_root

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def fixforge_dir(self) -> Path:
        """Get the .fixforge directory path."""
        return self.project_root / self.FIXFORGE_DIR

    @property
    def local_config(self) -> Path:
        return self.fixforge_dir / self.CONFIG_NAME

    @property
    def global_config(self) -> Path:
        return self.GLOBAL_DIR / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self.fixforge_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.fixforge_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


# Global instance for convenience
_default_paths: Optional[FixForgePaths] = None


def get_paths(project_root: Optional[Path] = None) -> FixForgePaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override

    Returns:
        FixForgePaths instance
    """
    global _default_paths
    if project_root is not None:
        return FixForgePaths(project_root)
    if _default_paths is None:
        _default_paths = FixForgePaths()
    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None
