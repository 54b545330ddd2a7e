"""
fixforge user configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.fixforge/config.json (cross-project settings)
- Local: .fixforge/config.json (project-specific overrides)

Config structure:
{
  "apply": {
    "backup": true,             // Write <file>.bak before patching
    "backup_suffix": ".bak",
    "mode": "fail_fast",        // or "best_effort"
    "workers": 1                // Threads for best-effort batches
  },
  "analyze": {
    "long_function_lines": 80,
    "suggest_docs": true,
    "suggest_names": true,
    "extensions": [".py"],
    "respect_gitignore": true
  }
}

CLI flags always win over both files.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from fixforge.logging_config import logger
from fixforge.paths import FixForgePaths


# Default configuration
DEFAULT_CONFIG = {
    "apply": {
        "backup": True,
        "backup_suffix": ".bak",
        "mode": "fail_fast",
        "workers": 1,
    },
    "analyze": {
        "long_function_lines": 80,
        "suggest_docs": True,
        "suggest_names": True,
        "extensions": [".py"],
        "respect_gitignore": True,
    },
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.fixforge/config.json)
    3. Local config (.fixforge/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, global_config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            project_root: Project root directory (defaults to CWD)
            global_config_path: Override for the global config file (tests)
        """
        paths = FixForgePaths(project_root or Path.cwd())
        self.project_root = paths.project_root
        self.global_config_path = global_config_path or paths.global_config
        self.local_config_path = paths.local_config

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration with hierarchical override.

        Unreadable or malformed files are logged and ignored.
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        for label, config_path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not config_path.exists():
                continue
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    overrides = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load {label} config from {config_path}: {e}")
                continue
            if not isinstance(overrides, dict):
                logger.warning(f"Ignoring {label} config at {config_path}: top level must be an object")
                continue
            config = self._deep_merge(config, overrides)
            logger.debug(f"Loaded {label} config from {config_path}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Examples:
            config.get("apply.backup")                  # True
            config.get("analyze.long_function_lines")   # 80
        """
        value = self._config

        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set_global(self, key: str, value: Any) -> bool:
        """Set a global config value and save to disk."""
        return self._set_and_save(key, value, is_global=True)

    def set_local(self, key: str, value: Any) -> bool:
        """Set a local config value and save to disk."""
        return self._set_and_save(key, value, is_global=False)

    def _set_and_save(self, key: str, value: Any, is_global: bool) -> bool:
        config_path = self.global_config_path if is_global else self.local_config_path

        # Load existing config or start with empty
        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                return False
        else:
            config = {}

        keys = key.split(".")
        current = config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

        self._config = self._load_config()
        logger.info(f"Saved {'global' if is_global else 'local'} config: {key}={value}")
        return True

    def get_all(self) -> Dict[str, Any]:
        """Get the entire merged configuration."""
        return copy.deepcopy(self._config)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = self._load_config()


# Global singleton
_config: Optional[UserConfig] = None


def get_user_config(project_root: Optional[Path] = None) -> UserConfig:
    """
    Get the user configuration singleton.

    Args:
        project_root: Optional project root override

    Returns:
        UserConfig instance
    """
    global _config
    if project_root is not None:
        return UserConfig(project_root)
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Reset the global config singleton (for testing)."""
    global _config
    _config = None
