"""
Configuration for the edit-application engine.

Defaults only; the CLI layers user config (``apply.*``) and flags on top.
"""

from typing import Any, Dict, Optional

from fixforge.exceptions import ConfigError

FAIL_FAST = "fail_fast"
BEST_EFFORT = "best_effort"
BATCH_MODES = (FAIL_FAST, BEST_EFFORT)


def get_editing_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Get editing configuration merged with optional overrides.

    Raises:
        ConfigError: If the resulting mode, suffix or worker count is invalid
    """
    config = {
        "backup_enabled": True,
        "backup_suffix": ".bak",
        "mode": FAIL_FAST,
        "workers": 1,
        "fsync": True,
        "max_diff_lines": 200,
        **(overrides or {}),
    }
    validate_editing_config(config)
    return config


def validate_editing_config(config: Dict[str, Any]) -> None:
    if config["mode"] not in BATCH_MODES:
        raise ConfigError(
            f"Unknown batch mode '{config['mode']}' (expected one of: {', '.join(BATCH_MODES)})"
        )
    suffix = config["backup_suffix"]
    if not isinstance(suffix, str) or not suffix or "/" in suffix:
        raise ConfigError(f"Invalid backup suffix: {suffix!r}")
    workers = config["workers"]
    if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
        raise ConfigError(f"workers must be a positive integer, got {workers!r}")


EDITING_CONFIG = get_editing_config()
