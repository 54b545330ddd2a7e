"""
Loguru setup shared by the library and the CLI.

Modules log through ``from fixforge.logging_config import logger``. Console
output goes to stderr so stdout stays reserved for command results (JSON in
machine mode). A rotating file under ``.fixforge/logs`` is opt-in.
"""

import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
LOG_FILE_NAME = "fixforge.log"

_configured = False


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


def setup_logging(level="INFO", suppress_console=None, enable_file_logging=None, force=False):
    """
    (Re)configure the loguru sinks.

    Args:
        level: Minimum level for the console sink
        suppress_console: Drop the stderr sink; defaults to FIXFORGE_MACHINE_MODE
        enable_file_logging: Add the file sink; defaults to FIXFORGE_FILE_LOGGING
        force: Replace an existing configuration (the CLI callback and tests do)
    """
    global _configured
    if _configured and not force:
        return
    _configured = True

    if suppress_console is None:
        suppress_console = _env_flag("FIXFORGE_MACHINE_MODE")
    if enable_file_logging is None:
        enable_file_logging = _env_flag("FIXFORGE_FILE_LOGGING")

    logger.remove()

    if not suppress_console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if enable_file_logging:
        from fixforge.paths import get_paths

        paths = get_paths()
        paths.ensure_dirs()
        logger.add(
            paths.logs_dir / LOG_FILE_NAME,
            level="INFO",
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            catch=True,
        )


setup_logging()
