"""
Pytest configuration for the fixforge test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Isolated user config (no reads from the real home directory)
- Common fixtures for temp directories and sample source trees
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from fixforge.logging_config import setup_logging


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet, machine-mode operation."""
    os.environ.setdefault("FIXFORGE_MACHINE_MODE", "1")
    os.environ.pop("FIXFORGE_HUMAN_MODE", None)
    os.environ.pop("FIXFORGE_FILE_LOGGING", None)


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, enable_file_logging=False, force=True)


# ============================================================================
# CONFIG ISOLATION
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """
    Point the global config at an empty temp dir and reset singletons, so a
    developer's ~/.fixforge/config.json never leaks into tests.
    """
    from fixforge.cli.config import CLIConfig
    from fixforge.paths import FixForgePaths, reset_paths
    from fixforge.user_config import reset_user_config

    fake_home = tmp_path_factory.mktemp("home")
    monkeypatch.setattr(FixForgePaths, "GLOBAL_DIR", fake_home / ".fixforge")
    reset_paths()
    reset_user_config()
    CLIConfig.set_machine_mode(None)
    yield fake_home
    reset_paths()
    reset_user_config()
    CLIConfig.set_machine_mode(None)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="fixforge_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_project(temp_dir):
    """
    Create a temporary project directory with sample Python files.

    - weak.py: undocumented function with a weak local name
    - clean.py: nothing to report
    - .gitignore excluding generated/
    """
    (temp_dir / "weak.py").write_text(
        "def total(values):\n"
        "    tmp = 0\n"
        "    for v in values:\n"
        "        tmp += v\n"
        "    return tmp\n"
    )
    (temp_dir / "clean.py").write_text(
        "def add(left, right):\n"
        '    """Add two numbers."""\n'
        "    return left + right\n"
    )
    generated = temp_dir / "generated"
    generated.mkdir()
    (generated / "skip_me.py").write_text("def f():\n    tmp = 1\n    return tmp\n")
    (temp_dir / ".gitignore").write_text("generated/\n")

    yield temp_dir


@pytest.fixture
def write_file(temp_dir):
    """Write bytes (or text) to a file under temp_dir and return its path as str."""
    def _write(name, content):
        path = temp_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.write_bytes(content)
        return str(path)

    return _write
