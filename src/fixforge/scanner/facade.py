import os
from pathlib import Path
from typing import Iterable, List, Optional, Union

import pathspec

from fixforge.logging_config import logger
from fixforge.tracing import trace
from .config import DEFAULT_EXTENSIONS, DEFAULT_IGNORE_PATTERNS, validate_extensions


def _load_ignore_spec(directory: Path, respect_gitignore: bool) -> pathspec.PathSpec:
    all_patterns = []
    if respect_gitignore:
        all_patterns.extend(DEFAULT_IGNORE_PATTERNS)
        gitignore_path = directory / ".gitignore"
        if gitignore_path.is_file():
            try:
                with open(gitignore_path, "r", encoding="utf-8") as f:
                    gitignore_patterns = f.read().splitlines()
                all_patterns.extend(gitignore_patterns)
                logger.debug(f"Loaded {len(gitignore_patterns)} patterns from '{gitignore_path}'")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read .gitignore file at '{gitignore_path}'. Error: {e}")

    return pathspec.PathSpec.from_lines("gitignore", all_patterns)


def _walk_directory(directory: Path, spec: pathspec.PathSpec, allowed_extensions: set) -> List[Path]:
    found: List[Path] = []

    for root, dirs, files in os.walk(directory):
        root_path = Path(root)

        # Prune ignored directories in place so os.walk never descends into them
        kept = []
        for d in sorted(dirs):
            relative_dir = (root_path / d).relative_to(directory)
            if spec.match_file(f"{relative_dir.as_posix()}/"):
                logger.debug(f"Ignoring directory '{relative_dir}' due to ignore rules.")
            else:
                kept.append(d)
        dirs[:] = kept

        for file_name in sorted(files):
            file_path = root_path / file_name
            relative_path = file_path.relative_to(directory)

            if spec.match_file(relative_path.as_posix()):
                logger.debug(f"Ignoring '{relative_path}' due to ignore rules")
                continue

            if file_path.suffix not in allowed_extensions:
                continue

            found.append(file_path)

    return found


@trace
def collect_files(
    paths: Iterable[Union[str, Path]],
    extensions: Optional[List[str]] = None,
    respect_gitignore: bool = True,
) -> List[Path]:
    """
    Expand files and directories into the list of source files to analyze.

    Files given explicitly are always kept. Directories are walked
    recursively, skipping ignored paths (defaults + the directory's
    .gitignore) and files whose extension is not in `extensions`.
    Missing paths are logged and skipped.

    Args:
        paths: Files and/or directories
        extensions: Extensions to include from directories (default: ['.py'])
        respect_gitignore: Apply ignore rules while walking directories

    Returns:
        Files in a stable order, without duplicates

    Raises:
        ConfigError: If `extensions` is malformed
    """
    extensions = list(extensions) if extensions is not None else list(DEFAULT_EXTENSIONS)
    validate_extensions(extensions)
    allowed_extensions = set(extensions)

    collected: List[Path] = []
    seen = set()

    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            spec = _load_ignore_spec(path, respect_gitignore)
            candidates = _walk_directory(path, spec, allowed_extensions)
        elif path.is_file():
            candidates = [path]
        else:
            logger.warning(f"Skipping '{path}': no such file or directory")
            continue

        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                collected.append(candidate)

    logger.info(f"Collected {len(collected)} file(s)")
    return collected
