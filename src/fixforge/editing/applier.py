"""
PatchApplier: applies one file's planned edits with backup and atomic writes.

The new content is built in a single ascending pass that copies untouched
spans of the original bytes and splices in replacements. That is equivalent
to replacing in place from the highest offset down, without any in-place
grow/shrink bookkeeping.
"""

import difflib
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from fixforge.exceptions import EditError, EditIOError, EditRangeError, EditValidationError, StaleContentError
from fixforge.logging_config import logger
from fixforge.schemas import ApplyResult, Edit, FileEditSet, is_well_formed
from .config import get_editing_config


def read_file(file: str) -> bytes:
    """
    Read a target file's bytes.

    Raises:
        EditIOError: If the file cannot be read
    """
    try:
        with open(file, 'rb') as f:
            return f.read()
    except OSError as e:
        raise EditIOError(file, "read", e.strerror or str(e)) from e


def splice(content: bytes, edits: Iterable[Edit], file: str = "") -> bytes:
    """
    Build new content from validated, non-overlapping edits.

    Edits may come in any order. Insertions sharing an offset with a
    replaced span land before that span's replacement.

    Raises:
        EditValidationError: Negative offset or length, or two edits overlap
        EditRangeError: An edit reaches past the end of content
    """
    parts: List[bytes] = []
    cursor = 0

    for edit in sorted(edits, key=lambda e: (e.offset, e.length)):
        if edit.offset < 0 or edit.length < 0:
            raise EditValidationError(
                file or edit.file,
                f"Malformed edit: offset {edit.offset}, length {edit.length} (both must be >= 0)",
                operation="apply",
            )
        if not is_well_formed(edit, len(content)):
            raise EditRangeError(file or edit.file, edit, len(content), operation="apply")
        if edit.offset < cursor:
            raise EditValidationError(
                file or edit.file,
                f"Edit at offset {edit.offset} overlaps a previous edit ending at {cursor}",
                operation="apply",
            )
        parts.append(content[cursor:edit.offset])
        parts.append(edit.replacement)
        cursor = edit.end

    parts.append(content[cursor:])
    return b"".join(parts)


def generate_unified_diff(
    file_path: str,
    original: bytes,
    modified: bytes,
    max_diff_lines: int = 200,
) -> str:
    """
    Unified diff for display. Bytes are decoded as UTF-8 with replacement,
    so the diff is a preview, not a patch format.

    Large diffs keep headers and every deleted line, then fill the remaining
    budget with context and added lines.
    """
    original_lines = original.decode("utf-8", errors="replace").splitlines(keepends=True)
    modified_lines = modified.decode("utf-8", errors="replace").splitlines(keepends=True)

    diff_lines = list(difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
    ))

    if len(diff_lines) <= max_diff_lines:
        return ''.join(diff_lines)

    headers = [l for l in diff_lines if l.startswith(('---', '+++', '@@'))]
    deleted = [l for l in diff_lines if l.startswith('-') and not l.startswith('---')]
    added = [l for l in diff_lines if l.startswith('+') and not l.startswith('+++')]

    kept = headers + deleted
    remaining = max(max_diff_lines - len(kept), 0)
    kept.extend(added[:remaining])
    dropped = len(diff_lines) - len(kept)
    kept.append(f"\n[... {dropped} diff lines truncated ...]\n")
    return ''.join(kept)


class PatchApplier:
    """
    Apply a FileEditSet to one file.

    Features:
    - Range revalidation against the content actually being patched
    - Backup (<file><suffix>, alongside the original) before any write
    - Atomic writes (temp file in the same directory + os.replace)
    - Dry-run mode producing the new content and a unified diff

    Holds no per-file state, so one instance can serve several threads.
    """

    def __init__(self, config: Optional[Dict] = None):
        """
        Args:
            config: Optional overrides for the editing config
        """
        self.config = get_editing_config(config)

    def apply(
        self,
        edit_set: FileEditSet,
        content: bytes,
        backup: Optional[bool] = None,
        dry_run: bool = False,
    ) -> ApplyResult:
        """
        Apply planned edits to `content` and write the result to the file.

        Args:
            edit_set: Validated, ordered edits for one file
            content: The file's bytes as read when the plan was made
            backup: Write a backup first (defaults to config backup_enabled)
            dry_run: Compute the new content and a diff without writing

        Returns:
            ApplyResult; failures are reported in `error`, never raised
        """
        file = edit_set.file
        if backup is None:
            backup = self.config["backup_enabled"]

        backup_path = None
        try:
            new_content = splice(content, edit_set.edits, file)

            if dry_run:
                diff = generate_unified_diff(file, content, new_content, self.config["max_diff_lines"])
                logger.info(f"[Preview] Would apply {len(edit_set.edits)} edit(s) to {file}")
                return ApplyResult(file=file, success=True, content=new_content, diff=diff)

            if backup:
                backup_path = self.create_backup(file, content)

            self._atomic_write(file, new_content, operation="write")

        except EditError as e:
            logger.error(f"Failed to apply edits to {file}: {e.message}")
            return ApplyResult(
                file=file,
                success=False,
                backup_path=backup_path,
                error=e.to_file_error(),
            )

        logger.info(f"Applied {len(edit_set.edits)} edit(s) to {file}")
        return ApplyResult(file=file, success=True, content=new_content, backup_path=backup_path)

    def apply_file(
        self,
        edit_set: FileEditSet,
        snapshot: bytes,
        backup: Optional[bool] = None,
        dry_run: bool = False,
    ) -> ApplyResult:
        """
        Re-read the file, confirm it still matches `snapshot`, then apply.

        Turns a file that changed between planning and applying into a clean
        range error instead of silently corrupted output.
        """
        file = edit_set.file
        try:
            current = read_file(file)
            if current != snapshot:
                raise StaleContentError(file, len(snapshot), len(current))
        except EditError as e:
            logger.error(f"Not applying edits to {file}: {e.message}")
            return ApplyResult(file=file, success=False, error=e.to_file_error())

        return self.apply(edit_set, current, backup=backup, dry_run=dry_run)

    def backup_path_for(self, file: str) -> str:
        return file + self.config["backup_suffix"]

    def create_backup(self, file: str, content: bytes) -> str:
        """
        Write an exact copy of `content` next to `file`.

        An existing backup is replaced. Backups are never deleted here.

        Returns:
            Path to the backup file

        Raises:
            EditIOError: If the backup cannot be written (operation "backup")
        """
        backup_path = self.backup_path_for(file)
        self._atomic_write(backup_path, content, operation="backup", target=file)
        logger.debug(f"Created backup: {backup_path}")
        return backup_path

    def _atomic_write(self, path: str, content: bytes, operation: str, target: Optional[str] = None) -> None:
        """
        Write bytes atomically using temp file + rename.

        The temp file lives in the destination directory so os.replace never
        crosses filesystems. On failure the destination is left untouched and
        the temp file is removed.

        Raises:
            EditIOError: Reported against `target` (defaults to `path`)
        """
        destination = Path(path)
        target = target or path

        try:
            fd, temp_path = tempfile.mkstemp(
                dir=str(destination.parent),
                prefix=f".{destination.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise EditIOError(target, operation, e.strerror or str(e)) from e

        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(content)
                f.flush()
                if self.config["fsync"]:
                    os.fsync(f.fileno())

            # A new backup takes the mode of the file it protects
            mode_source = destination if destination.exists() else Path(target)
            if mode_source.exists():
                shutil.copymode(str(mode_source), temp_path)

            os.replace(temp_path, str(destination))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                logger.warning(f"Could not remove temp file {temp_path}")
            raise EditIOError(target, operation, e.strerror or str(e)) from e

        logger.debug(f"Atomic write completed: {path}")


def apply(edit_set: FileEditSet, content: bytes, backup: bool = True) -> ApplyResult:
    """Apply one file's plan with a default PatchApplier."""
    return PatchApplier().apply(edit_set, content, backup=backup)
