"""
Tests for the patch applier: splicing, backups, atomic writes and the
stale-content check.
"""

import os
import random
import stat

import pytest

from fixforge.editing.applier import PatchApplier, apply, generate_unified_diff, read_file, splice
from fixforge.editing.planner import plan
from fixforge.exceptions import EditIOError, EditRangeError, EditValidationError
from fixforge.schemas import Edit, FileEditSet


def edit_set(path, *edits):
    """Plan edits for one path and return its FileEditSet."""
    content_length = os.path.getsize(path)
    result = plan(
        [Edit(file=path, offset=o, length=l, replacement=r) for o, l, r in edits],
        {path: content_length},
    )
    assert result.ok, result.errors
    return result.plans[path]


def naive_apply(content, edits):
    """Reference: mutate a buffer in place from the highest offset down."""
    buffer = bytearray(content)
    for edit in sorted(edits, key=lambda e: (-e.offset, -e.length)):
        buffer[edit.offset:edit.end] = edit.replacement
    return bytes(buffer)


class TestSplice:
    """Test building new content from planned edits."""

    def test_single_replacement(self):
        edits = [Edit(file="a", offset=4, length=3, replacement=b"count")]
        assert splice(b"int tmp = 0;", edits) == b"int count = 0;"

    def test_no_offset_drift(self):
        edits = [
            Edit(file="a", offset=10, length=0, replacement=b"X"),
            Edit(file="a", offset=4, length=3, replacement=b"count"),
        ]
        assert splice(b"int tmp = 0;", edits) == b"int count = X0;"

    def test_insertion_before_replacement_at_same_offset(self):
        edits = [
            Edit(file="a", offset=4, length=3, replacement=b"count"),
            Edit(file="a", offset=4, length=0, replacement=b"/*x*/"),
        ]
        assert splice(b"int tmp = 0;", edits) == b"int /*x*/count = 0;"

    def test_deletion_and_append(self):
        edits = [
            Edit(file="a", offset=0, length=4),
            Edit(file="a", offset=12, length=0, replacement=b"\n"),
        ]
        assert splice(b"int tmp = 0;", edits) == b"tmp = 0;\n"

    def test_no_edits_returns_original(self):
        assert splice(b"unchanged", []) == b"unchanged"

    def test_rejects_out_of_range(self):
        with pytest.raises(EditRangeError) as exc_info:
            splice(b"short", [Edit(file="a", offset=3, length=10)])
        assert exc_info.value.operation == "apply"

    def test_rejects_negative_values_as_validation(self):
        for offset, length in ((-1, 1), (2, -1)):
            with pytest.raises(EditValidationError) as exc_info:
                splice(b"0123456789", [Edit(file="a", offset=offset, length=length)])
            assert exc_info.value.kind == "validation"
            assert not isinstance(exc_info.value, EditRangeError)

    def test_rejects_overlap(self):
        with pytest.raises(EditValidationError):
            splice(b"0123456789", [
                Edit(file="a", offset=2, length=4),
                Edit(file="a", offset=3, length=1),
            ])

    def test_matches_in_place_descending_application(self):
        rng = random.Random(1234)
        for _ in range(200):
            content = bytes(rng.randrange(32, 127) for _ in range(rng.randrange(0, 40)))
            cuts = sorted(rng.sample(range(len(content) + 1), k=min(len(content) + 1, rng.randrange(0, 8))))
            edits = []
            # Pair up cut points into disjoint spans, with some pure insertions
            for start, stop in zip(cuts[::2], cuts[1::2]):
                if rng.random() < 0.3:
                    stop = start
                replacement = bytes(rng.randrange(97, 123) for _ in range(rng.randrange(0, 6)))
                edits.append(Edit(file="a", offset=start, length=stop - start, replacement=replacement))

            planned = plan(edits, {"a": len(content)})
            assert planned.ok
            shuffled = list(planned.plans["a"].edits)
            rng.shuffle(shuffled)
            assert splice(content, shuffled) == naive_apply(content, edits)


class TestPatchApplier:
    """Test applying one file's plan to disk."""

    def test_applies_and_writes(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        result = PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=False)

        assert result.success
        assert result.content == b"int count = 0;"
        assert result.backup_path is None
        assert read_file(path) == b"int count = 0;"

    def test_backup_holds_original_bytes(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        result = apply(edit_set(path, (10, 0, b"X"), (4, 3, b"count")), read_file(path), backup=True)

        assert result.success
        assert result.backup_path == path + ".bak"
        assert read_file(result.backup_path) == b"int tmp = 0;"
        assert read_file(path) == b"int count = X0;"

    def test_existing_backup_is_replaced(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        write_file("a.c.bak", "stale backup")
        PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=True)
        assert read_file(path + ".bak") == b"int tmp = 0;"

    def test_custom_backup_suffix(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        applier = PatchApplier({"backup_suffix": ".orig"})
        result = applier.apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=True)
        assert result.backup_path == path + ".orig"

    def test_range_error_leaves_file_unchanged(self, write_file):
        path = write_file("a.c", "x" * 50)
        bad = FileEditSet(file=path, edits=(Edit(file=path, offset=100, length=1),))
        result = PatchApplier().apply(bad, read_file(path), backup=True)

        assert not result.success
        assert result.error.kind == "range"
        assert read_file(path) == b"x" * 50
        assert not os.path.exists(path + ".bak")

    def test_dry_run_writes_nothing(self, write_file):
        path = write_file("a.c", "int tmp = 0;\n")
        result = PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), dry_run=True)

        assert result.success
        assert result.content == b"int count = 0;\n"
        assert "-int tmp = 0;" in result.diff
        assert "+int count = 0;" in result.diff
        assert read_file(path) == b"int tmp = 0;\n"
        assert not os.path.exists(path + ".bak")

    def test_preserves_file_mode(self, write_file):
        path = write_file("run.sh", "echo tmp\n")
        os.chmod(path, 0o750)
        PatchApplier().apply(edit_set(path, (5, 3, b"count")), read_file(path), backup=False)
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o750

    def test_new_backup_keeps_file_mode(self, write_file):
        path = write_file("run.sh", "echo tmp\n")
        os.chmod(path, 0o754)
        result = PatchApplier().apply(edit_set(path, (5, 3, b"count")), read_file(path), backup=True)
        assert stat.S_IMODE(os.stat(result.backup_path).st_mode) == 0o754

    def test_no_temp_files_left_behind(self, write_file, temp_dir):
        path = write_file("a.c", "int tmp = 0;")
        PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=True)
        assert sorted(p.name for p in temp_dir.iterdir()) == ["a.c", "a.c.bak"]


class TestFailures:
    """Test I/O failures surface as FileError data."""

    def test_write_failure_keeps_original(self, write_file, temp_dir, monkeypatch):
        path = write_file("a.c", "int tmp = 0;")

        def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("fixforge.editing.applier.os.replace", failing_replace)
        result = PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=False)

        assert not result.success
        assert result.error.kind == "io"
        assert result.error.operation == "write"
        assert "No space left" in result.error.message
        assert read_file(path) == b"int tmp = 0;"
        assert [p.name for p in temp_dir.iterdir()] == ["a.c"]

    def test_backup_failure_skips_write(self, write_file, monkeypatch):
        path = write_file("a.c", "int tmp = 0;")
        real_replace = os.replace

        def replace_except_backup(src, dst):
            if str(dst).endswith(".bak"):
                raise OSError(13, "Permission denied")
            real_replace(src, dst)

        monkeypatch.setattr("fixforge.editing.applier.os.replace", replace_except_backup)
        result = PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=True)

        assert not result.success
        assert result.error.operation == "backup"
        assert result.error.file == path
        assert read_file(path) == b"int tmp = 0;"

    def test_write_failure_reports_backup(self, write_file, monkeypatch):
        path = write_file("a.c", "int tmp = 0;")
        real_replace = os.replace

        def replace_only_backup(src, dst):
            if not str(dst).endswith(".bak"):
                raise OSError(5, "Input/output error")
            real_replace(src, dst)

        monkeypatch.setattr("fixforge.editing.applier.os.replace", replace_only_backup)
        result = PatchApplier().apply(edit_set(path, (4, 3, b"count")), read_file(path), backup=True)

        assert not result.success
        assert result.backup_path == path + ".bak"
        assert read_file(path + ".bak") == b"int tmp = 0;"

    def test_read_missing_file(self, temp_dir):
        with pytest.raises(EditIOError) as exc_info:
            read_file(str(temp_dir / "missing.c"))
        assert exc_info.value.operation == "read"
        assert exc_info.value.kind == "io"


class TestApplyFile:
    """Test the re-read and snapshot comparison before applying."""

    def test_unchanged_file_is_applied(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        result = PatchApplier().apply_file(edit_set(path, (4, 3, b"count")), b"int tmp = 0;", backup=False)
        assert result.success
        assert read_file(path) == b"int count = 0;"

    def test_changed_file_is_rejected(self, write_file):
        path = write_file("a.c", "int tmp = 0;")
        planned = edit_set(path, (4, 3, b"count"))
        write_file("a.c", "int t = 0;")

        result = PatchApplier().apply_file(planned, b"int tmp = 0;", backup=True)

        assert not result.success
        assert result.error.kind == "range"
        assert result.error.operation == "apply"
        assert read_file(path) == b"int t = 0;"
        assert not os.path.exists(path + ".bak")


class TestDiff:
    """Test unified diff generation."""

    def test_truncates_large_diffs(self):
        original = b"".join(b"line %d\n" % i for i in range(300))
        modified = original.replace(b"line", b"row")
        diff = generate_unified_diff("big.txt", original, modified, max_diff_lines=50)
        assert "diff lines truncated" in diff
        assert diff.startswith("--- a/big.txt")

    def test_small_diff_untouched(self):
        diff = generate_unified_diff("a.txt", b"a\n", b"b\n")
        assert diff.splitlines() == ["--- a/a.txt", "+++ b/a.txt", "@@ -1 +1 @@", "-a", "+b"]
