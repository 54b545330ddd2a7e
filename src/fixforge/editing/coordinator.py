"""
BatchCoordinator: drives planning and application across every file in a batch.

Policies:
- fail_fast (default): any plan rejection aborts the batch before a single
  file is written; the first apply failure stops the remaining files.
- best_effort: every file is attempted and every failure reported. Files
  can be processed on a thread pool since they share no mutable state.

Neither policy rolls back files that were already written. A batch is
atomic per file, not across files; backups are the recovery path.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from fixforge.exceptions import EditIOError
from fixforge.logging_config import logger
from fixforge.schemas import ApplyResult, BatchReport, Edit, FileError
from fixforge.tracing import trace
from .applier import PatchApplier, read_file
from .config import BEST_EFFORT, FAIL_FAST, get_editing_config, validate_editing_config
from .planner import EditPlanner, group_by_file


class BatchCoordinator:
    """
    Run one batch of edits: read, plan, apply, report.

    Per-file problems always come back as FileError entries in the
    BatchReport; only a bad mode/config raises (ConfigError).
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        planner: Optional[EditPlanner] = None,
        applier: Optional[PatchApplier] = None,
    ):
        self.config = get_editing_config(config)
        self.planner = planner or EditPlanner()
        self.applier = applier or PatchApplier(self.config)

    @trace
    def run_batch(
        self,
        edits: Iterable[Edit],
        backup: Optional[bool] = None,
        mode: Optional[str] = None,
        dry_run: bool = False,
        workers: Optional[int] = None,
    ) -> BatchReport:
        """
        Apply a flat collection of edits across all touched files.

        In fail_fast mode a read or plan failure in any file stops the batch
        before anything is written, so files with valid plans are skipped
        too rather than patched up to the failing file. Use best_effort to
        patch every file that planned cleanly.

        Args:
            edits: Selected edits, in any order, for any number of files
            backup: Write <file><suffix> before patching (defaults to config)
            mode: "fail_fast" or "best_effort" (defaults to config)
            dry_run: Plan and compute diffs, write nothing
            workers: Thread count for best_effort (defaults to config)

        Returns:
            BatchReport with succeeded files, failures, backups and skipped files

        Raises:
            ConfigError: Unknown mode or invalid worker count
        """
        settings = {
            **self.config,
            "mode": mode or self.config["mode"],
            "workers": workers if workers is not None else self.config["workers"],
        }
        validate_editing_config(settings)
        if backup is None:
            backup = settings["backup_enabled"]

        edits = list(edits)
        files = list(group_by_file(edits))
        logger.info(
            f"Starting {settings['mode']} batch: {len(edits)} edit(s) across {len(files)} file(s)"
            + (" [dry run]" if dry_run else "")
        )

        report = BatchReport(success=True, dry_run=dry_run)
        if not edits:
            return report

        # Snapshot every file once; offsets are only valid against these bytes
        snapshots: Dict[str, bytes] = {}
        read_errors: Dict[str, FileError] = {}
        for file in files:
            try:
                snapshots[file] = read_file(file)
            except EditIOError as e:
                logger.error(e.message)
                read_errors[file] = e.to_file_error()

        planned = self.planner.plan(
            [edit for edit in edits if edit.file in snapshots],
            {file: len(content) for file, content in snapshots.items()},
        )
        plan_errors = {**read_errors, **planned.errors}

        if settings["mode"] == FAIL_FAST and plan_errors:
            report.success = False
            report.failures = [plan_errors[file] for file in files if file in plan_errors]
            report.skipped_files = [file for file in files if file not in plan_errors]
            logger.error(
                f"Batch aborted before writing: {len(plan_errors)} file(s) failed validation"
            )
            return report

        def process(file: str) -> ApplyResult:
            return self.applier.apply_file(planned.plans[file], snapshots[file], backup=backup, dry_run=dry_run)

        to_apply = [file for file in files if file in planned.plans]
        results: Dict[str, ApplyResult] = {}

        if settings["mode"] == BEST_EFFORT and settings["workers"] > 1 and len(to_apply) > 1:
            with ThreadPoolExecutor(max_workers=min(settings["workers"], len(to_apply))) as executor:
                for file, result in zip(to_apply, executor.map(process, to_apply)):
                    results[file] = result
        else:
            for file in to_apply:
                result = process(file)
                results[file] = result
                if not result.success and settings["mode"] == FAIL_FAST:
                    break

        for file in files:
            if file in plan_errors:
                report.failures.append(plan_errors[file])
            elif file not in results:
                report.skipped_files.append(file)
            else:
                result = results[file]
                if result.backup_path:
                    report.backups[file] = result.backup_path
                if result.success:
                    report.succeeded_files.append(file)
                    if result.diff is not None:
                        report.diffs[file] = result.diff
                else:
                    report.failures.append(result.error)

        report.success = not report.failures and not report.skipped_files

        if report.success:
            logger.info(f"Batch completed: {len(report.succeeded_files)} file(s) patched")
        else:
            logger.error(
                f"Batch finished with {len(report.failures)} failure(s); "
                f"{len(report.succeeded_files)} patched, {len(report.skipped_files)} skipped"
            )
        return report


def run_batch(
    edits: Iterable[Edit],
    backup: bool = True,
    mode: str = FAIL_FAST,
    dry_run: bool = False,
) -> BatchReport:
    """Run a batch with a default BatchCoordinator."""
    return BatchCoordinator().run_batch(edits, backup=backup, mode=mode, dry_run=dry_run)
