"""
CLI apply command: apply a saved edit/issue document to the files it targets.
"""

from pathlib import Path
from typing import Optional

import typer

from fixforge.exceptions import ConfigError
from fixforge.user_config import get_user_config
from .common import build_coordinator, load_edits_file, render_report, report_payload
from .config import CLIConfig
from .output import print_error, print_json


def apply_cmd(
    edits_file: Path = typer.Argument(..., help="JSON file with edits or issues", exists=True, dir_okay=False),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not write .bak backups"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Batch policy: fail_fast or best_effort"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Threads for best_effort batches"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show diffs without writing"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Apply byte-offset edits from a JSON document.

    Offsets must have been computed against the files' current content.

    Examples:
        fixforge apply fixes.json
        fixforge apply fixes.json --mode best_effort --workers 4
        fixforge apply fixes.json --dry-run --human
    """
    edits = load_edits_file(edits_file)
    coordinator = build_coordinator(get_user_config())

    try:
        report = coordinator.run_batch(
            edits,
            backup=False if no_backup else None,
            mode=mode,
            dry_run=dry_run,
            workers=workers,
        )
    except ConfigError as e:
        print_error("CONFIG_ERROR", str(e), input_value=mode)
        raise typer.Exit(code=2)

    if CLIConfig.is_machine_mode() or json_output:
        payload = report_payload(report)
        payload["command"] = "apply"
        print_json(payload)
    else:
        render_report(report)

    if not report.success:
        raise typer.Exit(code=1)
