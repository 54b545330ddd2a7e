"""
Common CLI helpers shared by the analyze and apply commands.
"""

import json
from pathlib import Path
from typing import Dict, List

import typer
from pydantic import ValidationError

from fixforge.exceptions import ConfigError
from fixforge.editing import BatchCoordinator
from fixforge.schemas import BatchReport, Edit, Issue, flatten_edits
from fixforge.user_config import UserConfig
from .output import get_console, print_error

console = get_console()


def build_coordinator(user_config: UserConfig) -> BatchCoordinator:
    """
    Create a BatchCoordinator from the ``apply.*`` user config section.

    Raises:
        typer.Exit: If the configuration is invalid
    """
    overrides = {
        "backup_enabled": user_config.get("apply.backup", True),
        "backup_suffix": user_config.get("apply.backup_suffix", ".bak"),
        "mode": user_config.get("apply.mode", "fail_fast"),
        "workers": user_config.get("apply.workers", 1),
    }
    try:
        return BatchCoordinator(config=overrides)
    except ConfigError as e:
        print_error("CONFIG_ERROR", str(e))
        raise typer.Exit(code=2)


def load_edits_file(path: Path) -> List[Edit]:
    """
    Load edits from a JSON file.

    Accepted shapes:
    - a list of edit objects
    - {"edits": [...]} and/or {"issues": [...]} (issue edits are flattened)

    Raises:
        typer.Exit: If the file is unreadable or not a valid edit document
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print_error("INVALID_EDITS", f"Cannot read edits from {path}: {e}", input_value=str(path))
        raise typer.Exit(code=2)

    try:
        if isinstance(document, list):
            return [Edit.model_validate(item) for item in document]
        if isinstance(document, dict):
            edits = [Edit.model_validate(item) for item in document.get("edits", [])]
            issues = [Issue.model_validate(item) for item in document.get("issues", [])]
            return edits + flatten_edits(issues)
    except ValidationError as e:
        print_error("INVALID_EDITS", f"Malformed edit document {path}: {e.error_count()} error(s)",
                    input_value=str(path), suggestions=[err["msg"] for err in e.errors()[:3]])
        raise typer.Exit(code=2)

    print_error("INVALID_EDITS", f"{path} must contain a list of edits or an object with 'edits'/'issues'",
                input_value=str(path))
    raise typer.Exit(code=2)


def render_report(report: BatchReport) -> None:
    """Human-mode summary of a batch run."""
    verb = "Would patch" if report.dry_run else "Patched"
    for file in report.succeeded_files:
        console.print(f"[green]{verb}[/green] {file}")
        if file in report.diffs and report.diffs[file]:
            console.print(report.diffs[file], markup=False, highlight=False)
    for failure in report.failures:
        console.print(f"[red]Failed[/red] {failure.file} [{failure.kind}] {failure.message}")
    for file in report.skipped_files:
        console.print(f"[yellow]Skipped[/yellow] {file}")
    for file, backup in report.backups.items():
        console.print(f"[dim]Backup: {backup}[/dim]")

    if report.success:
        console.print(f"✅ {verb} {len(report.succeeded_files)} file(s)")
    else:
        console.print(
            f"❌ {len(report.failures)} file(s) failed, {len(report.skipped_files)} skipped, "
            f"{len(report.succeeded_files)} patched"
        )


def report_payload(report: BatchReport) -> Dict:
    payload = report.to_dict()
    payload["status"] = "success" if report.success else "error"
    return payload
