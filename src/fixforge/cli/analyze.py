"""
CLI analyze command: find issues and optionally apply their fixes.
"""

from pathlib import Path
from typing import List, Optional

import typer

from fixforge.analysis import ANALYZERS, AnalyzeOptions, HeuristicSuggester
from fixforge.exceptions import ConfigError
from fixforge.logging_config import logger
from fixforge.scanner import collect_files
from fixforge.schemas import flatten_edits
from fixforge.user_config import get_user_config
from .common import build_coordinator, render_report, report_payload
from .config import CLIConfig
from .output import get_console, print_error, print_json

console = get_console()


def analyze_cmd(
    paths: List[Path] = typer.Argument(..., help="Source files or directories to analyze (recursive)"),
    long_fn: Optional[int] = typer.Option(None, "--long-fn", min=1, help="Long function threshold (lines)"),
    fix: bool = typer.Option(False, "--fix", help="Apply available fixes"),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not write .bak backups when applying fixes"),
    no_docs: bool = typer.Option(False, "--no-docs", help="Disable docstring stub suggestions"),
    no_names: bool = typer.Option(False, "--no-names", help="Disable variable naming suggestions"),
    rules: Optional[List[str]] = typer.Option(None, "--rule", help="Only apply fixes from this rule id (repeatable)"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Batch policy: fail_fast or best_effort"),
    dry_run: bool = typer.Option(False, "--dry-run", help="With --fix: show diffs without writing"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Analyze source files and report issues; with --fix, apply their edits.

    Examples:
        fixforge analyze src/
        fixforge analyze src/ --fix --rule WEAK_NAME
        fixforge analyze app.py --fix --dry-run --human
    """
    user_config = get_user_config()
    options = AnalyzeOptions(
        long_function_lines=long_fn or user_config.get("analyze.long_function_lines", 80),
        suggest_docs=not no_docs and user_config.get("analyze.suggest_docs", True),
        suggest_names=not no_names and user_config.get("analyze.suggest_names", True),
    )

    try:
        files = collect_files(
            paths,
            extensions=user_config.get("analyze.extensions"),
            respect_gitignore=user_config.get("analyze.respect_gitignore", True),
        )
    except ConfigError as e:
        print_error("CONFIG_ERROR", str(e))
        raise typer.Exit(code=2)

    suggester = HeuristicSuggester()
    issues = []
    for analyzer_cls in ANALYZERS.values():
        issues.extend(analyzer_cls().analyze_paths(files, options, suggester))

    report = None
    if fix:
        selected = [issue for issue in issues if not rules or issue.id in rules]
        edits = flatten_edits(selected)
        logger.info(f"Applying {len(edits)} edit(s) from {len(selected)} issue(s)")
        coordinator = build_coordinator(user_config)
        try:
            report = coordinator.run_batch(
                edits,
                backup=False if no_backup else None,
                mode=mode,
                dry_run=dry_run,
            )
        except ConfigError as e:
            print_error("CONFIG_ERROR", str(e), input_value=mode)
            raise typer.Exit(code=2)

    if CLIConfig.is_machine_mode() or json_output:
        print_json({
            "command": "analyze",
            "status": "success" if report is None or report.success else "error",
            "files_checked": len(files),
            "issues": [issue.to_dict() for issue in issues],
            "count": len(issues),
            "fix": report_payload(report) if report is not None else None,
        })
    else:
        if not issues:
            console.print(f"✅ No issues detected in {len(files)} file(s)")
        for issue in issues:
            console.print(
                f"[cyan]{issue.location}[/cyan] [bold]\\[{issue.id}][/bold] {issue.message}"
            )
            for edit in issue.edits[:1]:
                extra = f" (+{len(issue.edits) - 1} more)" if len(issue.edits) > 1 else ""
                console.print(f"  [dim]fix: {edit.note} (offset {edit.offset}, len {edit.length}){extra}[/dim]")
        if report is not None:
            console.print()
            render_report(report)

    if report is not None and not report.success:
        raise typer.Exit(code=1)
