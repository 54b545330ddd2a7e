"""
fixforge - source analysis with safe, byte-offset fix application.

Analyzers emit Issues carrying candidate Edits; the editing package plans
and applies accepted edits with backups and atomic writes.
"""

__version__ = "0.3.0"

from fixforge.schemas import (
    Edit,
    Issue,
    Location,
    Severity,
    FileEditSet,
    FileError,
    PlanResult,
    ApplyResult,
    BatchReport,
    is_well_formed,
    overlaps,
    flatten_edits,
)
from fixforge.editing import plan, apply, run_batch, EditPlanner, PatchApplier, BatchCoordinator

__all__ = [
    "__version__",
    "Edit",
    "Issue",
    "Location",
    "Severity",
    "FileEditSet",
    "FileError",
    "PlanResult",
    "ApplyResult",
    "BatchReport",
    "is_well_formed",
    "overlaps",
    "flatten_edits",
    "plan",
    "apply",
    "run_batch",
    "EditPlanner",
    "PatchApplier",
    "BatchCoordinator",
]
