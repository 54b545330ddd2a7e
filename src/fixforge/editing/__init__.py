"""
Editing package: applies byte-offset edits to files safely.

EditPlanner groups and validates edits per file, PatchApplier writes one
file (backup + atomic replace), BatchCoordinator runs a whole batch.
"""

from .planner import EditPlanner, plan, group_by_file, find_conflicts, order_edits
from .applier import PatchApplier, apply, splice, read_file, generate_unified_diff
from .coordinator import BatchCoordinator, run_batch
from .config import (
    EDITING_CONFIG,
    BATCH_MODES,
    FAIL_FAST,
    BEST_EFFORT,
    get_editing_config,
)

__all__ = [
    # Components
    "EditPlanner",
    "PatchApplier",
    "BatchCoordinator",

    # Functional surface
    "plan",
    "apply",
    "run_batch",
    "splice",
    "read_file",
    "group_by_file",
    "find_conflicts",
    "order_edits",
    "generate_unified_diff",

    # Configuration
    "EDITING_CONFIG",
    "BATCH_MODES",
    "FAIL_FAST",
    "BEST_EFFORT",
    "get_editing_config",
]
