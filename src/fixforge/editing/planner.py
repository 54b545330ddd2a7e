"""
EditPlanner: turns a flat, unordered edit collection into one validated,
ordered FileEditSet per file.

Apply order is descending offset. Mutating a file only shifts bytes after
the mutated span, so working from the highest offset down never moves the
offsets of edits still waiting to be applied.
"""

from itertools import combinations
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from fixforge.exceptions import EditRangeError, EditValidationError
from fixforge.logging_config import logger
from fixforge.schemas import Edit, FileEditSet, PlanResult, is_well_formed, overlaps


def group_by_file(edits: Iterable[Edit]) -> Dict[str, List[Edit]]:
    """Group edits by target file. Files and edits keep their arrival order."""
    groups: Dict[str, List[Edit]] = {}
    for edit in edits:
        groups.setdefault(edit.file, []).append(edit)
    return groups


def find_conflicts(edits: List[Edit]) -> List[Tuple[Edit, Edit]]:
    """Every overlapping pair in one file's edits, in arrival order."""
    return [(a, b) for a, b in combinations(edits, 2) if overlaps(a, b)]


def order_edits(edits: List[Edit]) -> List[Edit]:
    """
    Sort into apply order: descending offset, then descending length,
    then arrival order.
    """
    indexed = sorted(
        enumerate(edits),
        key=lambda pair: (-pair[1].offset, -pair[1].length, pair[0]),
    )
    return [edit for _, edit in indexed]


class EditPlanner:
    """
    Groups, validates and orders edits per file.

    A file with any malformed, out-of-range or overlapping edit is rejected
    as a whole; the planner never picks a winner between competing edits.
    Files are planned independently of each other.
    """

    def plan(self, edits: Iterable[Edit], content_lengths: Mapping[str, int]) -> PlanResult:
        """
        Plan a batch of edits.

        Args:
            edits: Flat edit collection, possibly spanning many files
            content_lengths: Current byte length of each target file, as read
                by the caller. Offsets are only meaningful against that read.

        Returns:
            PlanResult with a FileEditSet per valid file and a FileError per
            rejected file
        """
        result = PlanResult()

        for file, group in group_by_file(edits).items():
            try:
                result.plans[file] = self.plan_file(file, group, content_lengths.get(file))
            except EditValidationError as e:
                logger.warning(f"Rejected {len(group)} edit(s) for {file}: {e.message}")
                result.errors[file] = e.to_file_error()

        logger.debug(f"Planned {len(result.plans)} file(s), rejected {len(result.errors)}")
        return result

    def plan_file(self, file: str, edits: List[Edit], content_length: Optional[int]) -> FileEditSet:
        """
        Validate and order one file's edits.

        Raises:
            EditValidationError: Missing length, negative offset/length, or overlap
            EditRangeError: An edit reaches past content_length
        """
        if content_length is None:
            raise EditValidationError(file, "No content length known; the file must be read before planning")

        for edit in edits:
            if edit.offset < 0 or edit.length < 0:
                raise EditValidationError(
                    file,
                    f"Malformed edit: offset {edit.offset}, length {edit.length} (both must be >= 0)",
                )
            if not is_well_formed(edit, content_length):
                raise EditRangeError(file, edit, content_length)

        conflicts = find_conflicts(edits)
        if conflicts:
            spans = ", ".join(
                f"[{a.offset},{a.end}) vs [{b.offset},{b.end})" for a, b in conflicts
            )
            raise EditValidationError(
                file,
                f"{len(conflicts)} overlapping edit pair(s): {spans}",
                conflicts=conflicts,
            )

        return FileEditSet(file=file, edits=tuple(order_edits(edits)))


def plan(edits: Iterable[Edit], content_lengths: Mapping[str, int]) -> PlanResult:
    """Plan a batch with a default EditPlanner."""
    return EditPlanner().plan(edits, content_lengths)
