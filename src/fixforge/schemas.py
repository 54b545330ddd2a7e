from enum import Enum
from typing import Dict, Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class Severity(str, Enum):
    """
    Ordered issue severity: INFO < WARNING < ERROR.
    Informational only; it never decides whether an edit gets applied.
    """
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def _missing_(cls, value):
        # Accept "Warning", "ERROR", etc. from hand-written JSON
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [Severity.INFO, Severity.WARNING, Severity.ERROR]


class Edit(BaseModel):
    """
    One byte-range substitution in exactly one file.

    Offsets are computed against a specific snapshot of the file's bytes.
    `length == 0` is a pure insertion, an empty `replacement` a pure deletion.
    `file` is an opaque key and is never resolved or canonicalized.
    """
    model_config = ConfigDict(frozen=True)

    file: str
    offset: int
    length: int
    replacement: bytes = b""
    note: str = ""

    @property
    def end(self) -> int:
        """Exclusive end of the replaced span."""
        return self.offset + self.length

    def is_well_formed(self, content_length: int) -> bool:
        return is_well_formed(self, content_length)

    def overlaps(self, other: "Edit") -> bool:
        return overlaps(self, other)

    @field_serializer("replacement", when_used="json")
    def _serialize_replacement(self, value: bytes) -> str:
        return value.decode("utf-8", errors="replace")

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json")


def is_well_formed(edit: Edit, content_length: int) -> bool:
    """True iff the edit's span lies entirely within content of the given length."""
    return (
        edit.offset >= 0
        and edit.length >= 0
        and edit.offset + edit.length <= content_length
    )


def overlaps(a: Edit, b: Edit) -> bool:
    """
    True iff the half-open spans [offset, offset+length) of two edits on the
    same file intersect.

    Zero-length edits (insertions) are points:
    - two insertions at the same offset conflict (insertion order is ambiguous);
    - an insertion strictly inside another edit's span conflicts with it;
    - an insertion exactly at the start or end of a span does not.
    """
    if a.file != b.file:
        return False
    if a.length == 0 and b.length == 0:
        return a.offset == b.offset
    if a.length == 0:
        return b.offset < a.offset < b.end
    if b.length == 0:
        return a.offset < b.offset < a.end
    return a.offset < b.end and b.offset < a.end


class Location(BaseModel):
    """
    Human-facing position of an issue. Line/column are advisory and are
    never used for patching; only byte offsets are authoritative.
    """
    model_config = ConfigDict(frozen=True)

    file: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class Issue(BaseModel):
    """
    One analyzer finding with zero or more candidate edits.
    An issue with no edits is detected but not auto-fixable.
    """
    model_config = ConfigDict(frozen=True)

    id: str  # rule tag, e.g. "LONG_FUNC"
    severity: Severity = Severity.WARNING
    message: str
    location: Location
    edits: Tuple[Edit, ...] = ()

    @property
    def fixable(self) -> bool:
        return bool(self.edits)

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json")


def flatten_edits(issues: Iterable[Issue]) -> List[Edit]:
    """Collect the edits of the given issues, in issue order, dropping the issue link."""
    edits: List[Edit] = []
    for issue in issues:
        edits.extend(issue.edits)
    return edits


class FileEditSet(BaseModel):
    """
    All edits for one file, validated and sorted into apply order
    (descending offset). Only lives for the duration of one batch.
    """
    model_config = ConfigDict(frozen=True)

    file: str
    edits: Tuple[Edit, ...]


ErrorKind = Literal["validation", "range", "io"]


class FileError(BaseModel):
    """
    A file-scoped failure, returned as data rather than raised.

    kind:
    - "validation": malformed or overlapping edits
    - "range": an edit reaches past the end of the content (usually stale offsets)
    - "io": read/backup/write failure; `operation` names which one
    """
    file: str
    kind: ErrorKind
    message: str
    operation: Optional[str] = None
    conflicts: List[Tuple[Edit, Edit]] = Field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json")


class PlanResult(BaseModel):
    """
    Outcome of planning a batch: one FileEditSet per valid file and one
    FileError per rejected file. Files never appear in both maps.
    """
    plans: Dict[str, FileEditSet] = Field(default_factory=dict)
    errors: Dict[str, FileError] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class ApplyResult(BaseModel):
    """
    Result of applying one FileEditSet.
    `content` is the new file content on success (also set in dry-run mode).
    """
    file: str
    success: bool
    content: Optional[bytes] = None
    backup_path: Optional[str] = None
    error: Optional[FileError] = None
    diff: Optional[str] = None  # Unified diff, dry-run only


class BatchReport(BaseModel):
    """
    Result of a batch run across files.

    Files written before a failure are not rolled back; their backups (if
    requested) are listed in `backups` for manual recovery.
    """
    success: bool
    succeeded_files: List[str] = Field(default_factory=list)
    failures: List[FileError] = Field(default_factory=list)
    backups: Dict[str, str] = Field(default_factory=dict)
    skipped_files: List[str] = Field(default_factory=list)
    dry_run: bool = False
    diffs: Dict[str, str] = Field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json")
