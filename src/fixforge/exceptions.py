# Custom exceptions for fixforge
#
# Edit errors are raised inside one file's processing and converted to
# FileError data at the file boundary (see editing.coordinator).

from typing import List, Optional, Tuple

from fixforge.schemas import Edit, FileError


class FixForgeError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ConfigError(FixForgeError):
    """Raised for configuration-related problems."""
    pass


class EditError(FixForgeError):
    """Base class for errors scoped to a single target file."""

    kind = "validation"

    def __init__(self, file: str, message: str, operation: Optional[str] = None):
        self.file = file
        self.message = message
        self.operation = operation
        super().__init__(f"{file}: {message}")

    def to_file_error(self) -> FileError:
        return FileError(
            file=self.file,
            kind=self.kind,
            message=self.message,
            operation=self.operation,
        )


class EditValidationError(EditError):
    """Raised when a file's edits are malformed or overlap each other."""

    def __init__(
        self,
        file: str,
        message: str,
        conflicts: Optional[List[Tuple[Edit, Edit]]] = None,
        operation: str = "plan",
    ):
        self.conflicts = conflicts or []
        super().__init__(file, message, operation=operation)

    def to_file_error(self) -> FileError:
        error = super().to_file_error()
        return error.model_copy(update={"conflicts": list(self.conflicts)})


class EditRangeError(EditValidationError):
    """
    Raised when an edit reaches past the end of the file content.
    Usually means the file changed after the offsets were computed.
    """

    kind = "range"

    def __init__(
        self,
        file: str,
        edit: Optional[Edit],
        content_length: int,
        message: Optional[str] = None,
        operation: str = "plan",
    ):
        self.edit = edit
        self.content_length = content_length
        if message is None:
            message = (
                f"Edit at offset {edit.offset} (length {edit.length}) exceeds "
                f"content length {content_length}"
            )
        super().__init__(file, message, operation=operation)


class StaleContentError(EditRangeError):
    """Raised when a file no longer matches the snapshot its plan was built from."""

    def __init__(self, file: str, expected_length: int, actual_length: int):
        self.expected_length = expected_length
        super().__init__(
            file,
            None,
            actual_length,
            message=(
                f"Content changed since offsets were computed "
                f"(expected {expected_length} bytes, found {actual_length})"
            ),
            operation="apply",
        )


class EditIOError(EditError):
    """Raised when reading, backing up, or writing a target file fails."""

    kind = "io"

    def __init__(self, file: str, operation: str, message: str):
        super().__init__(file, f"Failed to {operation} {file}: {message}", operation=operation)
