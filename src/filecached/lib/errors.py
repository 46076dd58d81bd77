"""Error types for filecached.

Recoverable errors are frozen dataclasses returned inside Err, never raised.
Unrecoverable conditions (no data directory, broken cache invariant) are
exceptions.
"""

from dataclasses import dataclass
from pathlib import Path

# =============================================================================
# Read Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class FileReadError:
    """Backing file exists (or may exist) but could not be read or stat'ed."""

    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class FileDecodeError:
    """Backing file content is not a valid value."""

    path: Path
    reason: str


# =============================================================================
# Write Errors
# =============================================================================


@dataclass(frozen=True, slots=True)
class FileEncodeError:
    """Value could not be serialized."""

    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class FileWriteError:
    """Backing file or its parent directory could not be written."""

    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class FileConflictError:
    """Exclusive write found a file already at the target path."""

    path: Path


# =============================================================================
# Unrecoverable
# =============================================================================


class DataDirError(RuntimeError):
    """No per-user data directory could be determined."""


class CacheInvariantError(RuntimeError):
    """A backing file that was not stale could not be found when read."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Backing file {path} was not stale but is missing")
        self.path = path


# =============================================================================
# Type Aliases for Error Unions
# =============================================================================

type ReadError = FileReadError | FileDecodeError
type WriteError = FileEncodeError | FileWriteError | FileConflictError
type CacheError = (
    FileReadError | FileDecodeError | FileEncodeError | FileWriteError | FileConflictError
)
