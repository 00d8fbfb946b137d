"""Data models for planning and executing backups."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class PathKind(Enum):
    """On-disk nature of a path."""
    DIRECTORY = "directory"
    FILE = "file"
    SYMLINK = "symlink"


class Operation(Enum):
    """What has to happen to reconcile one destination with its source."""
    SYNCHRONIZE_DIRECTORY = "synchronize_directory"
    REMOVE_DESTINATION_FILE_THEN_SYNCHRONIZE_DIRECTORY = "remove_destination_file_then_synchronize_directory"
    COPY_FILE = "copy_file"
    REMOVE_DESTINATION_DIRECTORY_THEN_COPY_FILE = "remove_destination_directory_then_copy_file"

    @property
    def removes_destination(self) -> bool:
        return self in (Operation.REMOVE_DESTINATION_FILE_THEN_SYNCHRONIZE_DIRECTORY,
                        Operation.REMOVE_DESTINATION_DIRECTORY_THEN_COPY_FILE)


@dataclass(frozen=True)
class SyncAction:
    """One planned reconciliation step."""
    source_path: str
    destination_path: Path
    operation: Operation


@dataclass(frozen=True)
class DestinationCandidate:
    """A previous dated backup found in the destination directory."""
    path: Path
    base_name: str
    is_directory: bool = True


@dataclass
class ActionResult:
    """Outcome of an executed SyncAction."""
    action: SyncAction
    elapsed_seconds: float
    removed_destination: bool = False


@dataclass
class BackupResult:
    """Outcome of the single-directory backup flow."""
    source_path: str
    destination_path: Path
    renamed_from: Optional[Path] = None
    elapsed_seconds: Optional[float] = None
    dry_run: bool = False


@dataclass(frozen=True)
class SnapshotAction:
    """A planned copy of a path to its dated sibling."""
    source_path: Path
    destination_path: Path
    source_kind: PathKind


@dataclass
class SnapshotResult:
    """Outcome of one sibling snapshot copy."""
    action: SnapshotAction
    elapsed_seconds: Optional[float] = None
