"""Exceptions raised by the backup engine."""

from pathlib import Path
from typing import List, Optional


class BackupError(Exception):
    """Base class for every failure reported by dated-backup."""


class PathNotFoundError(BackupError):
    """A required path does not exist or cannot be stat'd."""

    def __init__(self, path, message: Optional[str] = None):
        self.path = path
        super().__init__(message or f"failed to read metadata from {str(path)!r}")


class BrokenSymlinkError(PathNotFoundError):
    """A symlink (or a link further down its chain) points nowhere."""

    def __init__(self, path, message: Optional[str] = None):
        super().__init__(path, message or f"{str(path)!r} is a broken symlink")


class SymlinkLoopError(PathNotFoundError):
    """A symlink chain is too long to resolve, most likely a cycle."""

    def __init__(self, path, depth: int):
        self.depth = depth
        super().__init__(path, f"{str(path)!r} has more than {depth} levels of symlinks")


class WrongTypeError(BackupError):
    """A path exists but is a file where a directory is required, or the reverse."""


class NamelessPathError(BackupError):
    """A source path has no final component to build a backup name from."""


class InvalidSubpathError(BackupError):
    """A subpath would escape its prefix."""


class AmbiguousCandidatesError(BackupError):
    """Several previous dated backups match the same base name."""

    def __init__(self, candidates: List[Path]):
        self.candidates = list(candidates)
        listing = ", ".join(repr(str(candidate)) for candidate in self.candidates)
        super().__init__(f"there are several candidates: [{listing}]")


class SymlinkTargetMismatchError(BackupError):
    """A destination symlink's final target has the wrong kind to proceed."""


class DestinationUnreadableError(BackupError):
    """The destination directory cannot be listed."""


class DestinationExistsError(BackupError):
    """A destination that must be created already exists."""


class FilesystemOperationError(BackupError):
    """A rename, removal or copy failed while executing a plan."""


class ExternalToolError(BackupError):
    """The external mirroring tool could not be spawned or exited non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class ClockUnavailableError(BackupError):
    """The local time offset cannot be determined."""
