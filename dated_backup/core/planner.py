"""Planning of partial synchronizations.

Every subpath is classified against the current state of its destination
before anything is touched, so a batch either plans completely or fails
without side effects.
"""

import os
import logging
from pathlib import Path
from typing import Iterable, List

from .classifier import classify, peek
from .errors import (
    BrokenSymlinkError,
    InvalidSubpathError,
    PathNotFoundError,
    SymlinkTargetMismatchError,
    WrongTypeError,
)
from .models import Operation, PathKind, SyncAction

logger = logging.getLogger(__name__)


def check_is_relative(subpath: str) -> None:
    """Reject absolute subpaths.

    Raises:
        InvalidSubpathError: If ``subpath`` is absolute.
    """
    if os.path.isabs(subpath):
        raise InvalidSubpathError(f"{subpath!r} is absolute")


def check_is_directory(path) -> None:
    """Require ``path`` to be a directory once symlinks are followed."""
    if classify(path) is not PathKind.DIRECTORY:
        raise WrongTypeError(f"{str(path)!r} is not a directory")


def _final_target_kind(destination_path: Path) -> PathKind:
    try:
        return classify(destination_path)
    except PathNotFoundError as e:
        raise BrokenSymlinkError(destination_path) from e


def decide_operation(source_is_directory: bool, destination_path: Path) -> Operation:
    """Choose the operation reconciling ``destination_path`` with its source.

    Args:
        source_is_directory: Whether the source resolves to a directory.
        destination_path: Destination entry, which may not exist yet.

    Returns:
        The operation to execute.

    Raises:
        BrokenSymlinkError: If the destination is a dangling symlink.
        SymlinkTargetMismatchError: If the destination is a symlink whose
            final target has the opposite kind of the source.
    """
    destination_kind = peek(destination_path)

    if source_is_directory:
        if destination_kind is PathKind.FILE:
            return Operation.REMOVE_DESTINATION_FILE_THEN_SYNCHRONIZE_DIRECTORY
        if destination_kind is PathKind.SYMLINK:
            if _final_target_kind(destination_path) is PathKind.FILE:
                raise SymlinkTargetMismatchError(
                    f"{str(destination_path)!r} is a symlink whose final target is a file")
        return Operation.SYNCHRONIZE_DIRECTORY

    if destination_kind is PathKind.DIRECTORY:
        return Operation.REMOVE_DESTINATION_DIRECTORY_THEN_COPY_FILE
    if destination_kind is PathKind.SYMLINK:
        if _final_target_kind(destination_path) is PathKind.DIRECTORY:
            raise SymlinkTargetMismatchError(
                f"{str(destination_path)!r} is a symlink whose final target is a directory")
    return Operation.COPY_FILE


def plan_partial_sync(source_prefix: str, destination_prefix, subpaths: Iterable[str]) -> List[SyncAction]:
    """Validate a partial synchronization and return its actions in order.

    Args:
        source_prefix: Directory the subpaths are taken from.
        destination_prefix: Directory the subpaths are mirrored into.
        subpaths: Relative paths under both prefixes.

    Returns:
        One SyncAction per subpath, in the given order.

    Raises:
        InvalidSubpathError: If any subpath is absolute.
        PathNotFoundError: If a prefix or a source path cannot be resolved.
        WrongTypeError: If a prefix is not a directory.
        SymlinkTargetMismatchError: See decide_operation.
    """
    subpaths = list(subpaths)
    for subpath in subpaths:
        check_is_relative(subpath)
    for prefix in (source_prefix, destination_prefix):
        check_is_directory(prefix)

    actions = []
    for subpath in subpaths:
        source_path = os.path.join(os.fspath(source_prefix), subpath)
        destination_path = Path(destination_prefix) / subpath
        source_is_directory = classify(source_path) is PathKind.DIRECTORY
        operation = decide_operation(source_is_directory, destination_path)
        logger.debug(f"Planned {operation.value} for {source_path!r} -> {str(destination_path)!r}")
        actions.append(SyncAction(source_path=source_path,
                                  destination_path=destination_path,
                                  operation=operation))
    return actions
