"""Path classification that never follows through a broken link."""

import os
import stat
import logging
from pathlib import Path
from typing import Optional

from .errors import PathNotFoundError, BrokenSymlinkError, SymlinkLoopError
from .models import PathKind

# Same bound the Linux kernel applies (MAXSYMLINKS).
MAX_SYMLINK_DEPTH = 40

logger = logging.getLogger(__name__)


def peek(path) -> Optional[PathKind]:
    """Report what sits at exactly ``path`` without following a final symlink.

    Args:
        path: Path to inspect.

    Returns:
        The kind of entry, or None if nothing exists there. A dangling
        symlink is reported as PathKind.SYMLINK, never as None.
    """
    try:
        mode = os.lstat(path).st_mode
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as e:
        raise PathNotFoundError(path) from e

    if stat.S_ISLNK(mode):
        return PathKind.SYMLINK
    if stat.S_ISDIR(mode):
        return PathKind.DIRECTORY
    return PathKind.FILE


def resolve_final_target(path, max_depth: int = MAX_SYMLINK_DEPTH) -> Path:
    """Follow a symlink chain one level at a time until a real entry.

    Args:
        path: Path to resolve.
        max_depth: Maximum number of links to follow.

    Returns:
        Path of the first entry in the chain that is not a symlink.

    Raises:
        PathNotFoundError: If ``path`` itself does not exist.
        BrokenSymlinkError: If a link in the chain points nowhere.
        SymlinkLoopError: If the chain is longer than ``max_depth``.
    """
    current = Path(path)
    for depth in range(max_depth + 1):
        try:
            mode = os.lstat(current).st_mode
        except OSError as e:
            if depth == 0:
                raise PathNotFoundError(path) from e
            raise BrokenSymlinkError(path) from e

        if not stat.S_ISLNK(mode):
            return current

        try:
            target = os.readlink(current)
        except OSError as e:
            raise PathNotFoundError(path) from e
        # Relative targets are relative to the directory holding the link.
        current = current.parent / target
        logger.debug(f"{str(path)!r}: link level {depth + 1} points to {str(current)!r}")

    raise SymlinkLoopError(path, max_depth)


def classify(path) -> PathKind:
    """Classify ``path`` as a directory or a file, following symlinks.

    Anything that is not a directory once links are followed (regular
    file, fifo, device...) is reported as a file.

    Raises:
        PathNotFoundError: If the path, or the end of its link chain, is missing.
    """
    final = resolve_final_target(path)
    try:
        mode = os.stat(final).st_mode
    except OSError as e:
        raise PathNotFoundError(path) from e
    return PathKind.DIRECTORY if stat.S_ISDIR(mode) else PathKind.FILE
