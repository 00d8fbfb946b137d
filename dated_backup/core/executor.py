"""Execution of planned synchronization actions."""

import os
import shutil
import logging
import subprocess
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .errors import ExternalToolError, FilesystemOperationError
from .models import ActionResult, Operation, SyncAction
from ..config.config_manager import DEFAULT_CONFIG
from ..utils.formatters import format_duration

DEFAULT_RSYNC_BINARY = DEFAULT_CONFIG["rsync"]["binary"]
DEFAULT_PARTIAL_OPTIONS = DEFAULT_CONFIG["rsync"]["partial_options"]
DEFAULT_BACKUP_OPTIONS = DEFAULT_CONFIG["rsync"]["backup_options"]


class ActionExecutor:
    """Runs SyncActions one at a time, in order."""

    def __init__(self, rsync_binary: str = DEFAULT_RSYNC_BINARY,
                 rsync_options: Optional[Sequence[str]] = None):
        """Initialize executor.

        Args:
            rsync_binary: Name or path of the rsync executable.
            rsync_options: Options passed to rsync before ``--``.
        """
        self.rsync_binary = rsync_binary
        self.rsync_options = list(rsync_options if rsync_options is not None else DEFAULT_PARTIAL_OPTIONS)
        self.logger = logging.getLogger(__name__)

    def build_rsync_command(self, source_path: str, destination_path,
                            options: Optional[Sequence[str]] = None) -> List[str]:
        """Build the rsync command line mirroring a directory's contents."""
        if not source_path.endswith(os.sep):
            source_path += os.sep
        options = self.rsync_options if options is None else list(options)
        return [self.rsync_binary, *options, "--", source_path, os.fspath(destination_path)]

    def synchronize_directory(self, source_path: str, destination_path,
                              options: Optional[Sequence[str]] = None) -> float:
        """Mirror ``source_path`` into ``destination_path`` with rsync.

        Returns:
            Elapsed wall-clock seconds.

        Raises:
            ExternalToolError: If rsync cannot be spawned or exits non-zero.
        """
        cmd = self.build_rsync_command(os.fspath(source_path), destination_path, options)
        self.logger.debug(f"Executing: {' '.join(cmd)}")
        start = time.monotonic()
        try:
            # No timeout and no output capture: rsync reports straight to the operator.
            result = subprocess.run(cmd)
        except OSError as e:
            raise ExternalToolError(
                f"failed to synchronize {cmd[-2]!r} with {cmd[-1]!r}: failed to execute process: {e}"
            ) from e
        elapsed = time.monotonic() - start

        if result.returncode != 0:
            raise ExternalToolError(
                f"failed to synchronize {cmd[-2]!r} with {cmd[-1]!r}: error status: {result.returncode}",
                returncode=result.returncode,
            )
        self.logger.info(f"Synchronized {cmd[-2]!r} with {cmd[-1]!r} in {format_duration(elapsed)}")
        return elapsed

    def copy_file(self, source_path, destination_path) -> float:
        """Copy one file, following symlinks on both sides.

        Returns:
            Elapsed wall-clock seconds.
        """
        start = time.monotonic()
        try:
            shutil.copy(source_path, destination_path)
        except OSError as e:
            raise FilesystemOperationError(
                f"failed to copy the file {str(source_path)!r} to {str(destination_path)!r}") from e
        elapsed = time.monotonic() - start
        self.logger.info(f"Copied the file {str(source_path)!r} to {str(destination_path)!r} "
                         f"in {format_duration(elapsed)}")
        return elapsed

    def remove_file(self, path) -> None:
        """Remove one file or symlink.

        Raises:
            FilesystemOperationError: If the removal fails.
        """
        try:
            os.remove(path)
        except OSError as e:
            raise FilesystemOperationError(f"failed to remove the file {str(path)!r}") from e
        self.logger.info(f"Removed the file {str(path)!r}")

    def remove_directory(self, path) -> None:
        """Remove a directory tree.

        Raises:
            FilesystemOperationError: If the removal fails.
        """
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FilesystemOperationError(f"failed to remove the directory {str(path)!r}") from e
        self.logger.info(f"Removed the directory {str(path)!r}")

    def execute(self, action: SyncAction) -> ActionResult:
        """Execute a single planned action.

        Args:
            action: Action produced by the planner.

        Returns:
            ActionResult with the elapsed time of the copy or sync.
        """
        operation = action.operation
        source, destination = action.source_path, action.destination_path

        if operation is Operation.SYNCHRONIZE_DIRECTORY:
            elapsed = self.synchronize_directory(source, destination)
        elif operation is Operation.REMOVE_DESTINATION_FILE_THEN_SYNCHRONIZE_DIRECTORY:
            self.remove_file(destination)
            elapsed = self.synchronize_directory(source, destination)
        elif operation is Operation.COPY_FILE:
            elapsed = self.copy_file(source, destination)
        elif operation is Operation.REMOVE_DESTINATION_DIRECTORY_THEN_COPY_FILE:
            self.remove_directory(destination)
            elapsed = self.copy_file(source, destination)
        else:
            raise ValueError(f"Unknown operation: {operation!r}")

        return ActionResult(action=action, elapsed_seconds=elapsed,
                            removed_destination=operation.removes_destination)

    def execute_all(self, actions: Iterable[SyncAction],
                    on_start: Optional[Callable[[SyncAction], None]] = None,
                    on_result: Optional[Callable[[ActionResult], None]] = None) -> List[ActionResult]:
        """Execute a planned batch in order, stopping at the first failure.

        Actions already executed are not rolled back.

        Args:
            actions: Actions produced by the planner.
            on_start: Called with each action just before it runs.
            on_result: Called with each result as soon as its action succeeds.

        Returns:
            One ActionResult per executed action.
        """
        results = []
        for action in actions:
            if on_start is not None:
                on_start(action)
            result = self.execute(action)
            if on_result is not None:
                on_result(result)
            results.append(result)
        return results

    def rename(self, source_path: Path, destination_path: Path) -> None:
        """Rename a previous dated backup to its new dated name.

        Args:
            source_path: Existing backup directory.
            destination_path: New name, in the same directory.

        Raises:
            FilesystemOperationError: If the rename fails.
        """
        try:
            os.rename(source_path, destination_path)
        except OSError as e:
            raise FilesystemOperationError(
                f"failed to rename {str(source_path)!r} to {str(destination_path)!r}") from e
        self.logger.info(f"Renamed {str(source_path)!r} to {str(destination_path)!r}")
