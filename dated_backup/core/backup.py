"""Main dated backup coordinator."""

import os
import shutil
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Any, List, Optional, Sequence, Union

from .candidates import CandidateResolver
from .classifier import classify, peek
from .errors import DestinationExistsError, FilesystemOperationError, WrongTypeError
from .executor import ActionExecutor
from .models import (
    ActionResult,
    BackupResult,
    PathKind,
    SnapshotAction,
    SnapshotResult,
    SyncAction,
)
from .naming import current_time, dated_name, dated_suffix, source_base_name
from .planner import plan_partial_sync
from ..config.config_manager import ConfigManager
from ..utils.formatters import format_duration


class DatedBackup:
    """Coordinates the backup, partial synchronization and snapshot flows."""

    def __init__(self, config_path: Optional[str] = None,
                 config_manager: Optional[ConfigManager] = None):
        """Initialize the coordinator.

        Args:
            config_path: Optional path to configuration file.
            config_manager: Already loaded configuration, takes precedence
                over ``config_path``.
        """
        if config_manager is None:
            config_manager = ConfigManager(config_path)
            config_manager.load_config()
        self.config_manager = config_manager
        self.resolver = CandidateResolver()
        self.executor = None
        self.backup_options: List[str] = []
        self.logger = logging.getLogger(__name__)

        self._initialize_components()

    def _initialize_components(self):
        """Initialize the executor from the rsync configuration."""
        rsync_config = self.config_manager.get_rsync_config()
        self.executor = ActionExecutor(
            rsync_binary=rsync_config.get('binary', 'rsync'),
            rsync_options=self.config_manager.get_rsync_options('partial'),
        )
        self.backup_options = self.config_manager.get_rsync_options('backup')

    def run_backup(self, source_dir: Union[str, Path], destination_dir: Union[str, Path],
                   now: Optional[datetime] = None, dry_run: bool = False) -> BackupResult:
        """Mirror ``source_dir`` into a dated directory under ``destination_dir``.

        The single previous dated backup of the same directory, if any, is
        renamed to the new dated name first so rsync only transfers the
        differences.

        Args:
            source_dir: Directory to back up.
            destination_dir: Directory holding the dated backups.
            now: Time used for the dated name. Defaults to the local time.
            dry_run: Resolve and validate everything without touching the disk.

        Returns:
            BackupResult describing the final destination.
        """
        source_dir = os.fspath(source_dir)
        destination_dir = Path(destination_dir)
        if now is None:
            now = current_time()

        base_name = source_base_name(source_dir)
        if classify(source_dir) is not PathKind.DIRECTORY:
            raise WrongTypeError(f"{source_dir!r} is not a directory")

        final_path = destination_dir / dated_name(base_name, now)
        final_kind = peek(final_path)
        if final_kind is not None and final_kind is not PathKind.DIRECTORY:
            raise WrongTypeError(f"{str(final_path)!r} exists but is not a directory")

        candidate = self.resolver.resolve(base_name, destination_dir)
        renamed_from = None
        if candidate is not None and candidate.path != final_path:
            renamed_from = candidate.path

        result = BackupResult(source_path=source_dir, destination_path=final_path,
                              renamed_from=renamed_from, dry_run=dry_run)
        if dry_run:
            self.logger.info(f"Dry run: would synchronize {source_dir!r} with {str(final_path)!r}")
            return result

        if renamed_from is not None:
            self.executor.rename(renamed_from, final_path)

        self.logger.info(f"Synchronize {source_dir!r} with {str(final_path)!r}")
        result.elapsed_seconds = self.executor.synchronize_directory(
            source_dir, final_path, options=self.backup_options)
        return result

    def plan_partial_sync(self, source_prefix: Union[str, Path], destination_prefix: Union[str, Path],
                          subpaths: Sequence[str]) -> List[SyncAction]:
        """Plan a partial synchronization without executing it."""
        return plan_partial_sync(os.fspath(source_prefix), Path(destination_prefix), subpaths)

    def run_partial_sync(self, source_prefix: Union[str, Path], destination_prefix: Union[str, Path],
                         subpaths: Sequence[str], dry_run: bool = False,
                         on_start: Optional[Callable[[SyncAction], None]] = None,
                         on_result: Optional[Callable[[ActionResult], None]] = None) -> Dict[str, Any]:
        """Mirror selected subpaths of ``source_prefix`` into ``destination_prefix``.

        Args:
            source_prefix: Source directory.
            destination_prefix: Destination directory.
            subpaths: Relative paths to synchronize.
            dry_run: Plan only.
            on_start: Called with each action just before it runs.
            on_result: Called with each result as soon as its action succeeds.

        Returns:
            Dictionary with the planned 'actions' and the executed 'results'.
        """
        actions = self.plan_partial_sync(source_prefix, destination_prefix, subpaths)
        self.logger.info(f"Planned {len(actions)} actions")

        results: List[ActionResult] = []
        if not dry_run:
            results = self.executor.execute_all(actions, on_start=on_start, on_result=on_result)

        return {
            'actions': actions,
            'results': results,
            'timestamp': datetime.now().astimezone(),
        }

    def plan_snapshot(self, paths: Sequence[Union[str, Path]], now: datetime) -> List[SnapshotAction]:
        """Plan copies of each path to a dated sibling, validating all of them first."""
        suffix = dated_suffix(now)
        actions = []
        for path in paths:
            source_path = Path(path)
            base_name = source_base_name(path)
            source_kind = classify(source_path)
            destination_path = source_path.with_name(base_name + suffix)
            if peek(destination_path) is not None:
                raise DestinationExistsError(f"{str(destination_path)!r} already exists")
            actions.append(SnapshotAction(source_path=source_path,
                                          destination_path=destination_path,
                                          source_kind=source_kind))
        return actions

    def run_snapshot(self, paths: Sequence[Union[str, Path]], now: Optional[datetime] = None,
                     dry_run: bool = False) -> List[SnapshotResult]:
        """Copy every path next to itself under a dated name.

        Args:
            paths: Files or directories to copy.
            now: Time used for the dated names. Defaults to the local time.
            dry_run: Plan only.

        Returns:
            One SnapshotResult per path, in order.
        """
        if now is None:
            now = current_time()
        actions = self.plan_snapshot(paths, now)
        if dry_run:
            return [SnapshotResult(action=action) for action in actions]
        return [self._copy_snapshot(action) for action in actions]

    def _copy_snapshot(self, action: SnapshotAction) -> SnapshotResult:
        source, destination = action.source_path, action.destination_path
        start = time.monotonic()
        try:
            if action.source_kind is PathKind.DIRECTORY:
                shutil.copytree(source, destination, symlinks=True)
            else:
                shutil.copy(source, destination)
        except OSError as e:
            raise FilesystemOperationError(f"failed to copy {str(source)!r} to {str(destination)!r}") from e
        elapsed = time.monotonic() - start
        self.logger.info(f"Copied {str(source)!r} to {str(destination)!r} in {format_duration(elapsed)}")
        return SnapshotResult(action=action, elapsed_seconds=elapsed)
