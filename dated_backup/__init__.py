"""
Dated Backup - mirror directories into dated backups with rsync.

This package renames the previous dated backup of a directory before
mirroring it again, synchronizes selected subpaths between two trees, and
copies paths next to themselves under a dated name.
"""

__version__ = "1.0.0"

from .core.backup import DatedBackup
from .core.errors import BackupError

__all__ = ["DatedBackup", "BackupError"]
