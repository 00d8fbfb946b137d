"""Shared fixtures for dated-backup tests."""

import os
import shutil
from datetime import datetime, timezone
from pathlib import Path

import pytest

from dated_backup.config.config_manager import ConfigManager
from dated_backup.core.backup import DatedBackup


NOW = datetime(2022, 12, 13, 14, 15, 16, tzinfo=timezone.utc)

requires_rsync = pytest.mark.skipif(shutil.which("rsync") is None, reason="rsync is not installed")


class Tree:
    """Builds and inspects a directory tree under a temporary root."""

    def __init__(self, root: Path):
        self.root = root

    def path(self, relative: str) -> Path:
        return self.root / relative

    def dirs(self, *relatives: str):
        for relative in relatives:
            self.path(relative).mkdir(parents=True, exist_ok=True)

    def file(self, relative: str, content: str = ""):
        path = self.path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    def symlink(self, relative: str, target: str):
        path = self.path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(target, path)

    def read(self, relative: str) -> str:
        return self.path(relative).read_text()

    def exists(self, relative: str) -> bool:
        return os.path.lexists(self.path(relative))

    def is_real_dir(self, relative: str) -> bool:
        path = self.path(relative)
        return path.is_dir() and not path.is_symlink()

    def is_real_file_with(self, relative: str, content: str) -> bool:
        path = self.path(relative)
        return path.is_file() and not path.is_symlink() and path.read_text() == content

    def link_target(self, relative: str) -> str:
        return os.readlink(self.path(relative))

    def state(self) -> dict:
        """Map every entry to its kind and content, without following links."""
        entries = {}
        for dirpath, dirnames, filenames in os.walk(self.root):
            for name in dirnames + filenames:
                path = Path(dirpath) / name
                relative = str(path.relative_to(self.root))
                if path.is_symlink():
                    entries[relative] = ("symlink", os.readlink(path))
                elif path.is_dir():
                    entries[relative] = ("dir", None)
                else:
                    entries[relative] = ("file", path.read_bytes())
        return entries


@pytest.fixture
def tree(tmp_path):
    """Empty tree rooted in a temporary directory."""
    return Tree(tmp_path)


@pytest.fixture
def config_manager(tmp_path_factory):
    """Configuration with built-in defaults only."""
    config_file = tmp_path_factory.mktemp("config") / "config.yaml"
    config_file.write_text("{}\n")
    manager = ConfigManager(str(config_file))
    manager.load_config()
    return manager


@pytest.fixture
def runner(config_manager):
    return DatedBackup(config_manager=config_manager)
