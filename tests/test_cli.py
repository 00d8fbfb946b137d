"""Tests for the command-line interface."""

import logging
import shutil

import pytest
from click.testing import CliRunner

from dated_backup.cli import cli, setup_logging


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("logging:\n  level: WARNING\n")
    return str(path)


@pytest.fixture(autouse=True)
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def invoke(*args):
    return CliRunner().invoke(cli, list(args))


def test_validate_config(config_file):
    result = invoke("--config", config_file, "validate-config")
    assert result.exit_code == 0
    assert "Configuration loaded successfully" in result.output
    assert "-aAXHv --delete --stats" in result.output


def test_invalid_config_exits_with_error(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("rsync:\n  partial_options: ['-a']\n")
    result = invoke("--config", str(bad), "validate-config")
    assert result.exit_code == 1
    assert "must include --delete" in result.output


def test_help_does_not_need_a_valid_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("rsync:\n  partial_options: ['-a']\n")
    result = invoke("--config", str(bad), "backup", "--help")
    assert result.exit_code == 0
    assert "SOURCE_DIR" in result.output


def test_backup_dry_run(config_file, tree):
    tree.dirs("foo/colors", "bar/colors_2022-08-09-10h11")
    result = invoke("--config", config_file, "backup", str(tree.path("foo/colors")), str(tree.path("bar")),
                    "--at", "2022-12-13 14:15", "--dry-run")
    assert result.exit_code == 0, result.output
    assert "Would rename" in result.output
    assert str(tree.path("bar/colors_2022-12-13-14h15")) in result.output
    assert tree.is_real_dir("bar/colors_2022-08-09-10h11")


def test_backup_ambiguous_candidates(config_file, tree):
    tree.dirs("foo/colors", "bar/colors_2022-08-09-10h11", "bar/colors_2022-09-10-11h12")
    result = invoke("--config", config_file, "backup", str(tree.path("foo/colors")), str(tree.path("bar")),
                    "--at", "2022-12-13 14:15")
    assert result.exit_code == 1
    assert "there are several candidates" in result.output


def test_sync_partial_copies_files(config_file, tree):
    tree.file("foo/picture", "photo")
    tree.dirs("bar")
    result = invoke("--config", config_file, "sync-partial", str(tree.path("foo")), str(tree.path("bar")), "picture")
    assert result.exit_code == 0, result.output
    assert "---> Copy the file" in result.output
    assert "Elapsed time:" in result.output
    assert tree.is_real_file_with("bar/picture", "photo")


def test_sync_partial_absolute_subpath(config_file, tree):
    tree.dirs("foo", "bar")
    result = invoke("--config", config_file, "sync-partial", str(tree.path("foo")), str(tree.path("bar")), "/picture")
    assert result.exit_code == 1
    assert "is absolute" in result.output


def test_sync_partial_prints_error_chain(config_file, tree):
    tree.dirs("bar")
    result = invoke("--config", config_file, "sync-partial", str(tree.path("foo")), str(tree.path("bar")))
    assert result.exit_code == 1
    assert "Error: failed to read metadata" in result.output
    assert "Caused by:" in result.output


@pytest.mark.skipif(shutil.which("false") is None, reason="false is not installed")
def test_sync_partial_confirms_applied_actions_before_a_failure(tmp_path, tree):
    failing = tmp_path / "failing.yaml"
    failing.write_text("rsync:\n  binary: 'false'\nlogging:\n  level: WARNING\n")
    tree.file("foo/picture", "photo")
    tree.dirs("foo/colors", "bar")

    result = invoke("--config", str(failing), "sync-partial", str(tree.path("foo")), str(tree.path("bar")),
                    "picture", "colors")

    assert result.exit_code == 1
    lines = result.output.splitlines()
    copied = next(i for i, line in enumerate(lines) if line.startswith("---> Copy the file"))
    assert lines[copied + 1].startswith("Elapsed time:")
    assert any(line.startswith("---> Synchronize") for line in lines[copied + 2:])
    assert "error status: 1" in result.output
    assert tree.is_real_file_with("bar/picture", "photo")


def test_snapshot(config_file, tree):
    tree.file("sea", "massive")
    result = invoke("--config", config_file, "snapshot", str(tree.path("sea")), "--at", "2022-12-13 14:15")
    assert result.exit_code == 0, result.output
    assert tree.is_real_file_with("sea_2022-12-13-14h15", "massive")


def test_setup_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="Invalid log level"):
        setup_logging("LOUD")
