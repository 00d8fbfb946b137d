"""Tests for dated sibling copies."""

import pytest

from dated_backup.core.errors import DestinationExistsError, NamelessPathError, PathNotFoundError
from dated_backup.core.models import PathKind

from conftest import NOW


def launch(runner, tree, paths, **kwargs):
    return runner.run_snapshot([tree.path(path) for path in paths], now=NOW, **kwargs)


def test_simple_demo(runner, tree):
    tree.file("colors/dark/black", "ink")
    tree.file("colors/red", "blood")
    tree.file("sea", "massive")

    results = launch(runner, tree, ["colors", "sea"])

    assert [r.action.source_kind for r in results] == [PathKind.DIRECTORY, PathKind.FILE]
    assert all(r.elapsed_seconds is not None for r in results)
    assert tree.is_real_file_with("colors_2022-12-13-14h15/dark/black", "ink")
    assert tree.is_real_file_with("colors_2022-12-13-14h15/red", "blood")
    assert tree.is_real_file_with("sea_2022-12-13-14h15", "massive")


def test_demo_with_symlinks(runner, tree):
    tree.file("sea", "massive")
    tree.file("words/dark/black", "ink")
    tree.file("words/red", "blood")
    tree.symlink("colors", "words")
    tree.symlink("picture", "sea")
    tree.symlink("words/blue", "../sea")
    tree.symlink("words/not_light", "dark")

    launch(runner, tree, ["colors", "picture"])

    assert tree.is_real_dir("colors_2022-12-13-14h15/dark")
    assert tree.is_real_file_with("colors_2022-12-13-14h15/red", "blood")
    assert tree.link_target("colors_2022-12-13-14h15/blue") == "../sea"
    assert tree.link_target("colors_2022-12-13-14h15/not_light") == "dark"
    assert tree.is_real_file_with("picture_2022-12-13-14h15", "massive")


def test_destination_already_exists_fails_before_any_copy(runner, tree):
    tree.file("colors/red", "blood")
    tree.file("sea", "massive")
    tree.symlink("sea_2022-12-13-14h15", "non_existent_path")
    before = tree.state()

    with pytest.raises(DestinationExistsError, match="already exists"):
        launch(runner, tree, ["colors", "sea"])

    assert tree.state() == before


def test_missing_source(runner, tree):
    tree.file("sea", "massive")
    with pytest.raises(PathNotFoundError):
        launch(runner, tree, ["sea", "colors"])
    assert not tree.exists("sea_2022-12-13-14h15")


def test_source_without_a_name(runner, tree):
    tree.dirs("colors/dark")
    with pytest.raises(NamelessPathError):
        launch(runner, tree, ["colors/dark/.."])


def test_dry_run(runner, tree):
    tree.file("sea", "massive")
    results = launch(runner, tree, ["sea"], dry_run=True)
    assert results[0].action.destination_path == tree.path("sea_2022-12-13-14h15")
    assert results[0].elapsed_seconds is None
    assert not tree.exists("sea_2022-12-13-14h15")
