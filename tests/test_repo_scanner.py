"""
Tests for git repository discovery.
"""

import os
from pathlib import Path

import pytest

from hostkit.components.repo_scanner import discover_repositories


def make_repo_dir(path: Path) -> Path:
    (path / ".git").mkdir(parents=True)
    return path


class TestDiscoverRepositories:
    def test_finds_nested_repositories_in_name_order(self, tmp_path: Path):
        make_repo_dir(tmp_path / "beta")
        make_repo_dir(tmp_path / "alpha")
        make_repo_dir(tmp_path / "group" / "gamma")

        repos = discover_repositories(tmp_path)

        assert repos == [
            str(tmp_path / "alpha"),
            str(tmp_path / "beta"),
            str(tmp_path / "group" / "gamma"),
        ]

    def test_does_not_descend_into_repository(self, tmp_path: Path):
        outer = make_repo_dir(tmp_path / "outer")
        make_repo_dir(outer / "vendor" / "inner")

        assert discover_repositories(tmp_path) == [str(outer)]

    def test_scan_path_itself_can_be_a_repository(self, tmp_path: Path):
        make_repo_dir(tmp_path)

        assert discover_repositories(tmp_path) == [str(tmp_path)]

    def test_skips_node_modules_and_hidden(self, tmp_path: Path):
        make_repo_dir(tmp_path / "node_modules" / "pkg")
        make_repo_dir(tmp_path / ".cache" / "thing")
        make_repo_dir(tmp_path / "visible")

        assert discover_repositories(tmp_path) == [str(tmp_path / "visible")]

    def test_depth_limit(self, tmp_path: Path):
        make_repo_dir(tmp_path / "a" / "b" / "c")
        make_repo_dir(tmp_path / "a" / "b" / "c2" / "d")

        repos = discover_repositories(tmp_path)

        assert str(tmp_path / "a" / "b" / "c") in repos
        assert str(tmp_path / "a" / "b" / "c2" / "d") not in repos
        assert discover_repositories(tmp_path, max_depth=4)[-1] == str(
            tmp_path / "a" / "b" / "c2" / "d"
        )

    def test_missing_scan_path(self, tmp_path: Path):
        assert discover_repositories(tmp_path / "missing") == []

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission checks do not apply to root",
    )
    def test_unreadable_directory_is_skipped(self, tmp_path: Path):
        locked = tmp_path / "locked"
        make_repo_dir(locked / "hidden-repo")
        make_repo_dir(tmp_path / "open")
        locked.chmod(0)
        try:
            assert discover_repositories(tmp_path) == [str(tmp_path / "open")]
        finally:
            locked.chmod(0o755)
