"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the hostkit test suite.
"""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List
from unittest.mock import Mock

import pytest

from hostkit.utils.logging import setup_logging

# Route log files away from the working directory before any component
# logger is created.
setup_logging(log_dir=tempfile.mkdtemp(prefix="hostkit-test-logs-"), log_level="DEBUG")

from hostkit.models.config import (  # noqa: E402
    BranchesConfig,
    Configuration,
    DownloadsConfig,
    NetworkConfig,
    PortsConfig,
)
from hostkit.utils.error_handling import get_error_tracker  # noqa: E402

GIT_AVAILABLE = shutil.which("git") is not None

requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git executable not available")


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> Mock:
    """Build a stand-in for subprocess.CompletedProcess."""
    result = Mock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


# Error tracker isolation
@pytest.fixture(autouse=True)
def clear_error_tracker():
    """Start every test with an empty error tracker."""
    get_error_tracker().clear()
    yield
    get_error_tracker().clear()


# Configuration fixtures
@pytest.fixture
def downloads_config(tmp_path: Path) -> DownloadsConfig:
    """Downloads configuration rooted in a temporary directory."""
    return DownloadsConfig(
        watch_path=str(tmp_path / "downloads"),
        sorted_path=str(tmp_path / "downloads" / "sorted"),
        history_file=str(tmp_path / "data" / "history.json"),
        stability_threshold_ms=0,
    )


@pytest.fixture
def branches_config(tmp_path: Path) -> BranchesConfig:
    return BranchesConfig(scan_path=str(tmp_path))


@pytest.fixture
def network_config(tmp_path: Path) -> NetworkConfig:
    return NetworkConfig(
        devices_file=str(tmp_path / "data" / "devices.json"),
        resolve_hostnames=False,
    )


@pytest.fixture
def ports_config(tmp_path: Path) -> PortsConfig:
    return PortsConfig(preferences_file=str(tmp_path / "data" / "preferences.json"))


@pytest.fixture
def sample_configuration(
    downloads_config, branches_config, network_config, ports_config
) -> Configuration:
    return Configuration(
        downloads=downloads_config,
        branches=branches_config,
        network=network_config,
        ports=ports_config,
    )


# Git repository fixtures
def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True
    )
    return result.stdout


@pytest.fixture
def git() -> Callable[..., str]:
    """Run a git command in a repository, failing the test on error."""
    return _git


@pytest.fixture
def make_git_repo(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating a repository with one commit on ``main``."""
    if not GIT_AVAILABLE:
        pytest.skip("git executable not available")

    def factory(name: str = "repo", parent: Path = tmp_path) -> Path:
        repo = parent / name
        repo.mkdir(parents=True)
        _git(repo, "init", "-q")
        _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
        _git(repo, "config", "user.email", "dev@example.com")
        _git(repo, "config", "user.name", "Dev")
        _git(repo, "config", "commit.gpgsign", "false")
        commit(repo, "README.md", "initial")
        return repo

    return factory


def commit(repo: Path, filename: str, message: str) -> None:
    """Append to ``filename`` and commit it."""
    path = repo / filename
    with open(path, "a", encoding="utf-8") as f:
        f.write(message + "\n")
    _git(repo, "add", filename)
    _git(repo, "commit", "-q", "-m", message)


@pytest.fixture
def three_branch_repo(make_git_repo) -> Path:
    """
    Repository with ``main`` checked out, ``feature-a`` merged into it and
    ``feature-b`` three commits ahead of it.
    """
    repo = make_git_repo("project")

    _git(repo, "checkout", "-q", "-b", "feature-a")
    commit(repo, "a.txt", "feature a work")
    _git(repo, "checkout", "-q", "main")
    _git(repo, "merge", "-q", "--ff-only", "feature-a")

    _git(repo, "checkout", "-q", "-b", "feature-b")
    for number in range(3):
        commit(repo, "b.txt", f"feature b work {number}")
    _git(repo, "checkout", "-q", "main")

    return repo


# Filesystem fixtures
@pytest.fixture
def duplicate_dir(tmp_path: Path) -> Path:
    """Directory where a.txt and b.txt share content and c.txt differs."""
    root = tmp_path / "files"
    root.mkdir()
    (root / "a.txt").write_bytes(b"same bytes\n")
    (root / "b.txt").write_bytes(b"same bytes\n")
    (root / "c.txt").write_bytes(b"different bytes\n")
    return root


def write_files(root: Path, names: List[str], content: bytes = b"data") -> List[Path]:
    paths = []
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        paths.append(path)
    return paths


@pytest.fixture
def running_as_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
