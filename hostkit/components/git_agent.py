"""
Git command access for the branch cleaner.

This module provides the GitAgent class, a thin wrapper over the git CLI
that runs plumbing/porcelain commands in one working directory and parses
their text output.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union
import os
import subprocess

from ..models.git import LastCommit
from ..utils.commands import CommandError, run_command
from ..utils.logging import get_logger

logger = get_logger("branches.git")

BRANCH_FORMAT = "%(refname:short)|%(committerdate:iso8601)|%(committername)|%(subject)"


class GitCommandError(CommandError):
    """A git invocation exited non-zero."""


class GitAgent:
    """
    Runs git commands against a single repository.

    Every method except ``ref_exists`` raises GitCommandError when git exits
    non-zero; ``ref_exists`` treats any non-zero exit as "ref does not exist".
    """

    def __init__(
        self, repo_path: Union[str, os.PathLike], timeout: Optional[float] = None
    ):
        """
        Initialize GitAgent.

        Args:
            repo_path: Repository working directory
            timeout: Seconds before a git call is killed; None waits forever
        """
        self.repo_path = Path(repo_path)
        self.timeout = timeout

    def _run_git_command(self, command: List[str]) -> subprocess.CompletedProcess:
        """Run ``git <command>`` in the repository without checking the exit code."""
        try:
            return run_command(["git"] + command, cwd=self.repo_path, timeout=self.timeout)
        except CommandError as e:
            raise GitCommandError(e.command, e.returncode, e.stderr, e.stdout) from e

    def _git(self, command: List[str]) -> str:
        """Run ``git <command>`` and return stdout, raising on non-zero exit."""
        result = self._run_git_command(command)
        if result.returncode != 0:
            raise GitCommandError(
                ["git"] + command, result.returncode, result.stderr, result.stdout
            )
        return result.stdout

    def current_branch(self) -> str:
        """Resolve the symbolic HEAD to a short branch name."""
        return self._git(["rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def list_branches(self) -> List[Tuple[str, LastCommit]]:
        """
        List local branches with their last commit metadata.

        Returns:
            (name, LastCommit) pairs in git's enumeration order
        """
        output = self._git(["branch", f"--format={BRANCH_FORMAT}"])

        branches = []
        for line in output.splitlines():
            # subject is last so any '|' it contains stays in it
            parts = line.split("|", 3)
            name = parts[0].strip()
            # detached HEAD shows up as "(HEAD detached at ...)"
            if not name or name.startswith("("):
                continue

            parts += [""] * (4 - len(parts))
            branches.append(
                (name, LastCommit(date=parts[1], author=parts[2], subject=parts[3]))
            )

        return branches

    def ref_exists(self, ref: str) -> bool:
        """Check whether ``ref`` resolves to a commit."""
        try:
            result = self._run_git_command(["rev-parse", "--verify", "--quiet", ref])
        except GitCommandError:
            return False
        return result.returncode == 0

    def merged_branches(self, base: str) -> List[str]:
        """Names of local branches whose tips are reachable from ``base``."""
        output = self._git(["branch", "--merged", base, "--format=%(refname:short)"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def divergence(self, base: str, branch: str) -> Tuple[int, int]:
        """
        Count commits on each side of ``base...branch``.

        Returns:
            (ahead, behind): commits only on ``branch``, commits only on ``base``
        """
        output = self._git(["rev-list", "--left-right", "--count", f"{base}...{branch}"])
        fields = output.split()
        if len(fields) != 2:
            raise GitCommandError(
                ["git", "rev-list", "--left-right", "--count", f"{base}...{branch}"],
                stderr=f"unexpected output: {output!r}",
            )
        behind, ahead = (int(value) for value in fields)
        return ahead, behind

    def delete_branch(self, name: str, force: bool = False) -> str:
        """Delete a local branch; ``force`` deletes even when unmerged."""
        flag = "-D" if force else "-d"
        output = self._git(["branch", flag, name])
        logger.info(f"Deleted branch {name}", extra={"repo": str(self.repo_path), "force": force})
        return output.strip()

    def is_dirty(self) -> bool:
        """True when the working tree has staged, unstaged or untracked changes."""
        return bool(self._git(["status", "--porcelain"]).strip())
