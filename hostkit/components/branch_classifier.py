"""
Branch classification for the git branch cleaner.

This module provides the BranchClassifier class, which derives a fresh
RepositoryBranchReport for a repository on every call:

- merged status against the configured base branches (any base suffices)
- protection by name list or by being the checked-out branch
- ahead/behind counts against the first usable base branch

Nothing is cached between calls.
"""

import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from ..models.git import (
    Branch,
    DeletionResult,
    RepositoryBranchReport,
    RepositoryStatus,
)
from .git_agent import GitAgent, GitCommandError
from ..utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from ..utils.logging import get_logger

logger = get_logger("branches.classifier")


class BranchClassifier:
    """Classifies and deletes local branches of git repositories."""

    def __init__(
        self,
        base_branches: Iterable[str],
        protected_branches: Iterable[str],
        timeout: Optional[float] = None,
    ):
        """
        Initialize the classifier.

        Args:
            base_branches: Candidate base branches in priority order
            protected_branches: Branch names that must never be deleted
            timeout: Optional per-command git timeout in seconds
        """
        self.base_branches = list(base_branches)
        self.protected_branches = list(protected_branches)
        self.timeout = timeout

    def _agent(self, repository_path: Union[str, os.PathLike]) -> GitAgent:
        return GitAgent(repository_path, timeout=self.timeout)

    def classify(self, repository_path: Union[str, os.PathLike]) -> RepositoryBranchReport:
        """
        Build the branch report for one repository.

        Any git failure affecting the repository as a whole is absorbed into
        a report with no branches and ``error`` set.
        """
        repo_path = str(repository_path)
        repo_name = Path(repo_path).name

        try:
            agent = self._agent(repo_path)
            current = agent.current_branch()
            listed = agent.list_branches()

            existing_bases = [base for base in self.base_branches if agent.ref_exists(base)]
            merged_sets = self._merged_sets(agent, existing_bases)

            branches = []
            for name, last_commit in listed:
                ahead, behind = self._ahead_behind(agent, name, existing_bases)
                branches.append(
                    Branch(
                        name=name,
                        is_current=name == current,
                        is_merged=self._is_merged(name, existing_bases, merged_sets),
                        is_protected=self.is_protected(name, current),
                        last_commit=last_commit,
                        ahead=ahead,
                        behind=behind,
                    )
                )

            logger.debug(
                f"Classified {len(branches)} branches",
                extra={"repo": repo_path, "current": current},
            )
            return RepositoryBranchReport(
                repo_path=repo_path,
                repo_name=repo_name,
                current_branch=current,
                branches=branches,
            )

        except Exception as e:
            get_error_tracker().record_error(
                component="branches.classifier",
                category=ErrorCategory.SUBPROCESS,
                severity=ErrorSeverity.MEDIUM,
                message=f"Error getting branches for {repo_path}: {e}",
                exception=e,
                context={"repo": repo_path},
            )
            return RepositoryBranchReport(
                repo_path=repo_path,
                repo_name=repo_name,
                current_branch="unknown",
                branches=[],
                error=str(e),
            )

    def classify_all(
        self, repository_paths: Iterable[Union[str, os.PathLike]]
    ) -> List[RepositoryBranchReport]:
        """Classify several repositories; one failure never stops the rest."""
        return [self.classify(path) for path in repository_paths]

    def is_protected(self, name: str, current_branch: Optional[str] = None) -> bool:
        return name in self.protected_branches or name == current_branch

    def protected_names(self, names: Iterable[str]) -> List[str]:
        """Requested names that appear in the static protected list."""
        return [name for name in names if name in self.protected_branches]

    def _merged_sets(self, agent: GitAgent, bases: List[str]) -> Dict[str, Set[str]]:
        """Merged branch names per base; bases whose listing fails are left out."""
        merged: Dict[str, Set[str]] = {}
        for base in bases:
            try:
                merged[base] = set(agent.merged_branches(base))
            except GitCommandError as e:
                logger.warning(
                    f"Could not list branches merged into {base}: {e}",
                    extra={"repo": str(agent.repo_path)},
                )
        return merged

    @staticmethod
    def _is_merged(name: str, bases: List[str], merged_sets: Dict[str, Set[str]]) -> bool:
        for base in bases:
            if name in merged_sets.get(base, ()):
                return True
        return False

    @staticmethod
    def _ahead_behind(agent: GitAgent, name: str, bases: List[str]) -> Tuple[int, int]:
        """Counts against the first base whose divergence can be computed."""
        for base in bases:
            try:
                return agent.divergence(base, name)
            except GitCommandError:
                continue
        return 0, 0

    def delete_branches(
        self,
        repository_path: Union[str, os.PathLike],
        names: Iterable[str],
        force: bool = False,
    ) -> List[DeletionResult]:
        """
        Delete branches one by one, reporting each outcome in input order.

        No protection check happens here; callers reject protected names
        beforehand.
        """
        agent = self._agent(repository_path)
        results = []

        for name in names:
            try:
                agent.delete_branch(name, force=force)
                results.append(
                    DeletionResult(branch=name, success=True, message="Deleted successfully")
                )
            except GitCommandError as e:
                logger.warning(
                    f"Failed to delete branch {name}: {e}",
                    extra={"repo": str(repository_path)},
                )
                results.append(DeletionResult(branch=name, success=False, message=str(e)))

        return results

    def repository_status(self, repository_path: Union[str, os.PathLike]) -> RepositoryStatus:
        """Current branch and cleanliness of the working tree."""
        repo_path = str(repository_path)
        repo_name = Path(repo_path).name

        try:
            agent = self._agent(repo_path)
            dirty = agent.is_dirty()
            return RepositoryStatus(
                repo_path=repo_path,
                repo_name=repo_name,
                current_branch=agent.current_branch(),
                has_uncommitted_changes=dirty,
                clean=not dirty,
            )
        except GitCommandError as e:
            logger.warning(f"Could not read status of {repo_path}: {e}")
            return RepositoryStatus(repo_path=repo_path, repo_name=repo_name, error=str(e))
