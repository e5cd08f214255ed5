"""
Git branch data models.

This module defines the branch classification snapshot produced for a
repository, plus deletion and working-tree status results.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LastCommit:
    """Metadata of the commit a branch points at."""

    date: str
    author: str
    subject: str


@dataclass
class Branch:
    """One local branch of one repository."""

    name: str
    is_current: bool
    is_merged: bool
    is_protected: bool
    last_commit: LastCommit
    ahead: int = 0
    behind: int = 0

    def validate(self) -> bool:
        """Validate branch data."""
        if not self.name or not self.name.strip():
            raise ValueError("Branch name cannot be empty")

        if self.ahead < 0 or self.behind < 0:
            raise ValueError("ahead/behind counts cannot be negative")

        if self.is_current and not self.is_protected:
            raise ValueError("The current branch must be protected")

        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RepositoryBranchReport:
    """Branch classification snapshot for a single repository."""

    repo_path: str
    repo_name: str
    current_branch: str
    branches: List[Branch] = field(default_factory=list)
    error: Optional[str] = None

    def validate(self) -> bool:
        """Validate report data."""
        if not self.repo_path:
            raise ValueError("repo_path cannot be empty")

        if self.error and self.branches:
            raise ValueError("A failed report cannot carry branches")

        names = [branch.name for branch in self.branches]
        if len(names) != len(set(names)):
            raise ValueError("Branch names must be unique within a repository")

        for branch in self.branches:
            branch.validate()

        return True

    def with_branches(self, branches: List[Branch]) -> "RepositoryBranchReport":
        """Return a copy of this report restricted to ``branches``."""
        return RepositoryBranchReport(
            repo_path=self.repo_path,
            repo_name=self.repo_name,
            current_branch=self.current_branch,
            branches=list(branches),
            error=self.error,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            del data["error"]
        return data


@dataclass
class DeletionResult:
    """Outcome of deleting one branch."""

    branch: str
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RepositoryStatus:
    """Working tree status of a repository."""

    repo_path: str
    repo_name: str
    current_branch: Optional[str] = None
    has_uncommitted_changes: Optional[bool] = None
    clean: Optional[bool] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
