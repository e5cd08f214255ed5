from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from ..components.branch_classifier import BranchClassifier
from ..models.config import BranchesConfig
from ..services.repository_cache import RepositoryCache

router = APIRouter()


class DeleteBranchesRequest(BaseModel):
    repo_index: int
    branches: List[str]
    force: bool = False


def get_classifier(request: Request) -> BranchClassifier:
    return request.app.state.classifier


def get_repositories(request: Request) -> RepositoryCache:
    return request.app.state.repositories


def _repository_at(repositories: RepositoryCache, index: int) -> str:
    try:
        return repositories.get(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Repository not found")


@router.get("/repos")
def list_repos(repositories: RepositoryCache = Depends(get_repositories)):
    repos = repositories.refresh()
    return {"repos": [{"path": repo, "name": Path(repo).name} for repo in repos]}


@router.get("/branches")
def all_branches(
    classifier: BranchClassifier = Depends(get_classifier),
    repositories: RepositoryCache = Depends(get_repositories),
):
    reports = classifier.classify_all(repositories.repositories())
    return {"repositories": [report.to_dict() for report in reports]}


# declared before /branches/{repo_index} so "merged" is not taken as an index
@router.get("/branches/merged")
def merged_branches(
    classifier: BranchClassifier = Depends(get_classifier),
    repositories: RepositoryCache = Depends(get_repositories),
):
    result = []
    for report in classifier.classify_all(repositories.repositories()):
        merged = [b for b in report.branches if b.is_merged and not b.is_protected]
        if merged:
            result.append(report.with_branches(merged).to_dict())
    return {"repositories": result}


@router.get("/branches/{repo_index}")
def repo_branches(
    repo_index: int,
    classifier: BranchClassifier = Depends(get_classifier),
    repositories: RepositoryCache = Depends(get_repositories),
):
    return classifier.classify(_repository_at(repositories, repo_index)).to_dict()


@router.post("/delete")
def delete_branches(
    payload: DeleteBranchesRequest,
    classifier: BranchClassifier = Depends(get_classifier),
    repositories: RepositoryCache = Depends(get_repositories),
):
    repo = _repository_at(repositories, payload.repo_index)

    protected = classifier.protected_names(payload.branches)
    if protected:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete protected branches: {', '.join(protected)}",
        )

    results = classifier.delete_branches(repo, payload.branches, force=payload.force)
    return {"results": [result.to_dict() for result in results]}


@router.get("/status/{repo_index}")
def repo_status(
    repo_index: int,
    classifier: BranchClassifier = Depends(get_classifier),
    repositories: RepositoryCache = Depends(get_repositories),
):
    return classifier.repository_status(_repository_at(repositories, repo_index)).to_dict()


@router.post("/refresh")
def refresh(repositories: RepositoryCache = Depends(get_repositories)):
    repos = repositories.refresh()
    return {"success": True, "message": "Cache refreshed", "repo_count": len(repos)}


@router.get("/config")
def branch_config(request: Request):
    config: BranchesConfig = request.app.state.config
    return {
        "scan_path": config.scan_path,
        "base_branches": config.base_branches,
        "protected_branches": config.protected_branches,
        "show_unmerged": config.show_unmerged,
    }
