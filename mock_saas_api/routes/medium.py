"""
Medium tier: path parameters, pagination and extraction targets.

Extraction targets carry an `_extraction_hint` naming the fields a crawler
should harvest for its next requests.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from ..dataset import Dataset
from ..deps import get_dataset, lenient_int
from ..generate import generate_file_content
from ..logs import logger
from ..queries import (
    commits_for_repo,
    files_for_repo,
    find_commit_by_sha,
    get_by_id,
    paginate,
    repo_summary,
    repos_for_user,
    user_summary,
)

router = APIRouter(prefix="/api/medium", tags=["Medium"])


def _require_repo(dataset: Dataset, repo_id: int):
    repo = get_by_id(dataset.repos, repo_id)
    if repo is None:
        raise HTTPException(404, f"Repo with id {repo_id} not found")
    return repo


@router.get("/users")
async def list_users(page: Optional[str] = Query(None), per_page: Optional[str] = Query(None), dataset: Dataset = Depends(get_dataset)):
    """Paginated users, 10 per page by default."""
    return paginate(dataset.users, lenient_int(page, 1), lenient_int(per_page, 10, minimum=1))

@router.get("/users/{user_id}")
async def get_user(user_id: int, dataset: Dataset = Depends(get_dataset)):
    """Single user with repo and commit counts. 410 if soft-deleted."""
    user = get_by_id(dataset.users, user_id)
    if user is None:
        raise HTTPException(404, f"User with id {user_id} not found")
    if user.deleted:
        raise HTTPException(410, f"User with id {user_id} has been deleted")
    return {**user.model_dump(), **user_summary(dataset, user_id)}

@router.get("/users/{user_id}/repos")
async def get_user_repos(user_id: int, dataset: Dataset = Depends(get_dataset)):
    """Repos owned by a user. Extraction target: repo ids."""
    user = get_by_id(dataset.users, user_id)
    if user is None:
        raise HTTPException(404, f"User with id {user_id} not found")
    if user.deleted:
        # listings treat a deleted user as absent
        raise HTTPException(404, f"User with id {user_id} has been deleted")

    repos = repos_for_user(dataset, user_id)
    repo_ids = [r.id for r in repos]
    logger.event("EXTRACTION", f"User {user_id} repos", user_id=user_id, repo_ids=repo_ids)
    return {
        "data": repos,
        "count": len(repos),
        "user_id": user_id,
        "_extraction_hint": {"field": "data[].id", "values": repo_ids},
    }

@router.get("/repos/{repo_id}")
async def get_repo(repo_id: int, dataset: Dataset = Depends(get_dataset)):
    """Single repo with commit and contributor stats."""
    repo = _require_repo(dataset, repo_id)
    return {**repo.model_dump(), **repo_summary(dataset, repo_id)}

@router.get("/repos/{repo_id}/commits")
async def get_repo_commits(repo_id: int, page: Optional[str] = Query(None), per_page: Optional[str] = Query(None), dataset: Dataset = Depends(get_dataset)):
    """Paginated commits, 20 per page by default. Extraction target: commit SHAs."""
    _require_repo(dataset, repo_id)
    commits = commits_for_repo(dataset, repo_id)
    if commits:
        logger.event("EXTRACTION", f"Repo {repo_id} commit SHAs", repo_id=repo_id, shas=[c.sha[:7] for c in commits[:5]])

    paginated = paginate(commits, lenient_int(page, 1), lenient_int(per_page, 20, minimum=1))
    return {
        **paginated,
        "repo_id": repo_id,
        "_extraction_hint": {"field": "data[].sha", "values": [c.sha for c in paginated["data"]]},
    }

@router.get("/repos/{repo_id}/files")
async def get_repo_files(repo_id: int, dataset: Dataset = Depends(get_dataset)):
    """File metadata. Extraction target: file ids and download URLs."""
    _require_repo(dataset, repo_id)
    files = files_for_repo(dataset, repo_id)
    if files:
        logger.event("EXTRACTION", f"Repo {repo_id} file IDs", repo_id=repo_id, file_ids=[f.id for f in files])

    return {
        "data": files,
        "count": len(files),
        "repo_id": repo_id,
        "_extraction_hint": {
            "fields": ["data[].id", "data[].download_url"],
            "file_ids": [f.id for f in files],
            "download_urls": [f.download_url for f in files],
        },
    }

@router.get("/files/{file_id}/download")
async def download_file(file_id: int, dataset: Dataset = Depends(get_dataset)):
    """File body as text/plain attachment."""
    file = get_by_id(dataset.files, file_id)
    if file is None:
        raise HTTPException(404, f"File with id {file_id} not found")

    content = generate_file_content(file_id)
    basename = file.filename.split("/")[-1]
    headers = {"Content-Disposition": f'attachment; filename="{basename}"'}
    return PlainTextResponse(content, headers=headers)

@router.get("/commits/{commit_sha}")
async def get_commit(commit_sha: str, dataset: Dataset = Depends(get_dataset)):
    """Commit by full SHA or prefix, with author and repo refs."""
    commit = find_commit_by_sha(dataset.commits, commit_sha)
    if commit is None:
        raise HTTPException(404, f"Commit with sha {commit_sha} not found")

    author = get_by_id(dataset.users, commit.author_id)
    repo = get_by_id(dataset.repos, commit.repo_id)
    return {
        **commit.model_dump(),
        "author": {"id": author.id, "name": author.name, "username": author.username} if author else None,
        "repo": {"id": repo.id, "name": repo.name} if repo else None,
    }
