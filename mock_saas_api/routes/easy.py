"""Easy tier: full collections, no parameters."""

from fastapi import APIRouter, Depends

from ..dataset import Dataset, compute_stats
from ..deps import get_dataset

router = APIRouter(prefix="/api/easy", tags=["Easy"])


@router.get("/users")
async def all_users(dataset: Dataset = Depends(get_dataset)):
    """Return all 20 users."""
    return {"data": dataset.users, "count": len(dataset.users)}

@router.get("/repos")
async def all_repos(dataset: Dataset = Depends(get_dataset)):
    """Return all 50 repos."""
    return {"data": dataset.repos, "count": len(dataset.repos)}

@router.get("/commits")
async def all_commits(dataset: Dataset = Depends(get_dataset)):
    """Return all 200 commits."""
    return {"data": dataset.commits, "count": len(dataset.commits)}

@router.get("/stats")
async def stats(dataset: Dataset = Depends(get_dataset)):
    """Return summary statistics."""
    return compute_stats(dataset)
