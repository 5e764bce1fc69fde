"""
Read-only lookups over the dataset.

Absence is a normal result here: lookups return None and filters return an
empty list, and the route handlers decide what status that maps to.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, TypeVar

from .dataset import Dataset
from .models import Commit, Record

R = TypeVar("R", bound=Record)


def get_by_id(collection: Sequence[R], record_id: int) -> Optional[R]:
    return next((r for r in collection if r.id == record_id), None)


def filter_by_foreign_key(collection: Sequence[R], key_field: str, value: int) -> List[R]:
    return [r for r in collection if getattr(r, key_field) == value]


def paginate(sequence: Sequence[Any], page: int = 1, per_page: int = 10) -> Dict[str, Any]:
    """Slice one 1-indexed page out of sequence.

    page is echoed back as given. Pages outside 1..total_pages return no data.
    """
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    start = (page - 1) * per_page
    data = list(sequence[start:start + per_page]) if page >= 1 else []
    return {
        "data": data,
        "total": len(sequence),
        "page": page,
        "per_page": per_page,
        "total_pages": math.ceil(len(sequence) / per_page),
    }


def find_commit_by_sha(commits: Sequence[Commit], sha: str) -> Optional[Commit]:
    """Exact or prefix match; an ambiguous prefix returns the lowest commit id."""
    if not sha:
        return None
    return next((c for c in commits if c.sha == sha or c.sha.startswith(sha)), None)


# --- Relationship helpers ---
def repos_for_user(dataset: Dataset, user_id: int):
    return filter_by_foreign_key(dataset.repos, "owner_id", user_id)


def commits_for_repo(dataset: Dataset, repo_id: int):
    return filter_by_foreign_key(dataset.commits, "repo_id", repo_id)


def commits_by_author(dataset: Dataset, user_id: int):
    return filter_by_foreign_key(dataset.commits, "author_id", user_id)


def files_for_repo(dataset: Dataset, repo_id: int):
    return filter_by_foreign_key(dataset.files, "repo_id", repo_id)


def user_summary(dataset: Dataset, user_id: int) -> Dict[str, Any]:
    repos = repos_for_user(dataset, user_id)
    return {
        "repo_count": len(repos),
        "commit_count": len(commits_by_author(dataset, user_id)),
        "repos": [{"id": r.id, "name": r.name} for r in repos],
    }


def repo_summary(dataset: Dataset, repo_id: int) -> Dict[str, Any]:
    commits = commits_for_repo(dataset, repo_id)
    contributors = list(dict.fromkeys(c.author_id for c in commits))
    latest = commits[0] if commits else None
    return {
        "commit_count": len(commits),
        "contributor_count": len(contributors),
        "contributors": contributors,
        "latest_commit": latest.model_dump() if latest else None,
    }
