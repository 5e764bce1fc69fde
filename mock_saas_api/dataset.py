"""
Dataset builder.

Builds the four collections once, with fixed cardinalities and the
deliberate anomalies crawlers are expected to survive:

- user 18 is soft-deleted and authors every 20th commit
- users 16-20 own no repos
- repos 46-47 belong to the deleted user, repos 48-50 to users that never existed
- repos 41-50 have no commits; commits stop at exactly 200, so the tail of
  repos 1-40 gets fewer (repo 37 gets 2, repos 38-40 none)
- files only cover repos 1-25
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .generate import generate_commit, generate_file, generate_repo, generate_user, seeded_faker
from .logs import logger
from .models import Commit, File, Repo, User

USER_COUNT = 20
REPO_COUNT = 50
COMMIT_COUNT = 200
FILE_COUNT = 30

DELETED_USER_ID = 18
USERS_WITH_REPOS = 15
REPOS_WITH_VALID_OWNER = 45
REPOS_OWNED_BY_DELETED_USER = (46, 47)
REPOS_WITH_COMMITS = 40
REPOS_WITH_FILES = 25


@dataclass(frozen=True)
class Dataset:
    users: Tuple[User, ...]
    repos: Tuple[Repo, ...]
    commits: Tuple[Commit, ...]
    files: Tuple[File, ...]


def owner_for_repo(repo_id: int, users_with_repos: List[int]) -> int:
    if repo_id <= REPOS_WITH_VALID_OWNER:
        return users_with_repos[repo_id % len(users_with_repos)]
    if repo_id in REPOS_OWNED_BY_DELETED_USER:
        return DELETED_USER_ID
    # 48 -> 21, 49 -> 22, 50 -> 23
    return USER_COUNT + (repo_id - REPOS_OWNED_BY_DELETED_USER[-1])


def commits_for_repo(repo_id: int) -> int:
    return 3 + (repo_id % 6)


def author_for_commit(commit_id: int) -> int:
    if commit_id % 20 == 0:
        return DELETED_USER_ID
    return (commit_id % 17) + 1


def repo_for_file(file_id: int) -> int:
    return ((file_id - 1) % REPOS_WITH_FILES) + 1


def build_dataset(seed: Optional[int] = None, epoch: Optional[datetime] = None) -> Dataset:
    """Generate every collection from a single seeded stream.

    Draw order is users, repos, commits, files; changing it changes the data.
    """
    seed = config.MOCK_SEED if seed is None else seed
    fake = seeded_faker(seed)

    users = [generate_user(fake, i, deleted=(i == DELETED_USER_ID), epoch=epoch) for i in range(1, USER_COUNT + 1)]
    users_with_repos = [u.id for u in users[:USERS_WITH_REPOS]]

    repos = [generate_repo(fake, i, owner_for_repo(i, users_with_repos), epoch=epoch) for i in range(1, REPO_COUNT + 1)]

    commits = []
    commit_id = 1
    for repo_id in range(1, REPOS_WITH_COMMITS + 1):
        for _ in range(commits_for_repo(repo_id)):
            if commit_id > COMMIT_COUNT:
                break
            commits.append(generate_commit(fake, commit_id, repo_id, author_for_commit(commit_id), epoch=epoch))
            commit_id += 1

    files = [generate_file(fake, i, repo_for_file(i), epoch=epoch) for i in range(1, FILE_COUNT + 1)]

    logger.event(
        "DATA",
        "Generated mock data",
        seed=seed,
        users=len(users),
        repos=len(repos),
        commits=len(commits),
        files=len(files),
    )
    return Dataset(users=tuple(users), repos=tuple(repos), commits=tuple(commits), files=tuple(files))


def compute_stats(dataset: Dataset) -> Dict[str, Any]:
    """Aggregate counts, recomputed on every call."""
    active_users = sum(1 for u in dataset.users if not u.deleted)
    repos_with_commits = len({c.repo_id for c in dataset.commits})
    languages = list(dict.fromkeys(r.language for r in dataset.repos))

    return {
        "total_users": len(dataset.users),
        "active_users": active_users,
        "deleted_users": len(dataset.users) - active_users,
        "total_repos": len(dataset.repos),
        "repos_with_commits": repos_with_commits,
        "repos_without_commits": len(dataset.repos) - repos_with_commits,
        "total_commits": len(dataset.commits),
        "total_files": len(dataset.files),
        "languages": languages,
    }
