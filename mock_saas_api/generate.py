"""
Entity generators.

Each generator takes a seeded Faker instance plus the ids it needs and
returns one record. Generators never look at the rest of the dataset;
wiring ids together is the builder's job (see dataset.py).
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from faker import Faker

from . import config
from .models import Commit, File, Repo, User

ROLES = ["admin", "member", "viewer", "contributor"]
TECH_WORDS = ["api", "sdk", "cli", "lib", "core", "hub", "flow", "sync", "data", "cloud"]
REPO_SUFFIXES = ["js", "go", "rs", "py", "service", "server", "client", "kit", "tools", "utils"]
LANGUAGES = ["JavaScript", "TypeScript", "Python", "Go", "Rust", "Java", "Ruby"]
COMMIT_TYPES = ["feat", "fix", "docs", "style", "refactor", "test", "chore", "perf"]
COMMIT_SCOPES = ["api", "ui", "core", "auth", "db", "config", "build", "deps"]
EXTENSIONS = [".js", ".ts", ".py", ".go", ".rs", ".json", ".md", ".yml"]
DIRECTORIES = ["src", "lib", "pkg", "internal", "cmd", "api", "utils", "config"]

CONTENT_TYPES = {
    ".js": "application/javascript",
    ".ts": "application/typescript",
    ".py": "text/x-python",
    ".go": "text/x-go",
    ".rs": "text/x-rust",
    ".json": "application/json",
    ".md": "text/markdown",
    ".yml": "text/yaml",
}

FILE_CONTENT_LINES = 50


def seeded_faker(seed: int) -> Faker:
    """Independent Faker whose draws depend only on seed and draw order."""
    fake = Faker()
    fake.seed_instance(seed)
    return fake


def file_content_seed(file_id: int) -> int:
    return file_id * 1000


def download_url(file_id: int) -> str:
    return f"/api/medium/files/{file_id}/download"


def content_type_for(ext: str) -> str:
    return CONTENT_TYPES.get(ext, "text/plain")


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _past(fake: Faker, days: int, epoch: Optional[datetime]) -> str:
    end = epoch or config.MOCK_EPOCH
    start = end - timedelta(days=days)
    return _iso(fake.date_time_between(start_date=start, end_date=end, tzinfo=timezone.utc))


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9._]", "", text.lower())


def generate_user(fake: Faker, user_id: int, deleted: bool = False, epoch: Optional[datetime] = None) -> User:
    first_name = fake.first_name()
    last_name = fake.last_name()
    separator = fake.random_element(elements=[".", "_", ""])
    username = _slug(f"{first_name}{separator}{last_name}{fake.random_int(min=0, max=99)}")
    email = f"{_slug(first_name)}.{_slug(last_name)}@{fake.free_email_domain()}"

    return User(
        id=user_id,
        username=username,
        email=email,
        name=f"{first_name} {last_name}",
        created_at=_past(fake, 3 * 365, epoch),
        role=fake.random_element(elements=ROLES),
        deleted=deleted,
        avatar_url=f"https://avatars.example.com/{username}.png",
    )


def generate_repo(fake: Faker, repo_id: int, owner_id: int, epoch: Optional[datetime] = None) -> Repo:
    name = f"{fake.random_element(elements=TECH_WORDS)}-{fake.random_element(elements=REPO_SUFFIXES)}"

    return Repo(
        id=repo_id,
        name=f"{name}-{repo_id}",
        owner_id=owner_id,
        description=fake.sentence(),
        created_at=_past(fake, 2 * 365, epoch),
        stars=fake.random_int(min=0, max=5000),
        language=fake.random_element(elements=LANGUAGES),
        is_private=fake.boolean(chance_of_getting_true=20),
        default_branch="main",
    )


def generate_commit(fake: Faker, commit_id: int, repo_id: int, author_id: int, epoch: Optional[datetime] = None) -> Commit:
    commit_type = fake.random_element(elements=COMMIT_TYPES)
    scope = fake.random_element(elements=COMMIT_SCOPES)

    return Commit(
        id=commit_id,
        repo_id=repo_id,
        author_id=author_id,
        message=f"{commit_type}({scope}): {fake.bs()}",
        timestamp=_past(fake, 365, epoch),
        sha=fake.sha1(),
        additions=fake.random_int(min=1, max=500),
        deletions=fake.random_int(min=0, max=200),
    )


def generate_file(fake: Faker, file_id: int, repo_id: int, epoch: Optional[datetime] = None) -> File:
    ext = fake.random_element(elements=EXTENSIONS)
    directory = fake.random_element(elements=DIRECTORIES)

    return File(
        id=file_id,
        repo_id=repo_id,
        filename=f"{directory}/{fake.word()}{ext}",
        size=fake.random_int(min=100, max=10000),
        download_url=download_url(file_id),
        content_type=content_type_for(ext),
        last_modified=_past(fake, 30, epoch),
    )


def generate_file_content(file_id: int) -> str:
    """Body text for a file download, identical on every call for the same id.

    Uses its own child stream, so downloads never shift any other generation.
    """
    fake = seeded_faker(file_content_seed(file_id))
    lines = [f"// File ID: {file_id}", "// Generated content for testing\n"]
    for i in range(FILE_CONTENT_LINES):
        if i % 10 == 0:
            lines.append(f"\n// Section {i // 10 + 1}")
        lines.append(f'const value_{i} = "{fake.sentence()}";')
    lines.append("\n// End of file")
    return "\n".join(lines)
