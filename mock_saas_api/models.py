from pydantic import BaseModel, ConfigDict


# --- Models ---
class Record(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int


class User(Record):
    username: str
    email: str
    name: str
    created_at: str
    role: str
    deleted: bool = False
    avatar_url: str


class Repo(Record):
    name: str
    # May point at a deleted user (46-47) or at no user at all (48-50).
    owner_id: int
    description: str
    created_at: str
    stars: int
    language: str
    is_private: bool
    default_branch: str = "main"


class Commit(Record):
    repo_id: int
    author_id: int
    message: str
    timestamp: str
    sha: str
    additions: int
    deletions: int


class File(Record):
    repo_id: int
    filename: str
    size: int
    download_url: str
    content_type: str
    last_modified: str
