"""
Hard tier: deliberate failures.

Id-based rules are checked first, then the random rolls in the order
empty -> malformed -> server error, so at most one fault fires per call.
"""

import asyncio
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from .. import config
from ..dataset import Dataset
from ..deps import get_dataset, get_faults, lenient_int
from ..faults import (
    FLAKY_MESSAGES,
    RATE_LIMIT_CEILING,
    RETRY_AFTER_SECONDS,
    ConnectionTerminated,
    FaultInjector,
    RateLimited,
    error_body,
    html_error_page,
)
from ..logs import logger
from ..queries import commits_for_repo, get_by_id, paginate, repos_for_user

router = APIRouter(prefix="/api/hard", tags=["Hard"])

PERMITTED_MAX_USER_ID = 15
UNAVAILABLE_DIVISOR = 7
HTML_ERROR_REPO_ID = 13
LOOPING_REPO_ID = 5
LOOPING_PER_PAGE = 5
DEFAULT_PER_PAGE = 10


class TerminatedResponse(Response):
    """Starts a response that promises a body, then aborts.

    ASGI servers cannot drop a socket before the status line, but an
    exception after the response has started makes them close the
    connection, so the client never gets a complete response.
    """

    def __init__(self):
        super().__init__(content=b"", media_type="application/json")
        self.raw_headers = [(b"content-type", b"application/json"), (b"content-length", b"64")]

    async def __call__(self, scope, receive, send):
        await send({"type": "http.response.start", "status": self.status_code, "headers": self.raw_headers})
        raise ConnectionTerminated("Connection reset by mock server")


@router.get("/users")
async def unreliable_users(dataset: Dataset = Depends(get_dataset), faults: FaultInjector = Depends(get_faults)):
    """Users, but sometimes empty (3%), malformed (5%) or a 500 (10%)."""
    if faults.maybe_empty_response():
        logger.event("HARD", "Returning empty response")
        return Response(content=b"", status_code=200)

    malformed = faults.maybe_malformed_payload()
    if malformed:
        logger.event("HARD", "Returning malformed JSON")
        return Response(content=malformed, media_type="application/json")

    error = faults.maybe_server_error()
    if error:
        logger.event("HARD", "Returning 500 error")
        return JSONResponse(error, status_code=500)

    return {"data": dataset.users, "count": len(dataset.users)}

@router.get("/users/{user_id}/repos")
async def guarded_user_repos(user_id: str, dataset: Dataset = Depends(get_dataset), faults: FaultInjector = Depends(get_faults)):
    """429 every 5th call, 404 for deleted/unknown users, 403 above id 15."""
    count = faults.increment_and_get_count()
    if faults.is_rate_limited(count):
        logger.event("HARD", f"Rate limit triggered (request {count})", request_count=count)
        raise RateLimited(headers={
            "Retry-After": str(RETRY_AFTER_SECONDS),
            "X-RateLimit-Limit": str(RATE_LIMIT_CEILING),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(int(time.time()) + RETRY_AFTER_SECONDS),
        })

    # parsed after counting: malformed ids still use up the quota
    try:
        user_id = int(user_id)
    except ValueError:
        raise HTTPException(400, f"user_id must be an integer, got {user_id!r}")

    user = get_by_id(dataset.users, user_id)
    if user is not None and user.deleted:
        logger.event("HARD", f"Returning 404 for deleted user {user_id}", user_id=user_id)
        raise HTTPException(404, f"User {user_id} has been deleted")

    if user_id > PERMITTED_MAX_USER_ID:
        logger.event("HARD", f"Returning 403 for user {user_id}", user_id=user_id)
        raise HTTPException(403, f"You don't have permission to access repos for user {user_id}")

    if user is None:
        raise HTTPException(404, f"User with id {user_id} not found")

    repos = repos_for_user(dataset, user_id)
    return {"data": repos, "count": len(repos)}

@router.get("/repos/{repo_id}/commits")
async def trapped_repo_commits(repo_id: int, page: Optional[str] = Query(None), dataset: Dataset = Depends(get_dataset)):
    """503 for ids divisible by 7, HTML 500 for repo 13, a pagination loop for repo 5."""
    page_num = lenient_int(page, 1)

    if repo_id % UNAVAILABLE_DIVISOR == 0:
        logger.event("HARD", f"Returning 503 for repo {repo_id}", repo_id=repo_id)
        raise HTTPException(503, "The commit service is temporarily unavailable")

    if repo_id == HTML_ERROR_REPO_ID:
        logger.event("HARD", f"Returning HTML error for repo {repo_id}", repo_id=repo_id)
        return HTMLResponse(html_error_page(500, "An unexpected error occurred while fetching commits"), status_code=500)

    commits = commits_for_repo(dataset, repo_id)

    if repo_id == LOOPING_REPO_ID:
        logger.event("HARD", f"Returning infinite loop pagination for repo {repo_id}", repo_id=repo_id, page=page_num)
        return {
            **paginate(commits, page_num, LOOPING_PER_PAGE),
            "next_page": page_num,
            "has_more": True,
            "_warning": "This endpoint intentionally creates an infinite loop for testing",
        }

    paginated = paginate(commits, page_num, DEFAULT_PER_PAGE)
    has_more = paginated["page"] < paginated["total_pages"]
    return {
        **paginated,
        "next_page": paginated["page"] + 1 if has_more else None,
        "has_more": has_more,
    }

@router.get("/deadlink")
async def deadlink():
    """Always 404."""
    logger.event("HARD", "Returning 404 for deadlink")
    raise HTTPException(404, "This resource does not exist and never will")

@router.get("/timeout")
async def timeout():
    """Respond only after the configured timeout (30 s)."""
    delay_ms = config.TIMEOUT_DELAY_MS
    logger.event("HARD", f"Starting {delay_ms}ms delay", delay_ms=delay_ms)
    await asyncio.sleep(delay_ms / 1000)
    logger.event("HARD", "Delay complete, returning response")
    return {"message": f"Response after {delay_ms // 1000} second delay", "delayed_by": delay_ms}

@router.get("/redirect")
async def redirect():
    """301 to the unreliable users endpoint."""
    logger.event("HARD", "Redirecting to /api/hard/users")
    return RedirectResponse(url="/api/hard/users", status_code=301)

@router.get("/flaky")
async def flaky(faults: FaultInjector = Depends(get_faults)):
    """50% success, otherwise 500/502/503 or a dropped connection."""
    outcome = faults.flaky_outcome()
    if outcome == "success":
        return {"success": True, "message": "Lucky you!"}
    if outcome == "terminate":
        logger.event("HARD", "Simulating connection reset")
        return TerminatedResponse()
    return JSONResponse(error_body(outcome, FLAKY_MESSAGES[outcome]), status_code=outcome)

@router.get("/slow")
async def slow(faults: FaultInjector = Depends(get_faults)):
    """Respond after a random 1-10 s delay."""
    delay_ms = faults.slow_delay_ms()
    logger.event("HARD", f"Delaying response by {delay_ms}ms", delay_ms=delay_ms)
    await asyncio.sleep(delay_ms / 1000)
    return {"message": "Slow response", "delayed_by": delay_ms}

# a -> b -> c -> a
CYCLE_NEXT = {"a": "b", "b": "c", "c": "a"}

@router.get("/cycle/a")
async def cycle_a():
    return _cycle_redirect("a")

@router.get("/cycle/b")
async def cycle_b():
    return _cycle_redirect("b")

@router.get("/cycle/c")
async def cycle_c():
    return _cycle_redirect("c")

def _cycle_redirect(step: str):
    target = CYCLE_NEXT[step]
    logger.event("HARD", f"Cycle redirect: {step} -> {target}")
    return RedirectResponse(url=f"/api/hard/cycle/{target}", status_code=302)
