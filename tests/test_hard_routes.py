"""Tests for the hard tier: injected faults, traps and redirects."""

import json
import socket
import threading
import time

import httpx
import pytest
import uvicorn

from conftest import ScriptedRandom
from mock_saas_api import config
from mock_saas_api.app import create_app
from mock_saas_api.faults import FaultInjector


# ── Unreliable users ────────────────────────────────────────────────────────


def test_users_normal(client):
    resp = client.get("/api/hard/users")
    assert resp.status_code == 200
    assert resp.json()["count"] == 20


def test_users_empty_body(client, scripted):
    scripted.rolls = [0.01]
    resp = client.get("/api/hard/users")
    assert resp.status_code == 200
    assert resp.content == b""


def test_users_malformed_json(client, scripted):
    scripted.rolls = [0.5, 0.01]
    resp = client.get("/api/hard/users")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    with pytest.raises(json.JSONDecodeError):
        json.loads(resp.text)


def test_users_server_error(client, scripted):
    scripted.rolls = [0.5, 0.5, 0.05]
    resp = client.get("/api/hard/users")
    assert resp.status_code == 500
    assert resp.json() == {
        "statusCode": 500,
        "error": "Internal Server Error",
        "message": "Random server failure for testing",
    }


# ── Guarded user repos ──────────────────────────────────────────────────────


def test_every_fifth_request_is_rate_limited(client):
    statuses = [client.get("/api/hard/users/1/repos").status_code for _ in range(15)]
    assert [i + 1 for i, s in enumerate(statuses) if s == 429] == [5, 10, 15]
    assert all(s == 200 for i, s in enumerate(statuses) if (i + 1) % 5)


def test_rate_limit_response(client):
    for _ in range(4):
        client.get("/api/hard/users/1/repos")
    resp = client.get("/api/hard/users/1/repos")
    assert resp.status_code == 429
    assert resp.headers["retry-after"] == "2"
    assert resp.headers["x-ratelimit-remaining"] == "0"
    body = resp.json()
    assert body["retry_after"] == 2
    assert body["statusCode"] == 429
    assert body["error"] == "Too Many Requests"


def test_rate_limit_comes_before_id_rules(client):
    for _ in range(4):
        client.get("/api/hard/users/18/repos")
    assert client.get("/api/hard/users/18/repos").status_code == 429


@pytest.mark.parametrize("user_id, status", [(18, 404), (16, 403), (20, 403), (21, 403), (0, 404), (-2, 404)])
def test_user_repos_id_rules(client, user_id, status):
    assert client.get(f"/api/hard/users/{user_id}/repos").status_code == status


def test_non_numeric_user_id_counts_toward_rate_limit(client):
    statuses = [client.get("/api/hard/users/abc/repos").status_code for _ in range(4)]
    assert statuses == [400] * 4
    assert client.get("/api/hard/users/1/repos").status_code == 429


def test_non_numeric_user_id_error_body(client):
    body = client.get("/api/hard/users/abc/repos").json()
    assert body["statusCode"] == 400
    assert body["error"] == "Bad Request"
    assert "abc" in body["message"]


def test_user_repos_normal(client):
    body = client.get("/api/hard/users/1/repos").json()
    assert [r["id"] for r in body["data"]] == [15, 30, 45]
    assert body["count"] == 3


# ── Trapped repo commits ────────────────────────────────────────────────────


@pytest.mark.parametrize("repo_id", [7, 14, 21, 49])
def test_unavailable_repos(client, repo_id):
    resp = client.get(f"/api/hard/repos/{repo_id}/commits")
    assert resp.status_code == 503
    assert resp.json()["error"] == "Service Unavailable"


def test_html_error_repo(client):
    resp = client.get("/api/hard/repos/13/commits")
    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("text/html")
    assert "<html>" in resp.text
    with pytest.raises(json.JSONDecodeError):
        json.loads(resp.text)


def test_infinite_pagination_repo(client):
    body = client.get("/api/hard/repos/5/commits", params={"page": 1}).json()
    assert body["next_page"] == 1
    assert body["has_more"] is True
    assert body["per_page"] == 5
    for _ in range(3):
        body = client.get("/api/hard/repos/5/commits", params={"page": body["next_page"]}).json()
        assert body["next_page"] == 1
        assert body["has_more"] is True


def test_infinite_pagination_echoes_any_page(client):
    body = client.get("/api/hard/repos/5/commits", params={"page": 40}).json()
    assert body["data"] == []
    assert body["next_page"] == 40


def test_normal_repo_commits(client):
    body = client.get("/api/hard/repos/1/commits").json()
    assert body["per_page"] == 10
    assert body["total"] == 4
    assert body["next_page"] is None
    assert body["has_more"] is False


def test_repo_without_commits(client):
    body = client.get("/api/hard/repos/50/commits").json()
    assert body["data"] == []
    assert body["total_pages"] == 0
    assert body["has_more"] is False


# ── Flaky ───────────────────────────────────────────────────────────────────


def test_flaky_success(client, scripted):
    scripted.rolls = [0.1]
    assert client.get("/api/hard/flaky").json() == {"success": True, "message": "Lucky you!"}


@pytest.mark.parametrize("roll, status", [(0.6, 500), (0.7, 502), (0.85, 503)])
def test_flaky_errors(client, scripted, roll, status):
    scripted.rolls = [roll]
    resp = client.get("/api/hard/flaky")
    assert resp.status_code == status
    assert resp.json()["statusCode"] == status


@pytest.fixture
def live_server(dataset):
    """Real uvicorn server on an ephemeral port; yields (base_url, rng)."""
    rng = ScriptedRandom()
    app = create_app(dataset=dataset, faults=FaultInjector(rng=rng))
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]

    server = uvicorn.Server(uvicorn.Config(app, log_level="critical"))
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()
    deadline = time.monotonic() + 10
    while not server.started:
        assert time.monotonic() < deadline, "server did not start"
        time.sleep(0.05)

    yield f"http://127.0.0.1:{port}", rng

    server.should_exit = True
    thread.join(timeout=10)
    sock.close()


@pytest.mark.parametrize("encoding", ["identity", "gzip"])
def test_flaky_terminates_connection(live_server, encoding):
    """The terminate band leaves the client without a usable response."""
    base_url, rng = live_server
    rng.rolls = [0.95]
    with httpx.Client(trust_env=False, timeout=5) as http:
        with pytest.raises(httpx.RemoteProtocolError):
            http.get(f"{base_url}/api/hard/flaky", headers={"Accept-Encoding": encoding})


def test_live_server_serves_normally(live_server):
    base_url, rng = live_server
    rng.rolls = [0.1]
    with httpx.Client(trust_env=False, timeout=5) as http:
        resp = http.get(f"{base_url}/api/hard/flaky")
    assert resp.json() == {"success": True, "message": "Lucky you!"}


# ── Delays ──────────────────────────────────────────────────────────────────


def test_timeout(client, monkeypatch):
    monkeypatch.setattr(config, "TIMEOUT_DELAY_MS", 0)
    body = client.get("/api/hard/timeout").json()
    assert body["delayed_by"] == 0


def test_slow(client, monkeypatch):
    monkeypatch.setattr(config, "SLOW_MIN_MS", 1)
    monkeypatch.setattr(config, "SLOW_MAX_MS", 3)
    body = client.get("/api/hard/slow").json()
    assert body["message"] == "Slow response"
    assert 1 <= body["delayed_by"] <= 3


# ── Redirects & dead links ──────────────────────────────────────────────────


def test_redirect(client):
    resp = client.get("/api/hard/redirect", follow_redirects=False)
    assert resp.status_code == 301
    assert resp.headers["location"] == "/api/hard/users"


@pytest.mark.parametrize("step, target", [("a", "b"), ("b", "c"), ("c", "a")])
def test_cycle_steps(client, step, target):
    resp = client.get(f"/api/hard/cycle/{step}", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == f"/api/hard/cycle/{target}"


def test_cycle_never_resolves(client):
    with pytest.raises(httpx.TooManyRedirects):
        client.get("/api/hard/cycle/a")


def test_deadlink(client):
    resp = client.get("/api/hard/deadlink")
    assert resp.status_code == 404
    assert resp.json()["message"] == "This resource does not exist and never will"
