import html

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/api/docs", include_in_schema=False)

# The OpenAPI JSON itself is served by FastAPI at /api/docs (see app.py).

TIERS = [
    {
        "key": "easy",
        "title": "Easy Tier",
        "blurb": "Static data, no parameters required. All endpoints return complete datasets.",
        "endpoints": [
            {"path": "/api/easy/users", "desc": "Returns all 20 users"},
            {"path": "/api/easy/repos", "desc": "Returns all 50 repos"},
            {"path": "/api/easy/commits", "desc": "Returns all 200 commits"},
            {"path": "/api/easy/stats", "desc": "Summary statistics"},
        ],
    },
    {
        "key": "medium",
        "title": "Medium Tier",
        "blurb": "Dynamic parameters, pagination, and values to extract for chained requests.",
        "endpoints": [
            {"path": "/api/medium/users?page=1&per_page=10", "desc": "Paginated users"},
            {"path": "/api/medium/users/1", "desc": "Single user with repo and commit counts (410 if deleted)"},
            {"path": "/api/medium/users/1/repos", "desc": "Repos for a user", "tag": "extraction"},
            {"path": "/api/medium/repos/1", "desc": "Single repo with contributor stats"},
            {"path": "/api/medium/repos/1/commits?page=1", "desc": "Paginated commits for a repo", "tag": "extraction"},
            {"path": "/api/medium/repos/1/files", "desc": "File metadata for a repo", "tag": "extraction"},
            {"path": "/api/medium/files/1/download", "desc": "Download file content (text/plain)"},
            {"path": "/api/medium/commits/&lt;sha&gt;", "desc": "Commit by SHA or SHA prefix"},
        ],
    },
    {
        "key": "hard",
        "title": "Hard Tier",
        "blurb": "Deliberate errors, traps and edge cases.",
        "endpoints": [
            {"path": "/api/hard/users", "desc": "3% empty body, 5% malformed JSON, 10% HTTP 500", "tag": "error"},
            {"path": "/api/hard/users/1/repos", "desc": "429 every 5th request, 404 deleted user, 403 for id &gt; 15", "tag": "error"},
            {"path": "/api/hard/repos/1/commits", "desc": "503 for id % 7 == 0, HTML 500 for repo 13, endless next_page for repo 5", "tag": "error"},
            {"path": "/api/hard/deadlink", "desc": "Always 404", "tag": "error"},
            {"path": "/api/hard/timeout", "desc": "Responds after 30 seconds", "tag": "error"},
            {"path": "/api/hard/redirect", "desc": "301 to /api/hard/users"},
            {"path": "/api/hard/flaky", "desc": "50% success, otherwise 500/502/503 or connection reset", "tag": "error"},
            {"path": "/api/hard/slow", "desc": "Responds after 1-10 seconds"},
            {"path": "/api/hard/cycle/a", "desc": "Redirect cycle a -&gt; b -&gt; c -&gt; a", "tag": "error"},
        ],
    },
]


def render_endpoint(base_url, endpoint):
    tag = endpoint.get("tag")
    tag_html = f'<span class="tag tag-{tag}">{tag}</span>' if tag else ""
    return f"""
      <div class="endpoint">
        <span class="method get">GET</span>
        <span class="path">{endpoint['path']}</span>{tag_html}
        <div class="description">{endpoint['desc']}</div>
        <pre>curl -i {html.escape(base_url)}{endpoint['path']}</pre>
      </div>"""


@router.get("/ui", response_class=HTMLResponse)
async def docs_ui(request: Request):
    """Endpoint list grouped by tier."""
    base_url = str(request.base_url).rstrip("/")
    sections = []
    for tier in TIERS:
        endpoints = "".join(render_endpoint(base_url, e) for e in tier["endpoints"])
        sections.append(f"""
    <div class="tier tier-{tier['key']}">
      <h2>{tier['title']}</h2>
      <p>{tier['blurb']}</p>{endpoints}
    </div>""")

    page = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Mock API Documentation</title>
  <style>
    body {{ font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; max-width: 1100px; margin: 0 auto; padding: 20px; background: #f5f5f5; }}
    h1 {{ color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px; }}
    .tier {{ background: white; padding: 20px; margin: 20px 0; border-radius: 8px; }}
    .tier-easy {{ border-left: 4px solid #28a745; }}
    .tier-medium {{ border-left: 4px solid #ffc107; }}
    .tier-hard {{ border-left: 4px solid #dc3545; }}
    .endpoint {{ background: #f8f9fa; padding: 12px; margin: 10px 0; border-radius: 4px; }}
    .method {{ padding: 2px 8px; border-radius: 4px; font-weight: bold; margin-right: 10px; }}
    .get {{ background: #28a745; color: white; }}
    .path {{ font-family: monospace; }}
    .description {{ color: #666; margin-top: 5px; }}
    pre {{ background: #2d2d2d; color: #f8f8f2; padding: 10px; border-radius: 4px; overflow-x: auto; }}
    .tag {{ padding: 2px 8px; border-radius: 12px; font-size: 12px; margin-left: 10px; color: white; }}
    .tag-extraction {{ background: #17a2b8; }}
    .tag-error {{ background: #dc3545; }}
  </style>
</head>
<body>
  <h1>Mock SaaS API Documentation</h1>
  <p>A mock API server for testing dynamic crawling with three tiers of complexity.</p>
  <p><a href="/api/docs">View OpenAPI JSON Spec</a></p>
  {''.join(sections)}
</body>
</html>
"""
    return HTMLResponse(content=page)
