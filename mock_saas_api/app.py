"""
Mock SaaS API server.

- Three tiers under /api/easy, /api/medium and /api/hard, docs under /api/docs.
- The dataset is generated once, here, before the first request is served.
- All logs go to stdout as structured JSON lines.

Run: python -m mock_saas_api.app
Example: curl -i http://localhost:8000/api/medium/users/1/repos
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, config
from .dataset import Dataset, build_dataset
from .faults import ConnectionTerminated, FaultInjector, RateLimited, error_body
from .logs import LoggingMiddleware, logger
from .routes import docs, easy, hard, medium

DESCRIPTION = "A mock API server for testing dynamic crawling with three tiers of complexity."

OPENAPI_TAGS = [
    {"name": "Easy", "description": "Static endpoints with no parameters required"},
    {"name": "Medium", "description": "Dynamic endpoints with pagination and parameter extraction"},
    {"name": "Hard", "description": "Endpoints with deliberate errors and edge cases"},
]


def create_app(dataset: Optional[Dataset] = None, faults: Optional[FaultInjector] = None) -> FastAPI:
    app = FastAPI(
        title="Mock SaaS API",
        version=__version__,
        description=DESCRIPTION,
        openapi_url="/api/docs",
        openapi_tags=OPENAPI_TAGS,
        docs_url=None,
        redoc_url=None,
    )
    app.state.dataset = dataset or build_dataset(config.MOCK_SEED, config.MOCK_EPOCH)
    app.state.faults = faults or FaultInjector()

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.add_api_route("/", root, methods=["GET"], include_in_schema=False)
    app.add_api_route("/health", health, methods=["GET"], include_in_schema=False)
    app.include_router(easy.router)
    app.include_router(medium.router)
    app.include_router(hard.router)
    app.include_router(docs.router)
    return app


# --- Error handling ---
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 404 and message == HTTPStatus.NOT_FOUND.phrase:
        # no route matched
        message = f"Route {request.method} {request.url.path} not found"
    extra = {"retry_after": exc.retry_after} if isinstance(exc, RateLimited) else {}
    return JSONResponse(error_body(exc.status_code, message, **extra), status_code=exc.status_code, headers=exc.headers)

async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = ["{}: {}".format(".".join(str(p) for p in e["loc"]), e["msg"]) for e in exc.errors()]
    return JSONResponse(error_body(400, "; ".join(problems)), status_code=400)

async def unhandled_error_handler(request: Request, exc: Exception):
    # Also reached for ConnectionTerminated; the response has already
    # started then, so this body is never sent.
    if not isinstance(exc, ConnectionTerminated):
        logger.error(f"Error: {exc}", path=request.url.path)
    return JSONResponse(error_body(500, str(exc)), status_code=500)


# --- Root ---
async def root():
    """Service index."""
    return {
        "name": "Mock SaaS API",
        "version": __version__,
        "description": DESCRIPTION,
        "tiers": {
            "easy": "/api/easy/*",
            "medium": "/api/medium/*",
            "hard": "/api/hard/*",
        },
        "documentation": {
            "openapi": "/api/docs",
            "ui": "/api/docs/ui",
        },
    }

async def health():
    """Health check."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


app = create_app()

# --- Main ---
def main():
    import uvicorn
    logger.event("BOOT", "Starting Mock SaaS API", **config.get_env_vars())
    uvicorn.run(app, host="0.0.0.0", port=config.PORT, log_level=config.LOG_LEVEL)

if __name__ == "__main__":
    main()
