import json
import time
import uuid
import logging
from datetime import datetime, timezone

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class StructuredLogger:
    """Writes one JSON object per line to stdout."""

    def __init__(self):
        self.logger = logging.getLogger("uvicorn.error")
        self.logger.setLevel(logging.INFO)

    def log(self, ts, method, path, status, latency_ms, user_agent, req_id):
        log_obj = {
            "ts": ts,
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "user_agent": user_agent,
            "req_id": req_id,
        }
        self._emit(log_obj)

    def event(self, tag, msg, **fields):
        """Tagged application event, e.g. EXTRACTION or HARD."""
        log_obj = {"ts": datetime.now(timezone.utc).isoformat(), "tag": tag, "msg": msg}
        log_obj.update(fields)
        self._emit(log_obj)

    def error(self, msg, **fields):
        self.logger.error(msg)
        self.event("ERROR", msg, **fields)

    def _emit(self, log_obj):
        print(json.dumps(log_obj, default=str), flush=True)

logger = StructuredLogger()


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        req_id = request.headers.get("X-Req-Id") or str(uuid.uuid4())
        response = await call_next(request)
        latency_ms = int((time.time() - start) * 1000)
        ts = datetime.now(timezone.utc).isoformat()
        user_agent = request.headers.get("user-agent", "")
        logger.log(ts, request.method, request.url.path, response.status_code, latency_ms, user_agent, req_id)
        return response
