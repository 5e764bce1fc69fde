"""
Fault injection.

Counter-based faults are exact (every 5th call is rate limited). Random
faults are deliberately not reproducible: the injector draws from an
unseeded random.Random unless one is handed in.

Id-based rules (deleted users, repo 13, ids divisible by 7, ...) live in the
route handlers and are checked before any roll here.
"""

import random
import threading
from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import HTTPException

from . import config

RATE_LIMIT_EVERY = 5
RATE_LIMIT_CEILING = 100
RETRY_AFTER_SECONDS = 2

SERVER_ERROR_PROBABILITY = 0.10
MALFORMED_PROBABILITY = 0.05
EMPTY_PROBABILITY = 0.03

# Missing closing brackets; json.loads must reject it.
MALFORMED_PAYLOAD = '{"data": [{"id": 1, "name": "broken"'

# (upper bound of roll, outcome)
FLAKY_OUTCOMES = [
    (0.50, "success"),
    (0.65, 500),
    (0.80, 502),
    (0.90, 503),
    (1.00, "terminate"),
]

FLAKY_MESSAGES = {
    500: "Random failure",
    502: "Upstream error",
    503: "Try again later",
}


class ConnectionTerminated(Exception):
    """Raised mid-response to make the server drop the connection."""


class RateLimited(HTTPException):
    def __init__(self, retry_after: int = RETRY_AFTER_SECONDS, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=429,
            detail="Rate limit exceeded. Please retry after the specified time.",
            headers=headers,
        )
        self.retry_after = retry_after


def error_body(status_code: int, message: str, **extra) -> Dict[str, Any]:
    body = {
        "statusCode": int(status_code),
        "error": HTTPStatus(status_code).phrase,
        "message": message,
    }
    body.update(extra)
    return body


def html_error_page(status_code: int, message: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <title>Error {status_code}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 40px; }}
    h1 {{ color: #c00; }}
    .error-code {{ font-size: 72px; color: #999; }}
  </style>
</head>
<body>
  <div class="error-code">{status_code}</div>
  <h1>Service Error</h1>
  <p>{message}</p>
  <p>Please try again later.</p>
</body>
</html>"""


class RequestCounter:
    """Monotonic counter; increment and read happen under one lock."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def increment_and_get(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def reset(self):
        with self._lock:
            self._value = 0


class FaultInjector:
    def __init__(self, rng: Optional[random.Random] = None, counter: Optional[RequestCounter] = None):
        self.rng = rng or random.Random()
        self.counter = counter or RequestCounter()

    # --- counter-based ---
    def increment_and_get_count(self) -> int:
        return self.counter.increment_and_get()

    def is_rate_limited(self, count: Optional[int] = None) -> bool:
        if count is None:
            count = self.counter.value
        return count % RATE_LIMIT_EVERY == 0

    def reset(self):
        self.counter.reset()

    # --- probabilistic ---
    def maybe_server_error(self, p: float = SERVER_ERROR_PROBABILITY) -> Optional[Dict[str, Any]]:
        if self.rng.random() < p:
            return error_body(500, "Random server failure for testing")
        return None

    def maybe_malformed_payload(self, p: float = MALFORMED_PROBABILITY) -> Optional[str]:
        if self.rng.random() < p:
            return MALFORMED_PAYLOAD
        return None

    def maybe_empty_response(self, p: float = EMPTY_PROBABILITY) -> bool:
        return self.rng.random() < p

    def flaky_outcome(self):
        """'success', 500, 502, 503 or 'terminate'."""
        roll = self.rng.random()
        for bound, outcome in FLAKY_OUTCOMES:
            if roll < bound:
                return outcome
        return FLAKY_OUTCOMES[-1][1]

    def slow_delay_ms(self) -> int:
        return self.rng.randint(config.SLOW_MIN_MS, config.SLOW_MAX_MS)
