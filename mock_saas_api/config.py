"""
Process configuration.

All values come from environment variables and are read once at import.
Tests override them by patching the module attributes.
"""

import os
from datetime import datetime

# --- Server ---
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

# --- Dataset ---
MOCK_SEED = int(os.getenv("MOCK_SEED", "42"))
# Timestamps are drawn relative to this instant, not the wall clock,
# so two builds with the same seed are identical.
MOCK_EPOCH = datetime.fromisoformat(os.getenv("MOCK_EPOCH", "2025-01-01T00:00:00+00:00"))

# --- Artificial latency ---
TIMEOUT_DELAY_MS = int(os.getenv("TIMEOUT_DELAY_MS", "30000"))
SLOW_MIN_MS = int(os.getenv("SLOW_MIN_MS", "1000"))
SLOW_MAX_MS = int(os.getenv("SLOW_MAX_MS", "9999"))


def get_env_vars():
    return {
        "PORT": PORT,
        "LOG_LEVEL": LOG_LEVEL,
        "MOCK_SEED": MOCK_SEED,
        "MOCK_EPOCH": MOCK_EPOCH.isoformat(),
        "TIMEOUT_DELAY_MS": TIMEOUT_DELAY_MS,
        "SLOW_MIN_MS": SLOW_MIN_MS,
        "SLOW_MAX_MS": SLOW_MAX_MS,
    }
