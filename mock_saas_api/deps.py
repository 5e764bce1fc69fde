"""Request-scoped access to the shared dataset and fault injector."""

from typing import Optional

from fastapi import Request

from .dataset import Dataset
from .faults import FaultInjector


def get_dataset(request: Request) -> Dataset:
    return request.app.state.dataset


def get_faults(request: Request) -> FaultInjector:
    return request.app.state.faults


def lenient_int(value: Optional[str], default: int, minimum: Optional[int] = None) -> int:
    """Parse a query value, falling back to default when missing, non-numeric or zero.

    Values below minimum (when given) also fall back to default.
    """
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed or default
