"""Shared fixtures for the mock API test suite."""

import random

import pytest
from fastapi.testclient import TestClient

from mock_saas_api.app import create_app
from mock_saas_api.dataset import build_dataset
from mock_saas_api.faults import FaultInjector


class ScriptedRandom(random.Random):
    """random() returns the queued rolls in order, then 0.99 (no fault)."""

    def __init__(self, rolls=()):
        super().__init__(0)
        self.rolls = list(rolls)

    def random(self):
        return self.rolls.pop(0) if self.rolls else 0.99


@pytest.fixture(scope="session")
def dataset():
    """One dataset for the whole run; it is immutable."""
    return build_dataset(42)


@pytest.fixture
def scripted():
    return ScriptedRandom()


@pytest.fixture
def faults(scripted):
    """Fresh injector per test so the request counter starts at 0."""
    return FaultInjector(rng=scripted)


@pytest.fixture
def client(dataset, faults):
    with TestClient(create_app(dataset=dataset, faults=faults)) as c:
        yield c
