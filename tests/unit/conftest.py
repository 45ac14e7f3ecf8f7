"""Pytest configuration and fixtures for unit tests."""

import random

import pytest

from src.services.task_store import TaskStore
from tests.unit.mocks import FixedClock, RecordingPersistence


@pytest.fixture
def clock():
    """Clock fixed at Friday 2024-01-05 08:30."""
    return FixedClock()


@pytest.fixture
def persistence():
    """Provides a fresh recording in-memory persistence port for each test."""
    return RecordingPersistence()


@pytest.fixture
def store(persistence, clock):
    """Empty task store wired to the fixed clock and a seeded RNG."""
    return TaskStore(persistence=persistence, clock=clock, rng=random.Random(7))
