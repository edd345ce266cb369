"""
Test configuration and fixtures
"""

import pytest

from message_search import MessageSearchEngine
from message_search.search.message_normalizer import normalize_message


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def sample_messages():
    """Two-message conversation used across scenarios."""
    return [
        {"id": "m1", "content": "hello world", "sender": "alice"},
        {"id": "m2", "content": "goodbye", "sender": "bob"},
    ]


@pytest.fixture
def rich_messages():
    """Messages covering metadata, types and timestamps."""
    return [
        {
            "id": "r1",
            "content": "Deploying the payment service to staging",
            "sender": "alice",
            "timestamp": "2024-01-10T09:00:00Z",
        },
        {
            "id": "r2",
            "content": "Attached the quarterly report for review",
            "role": "user",
            "timestamp": "2024-02-15T12:30:00Z",
            "attachment": {"name": "report.pdf", "type": "application/pdf"},
        },
        {
            "id": "r3",
            "content": "Session restarted",
            "type": "system",
            "createdAt": "2024-03-01T08:00:00Z",
        },
        {
            "id": "r4",
            "content": "Running the migration command now",
            "sender": "assistant",
            "command": "alembic upgrade head",
            "tool": "bash",
            "project": "billing",
            "timestamp": "2024-03-05T17:45:00Z",
        },
    ]


@pytest.fixture
def indexed_messages(rich_messages):
    """Normalized versions of rich_messages."""
    return [normalize_message(message) for message in rich_messages]


@pytest.fixture
def engine():
    """Create an engine and stop its sweeper after the test."""
    search_engine = MessageSearchEngine()
    yield search_engine
    search_engine.destroy()


@pytest.fixture
def indexed_engine(engine, sample_messages):
    """Engine with session s1 indexed from sample_messages."""
    engine.index_messages("s1", sample_messages)
    return engine
