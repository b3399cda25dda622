"""
Pytest configuration and shared fixtures.
"""

import random

import pytest

from roadsmq_core.engine.clock import ManualClock
from roadsmq_core.queue.client import QueueClient
from roadsmq_core.queue.ids import MessageIdGenerator
from roadsmq_core.storage.memory import MemoryBackend


@pytest.fixture
def clock() -> ManualClock:
    """Clock that only moves when a test advances it."""
    return ManualClock(start=1_700_000_000.0)


@pytest.fixture
def backend(clock: ManualClock) -> MemoryBackend:
    """In-process backend driven by the manual clock."""
    return MemoryBackend(namespace="rsmq", clock=clock)


@pytest.fixture
def client(backend: MemoryBackend) -> QueueClient:
    """Queue client with reproducible message ids."""
    return QueueClient(
        backend=backend,
        id_generator=MessageIdGenerator(random.Random(42)),
    )


@pytest.fixture
def queue(client: QueueClient) -> str:
    """A queue named "q" with default attributes."""
    client.create_queue("q")
    return "q"
