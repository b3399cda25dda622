"""
Unit tests for the in-process storage backend.
"""

import pytest

from roadsmq_core.engine.clock import ManualClock, Timestamp
from roadsmq_core.storage.backend import command
from roadsmq_core.storage.memory import MemoryBackend


class TestKeyLayout:
    """Tests for key and channel naming."""

    def test_keys_use_namespace(self):
        """Test every key is prefixed with the namespace."""
        backend = MemoryBackend(namespace="app")
        assert backend.queue_key("jobs") == "app:jobs"
        assert backend.config_key("jobs") == "app:jobs:Q"
        assert backend.registry_key() == "app:QUEUES"
        assert backend.realtime_channel("jobs") == "app:rt:jobs"


class TestCommands:
    """Tests for Redis-compatible command replies."""

    def test_time_reads_injected_clock(self, backend, clock):
        """Test TIME reflects the clock."""
        clock.set(Timestamp(seconds=50, microseconds=7))
        assert backend.read("time") == (50, 7)
        assert backend.current_time() == Timestamp(50, 7)

    def test_hash_commands(self, backend):
        """Test hash set, get and delete."""
        assert backend.read("hsetnx", "h", "a", 1) == 1
        assert backend.read("hsetnx", "h", "a", 2) == 0
        assert backend.read("hset", "h", "b", "x") == 1
        assert backend.read("hget", "h", "a") == "1"
        assert backend.read("hmget", "h", ["a", "b", "c"]) == ["1", "x", None]
        assert backend.read("hincrby", "h", "n", 5) == 5
        assert backend.read("hlen", "h") == 3
        assert backend.read("hdel", "h", "a", "b", "n", "missing") == 3
        assert backend.read("exists", "h") == 0

    def test_sorted_set_orders_by_score_then_member(self, backend):
        """Test ties on score are broken by member."""
        backend.read("zadd", "z", {"b": 10, "a": 10, "c": 5})
        assert backend.read("zrangebyscore", "z", "-inf", "+inf") == ["c", "a", "b"]
        assert backend.read("zrangebyscore", "z", "-inf", 10, 0, 1) == ["c"]
        assert backend.read("zrangebyscore", "z", 6, "+inf", 1, 1) == ["b"]

    def test_sorted_set_bounds_are_inclusive(self, backend):
        """Test ZCOUNT includes both bounds."""
        backend.read("zadd", "z", {"a": 1, "b": 2, "c": 3})
        assert backend.read("zcount", "z", 2, 3) == 2
        assert backend.read("zcount", "z", 2, "+inf") == 2
        assert backend.read("zcard", "z") == 3

    def test_zadd_updates_existing_member(self, backend):
        """Test re-adding a member moves it without counting it as new."""
        assert backend.read("zadd", "z", {"a": 1}) == 1
        assert backend.read("zadd", "z", {"a": 9}) == 0
        assert backend.read("zscore", "z", "a") == 9

    def test_set_commands(self, backend):
        """Test set add, remove and members."""
        assert backend.read("sadd", "s", "x", "y") == 2
        assert backend.read("sadd", "s", "x") == 0
        assert backend.read("srem", "s", "x", "z") == 1
        assert backend.read("smembers", "s") == {"y"}

    def test_delete_counts_keys(self, backend):
        """Test DEL reports the number of existing keys removed."""
        backend.read("hset", "h", "a", 1)
        backend.read("zadd", "z", {"a": 1})
        assert backend.read("delete", "h", "z", "nope") == 2
        assert backend.read("exists", "h", "z") == 0

    def test_unknown_command(self, backend):
        """Test unsupported commands are refused."""
        with pytest.raises(ValueError):
            backend.read("lpush", "l", "x")


class TestBatchesAndNotifications:
    """Tests for batches and publish/subscribe."""

    def test_atomic_batch_returns_replies_in_order(self, backend):
        """Test one reply per command."""
        replies = backend.atomic_batch([
            command("hsetnx", "h", "a", 1),
            command("hsetnx", "h", "a", 1),
            command("hget", "h", "a"),
        ])
        assert replies == [1, 0, "1"]

    def test_guarded_batch_requires_key(self, backend):
        """Test a guarded batch runs only while its key exists."""
        assert backend.guarded_batch("h", [command("hset", "h", "a", 1)]) is None
        assert backend.read("exists", "h") == 0

        backend.read("hset", "h", "vt", 30)
        assert backend.guarded_batch("h", [command("hset", "h", "a", 1)]) == [1]
        assert backend.read("hget", "h", "a") == "1"

    def test_publish_reaches_subscribers(self, backend):
        """Test subscribers receive published messages."""
        received = []
        callback = lambda channel, message: received.append((channel, message))

        backend.subscribe("rsmq:rt:q", callback)
        assert backend.publish("rsmq:rt:q", 3) == 1
        assert backend.publish("rsmq:rt:other", 1) == 0
        assert received == [("rsmq:rt:q", 3)]

        assert backend.unsubscribe("rsmq:rt:q", callback) is True
        assert backend.publish("rsmq:rt:q", 4) == 0

    def test_failing_subscriber_does_not_break_publish(self, backend):
        """Test a raising callback is isolated."""
        def broken(channel, message):
            raise RuntimeError("boom")

        backend.subscribe("c", broken)
        assert backend.publish("c", "x") == 1

    def test_flush(self):
        """Test flush drops all data."""
        backend = MemoryBackend(clock=ManualClock())
        backend.read("sadd", "s", "x")
        backend.flush()
        assert backend.read("smembers", "s") == set()
