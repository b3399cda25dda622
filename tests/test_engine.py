"""
Unit tests for the visibility engine and its procedures.
"""

import pytest

from roadsmq_core.engine.engine import Delivery, VisibilityEngine
from roadsmq_core.engine.procedures import PROCEDURES, RECEIVE_MESSAGE
from roadsmq_core.storage.backend import command


def _put(backend, queue, msg_id, body, due):
    backend.atomic_batch([
        command("zadd", backend.queue_key(queue), {msg_id: due}),
        command("hset", backend.config_key(queue), msg_id, body),
    ])


class TestProcedures:
    """Tests for procedure definitions."""

    def test_registry(self):
        """Test all three procedures are registered by name."""
        assert set(PROCEDURES) == {"receive_message", "pop_message", "change_message_visibility"}

    def test_sha_is_stable(self):
        """Test the SHA identifies the script text."""
        assert RECEIVE_MESSAGE.sha == RECEIVE_MESSAGE.sha
        assert len(RECEIVE_MESSAGE.sha) == 40


class TestVisibilityEngine:
    """Tests for VisibilityEngine on the memory backend."""

    @pytest.fixture
    def engine(self, backend) -> VisibilityEngine:
        """Create an engine instance."""
        return VisibilityEngine(backend)

    def test_receive_empty(self, engine):
        """Test nothing is delivered from an empty queue."""
        assert engine.receive("q", now=1000, new_due=2000) is None

    def test_receive_selects_earliest_due(self, engine, backend):
        """Test the lowest due-time wins and is moved to new_due."""
        _put(backend, "q", "late", "L", 500)
        _put(backend, "q", "early", "E", 100)

        delivery = engine.receive("q", now=1000, new_due=5000)

        assert delivery == Delivery(id="early", body="E", rc=1, fr=1000)
        assert backend.read("zscore", backend.queue_key("q"), "early") == 5000
        assert backend.read("hget", backend.config_key("q"), "totalrecv") == "1"

    def test_receive_ignores_future_messages(self, engine, backend):
        """Test messages due after now are not eligible."""
        _put(backend, "q", "m", "x", 1001)
        assert engine.receive("q", now=1000, new_due=2000) is None
        assert engine.receive("q", now=1001, new_due=2000) is not None

    def test_first_receive_time_is_kept(self, engine, backend):
        """Test fr is set once and rc grows."""
        _put(backend, "q", "m", "x", 0)

        first = engine.receive("q", now=1000, new_due=1500)
        second = engine.receive("q", now=1500, new_due=3000)

        assert (first.rc, first.fr) == (1, 1000)
        assert (second.rc, second.fr) == (2, 1000)

    def test_pop_removes_everything(self, engine, backend):
        """Test pop deletes index entry and body fields."""
        _put(backend, "q", "m", "x", 0)

        delivery = engine.pop("q", now=1000)

        assert delivery == Delivery(id="m", body="x", rc=1, fr=1000)
        assert backend.read("zcard", backend.queue_key("q")) == 0
        fields = backend.read("hgetall", backend.config_key("q"))
        assert "m" not in fields
        assert "m:rc" not in fields
        assert "m:fr" not in fields
        assert fields["totalrecv"] == "1"

    def test_pop_after_receive_reports_first_fr(self, engine, backend):
        """Test pop of a previously received message keeps fr."""
        _put(backend, "q", "m", "x", 0)
        engine.receive("q", now=1000, new_due=1000)

        delivery = engine.pop("q", now=2000)
        assert (delivery.rc, delivery.fr) == (2, 1000)

    def test_change_visibility(self, engine, backend):
        """Test a due-time can be moved only for existing messages."""
        _put(backend, "q", "m", "x", 0)

        assert engine.change_visibility("q", "m", 9000) is True
        assert backend.read("zscore", backend.queue_key("q"), "m") == 9000
        assert engine.change_visibility("q", "missing", 9000) is False
        assert backend.read("zcard", backend.queue_key("q")) == 1
