"""
Tests for the polling worker.
"""

import threading

import pytest

from roadsmq_core.worker.retry import BackoffConfig, BackoffPolicy, BackoffStrategy
from roadsmq_core.worker.worker import QueueWorker, WorkerState


def _fixed(delay_ms):
    return BackoffPolicy(BackoffConfig(
        initial_delay_ms=delay_ms,
        jitter=0.0,
        strategy=BackoffStrategy.FIXED,
    ))


class TestRunOnce:
    """Tests for single polling steps."""

    def test_empty_queue(self, client, queue):
        """Test an empty poll returns None."""
        worker = QueueWorker(client, queue, handler=lambda m: None)

        assert worker.run_once() is None
        assert worker.get_stats().empty_polls == 1

    def test_success_deletes_message(self, client, queue):
        """Test a handled message is removed from the queue."""
        seen = []
        client.send_message(queue, "job")
        worker = QueueWorker(client, queue, handler=lambda m: seen.append(m.message))

        assert worker.run_once() is True
        assert seen == ["job"]
        assert client.get_queue_attributes(queue).msgs == 0
        assert worker.get_stats().messages_processed == 1

    def test_failure_redelivers_after_backoff(self, client, queue, clock):
        """Test a failed message reappears after the retry delay."""
        attempts = []

        def handler(message):
            attempts.append(message.rc)
            raise RuntimeError("nope")

        errors = []
        client.send_message(queue, "job")
        worker = QueueWorker(client, queue, handler=handler, retry_backoff=_fixed(5000))
        worker.on_error(lambda w, m, e: errors.append(str(e)))

        assert worker.run_once() is False
        assert worker.run_once() is None

        clock.advance(5)
        assert worker.run_once() is False
        assert attempts == [1, 2]
        assert errors == ["nope", "nope"]
        assert client.get_queue_attributes(queue).msgs == 1
        assert worker.get_stats().messages_failed == 2

    def test_failing_error_callback_keeps_backoff(self, client, queue, clock):
        """Test a raising on_error callback neither escapes nor skips the retry delay."""
        client.send_message(queue, "job")
        worker = QueueWorker(client, queue, handler=lambda m: 1 / 0, retry_backoff=_fixed(5000))

        def broken_callback(w, m, e):
            raise RuntimeError("callback down")

        worker.on_error(broken_callback)

        assert worker.run_once() is False
        assert client.receive_message(queue) is None
        clock.advance(5)
        assert client.receive_message(queue).rc == 2

    def test_stats_are_snapshots(self, client, queue):
        """Test returned stats do not change under the caller."""
        worker = QueueWorker(client, queue, handler=lambda m: None)
        before = worker.get_stats()

        client.send_message(queue, "job")
        worker.run_once()

        assert before.messages_processed == 0
        assert worker.get_stats().messages_processed == 1

    def test_message_dead_after_max_receives(self, client, queue, clock):
        """Test a message failing max_receives times is deleted."""
        dead = []
        client.send_message(queue, "poison")
        worker = QueueWorker(
            client,
            queue,
            handler=lambda m: 1 / 0,
            max_receives=2,
            retry_backoff=_fixed(1000),
        )
        worker.on_dead(dead.append)

        worker.run_once()
        clock.advance(1)
        worker.run_once()

        assert [m.message for m in dead] == ["poison"]
        assert client.get_queue_attributes(queue).msgs == 0
        assert worker.get_stats().messages_dead == 1

    def test_over_delivered_message_skips_handler(self, client, queue, clock):
        """Test a message already past the limit is buried unprocessed."""
        client.send_message(queue, "stale")
        client.receive_message(queue, vt=0)
        client.receive_message(queue, vt=0)

        calls = []
        worker = QueueWorker(client, queue, handler=calls.append, max_receives=2)

        assert worker.run_once() is False
        assert calls == []
        assert client.get_queue_attributes(queue).msgs == 0

    def test_custom_vt(self, client, queue, clock):
        """Test the worker hides messages for its own vt."""
        seen = []

        def handler(message):
            clock.advance(10)
            seen.append(client.receive_message(queue))

        client.send_message(queue, "job")
        worker = QueueWorker(client, queue, handler=handler, vt=10)

        assert worker.run_once() is True
        assert seen[0] is not None
        assert seen[0].rc == 2


class TestBackgroundLoop:
    """Tests for the threaded polling loop."""

    def test_start_processes_and_stops(self, client, queue):
        """Test the loop handles a message and shuts down cleanly."""
        done = threading.Event()
        client.send_message(queue, "job")
        worker = QueueWorker(
            client,
            queue,
            handler=lambda m: done.set(),
            idle_backoff=_fixed(10),
        )

        worker.start()
        assert worker.state in (WorkerState.IDLE, WorkerState.PROCESSING)
        assert done.wait(timeout=5)
        worker.stop(timeout=5)

        assert worker.state == WorkerState.STOPPED
        assert worker.get_stats().state == WorkerState.STOPPED

    def test_stop_without_start(self, client, queue):
        """Test stopping an idle worker is a no-op."""
        worker = QueueWorker(client, queue, handler=lambda m: None)
        worker.stop()
        assert worker.state == WorkerState.STOPPED
