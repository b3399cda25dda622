"""RoadSMQ Worker - Polling Message Consumer.

The queue never blocks waiting for messages; this worker is the polling
loop on top of it. A message is deleted only after its handler returns. On
failure it stays in the queue with its visibility pushed out by a backoff
delay, so another receive picks it up later. Messages delivered more than
max_receives times are deleted and handed to on_dead.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, List, Optional

from roadsmq_core.queue.client import QueueClient
from roadsmq_core.queue.message import ReceivedMessage
from roadsmq_core.worker.retry import BackoffConfig, BackoffPolicy, BackoffStrategy

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """Worker operational states."""

    IDLE = auto()       # Waiting for work
    PROCESSING = auto() # Running the handler
    STOPPING = auto()   # Shutting down
    STOPPED = auto()    # Fully stopped


@dataclass
class WorkerStats:
    """Worker statistics."""

    worker_id: str
    state: WorkerState = WorkerState.STOPPED
    messages_processed: int = 0
    messages_failed: int = 0
    messages_dead: int = 0
    empty_polls: int = 0
    current_message: Optional[str] = None
    started_at: Optional[datetime] = None
    avg_processing_time_ms: float = 0.0
    total_processing_time_ms: float = 0.0


def _default_idle_backoff() -> BackoffPolicy:
    return BackoffPolicy(BackoffConfig(
        initial_delay_ms=100,
        max_delay_ms=5000,
        strategy=BackoffStrategy.EXPONENTIAL,
    ))


class QueueWorker:
    """Consumes one queue with a handler.

    Features:
    - Delete on success, delayed redelivery on failure
    - Receive-count limit with a dead-message callback
    - Idle backoff while the queue is empty
    - Background thread with graceful stop
    """

    def __init__(
        self,
        client: QueueClient,
        queue_name: str,
        handler: Callable[[ReceivedMessage], Any],
        worker_id: Optional[str] = None,
        vt: Optional[int] = None,
        max_receives: int = 0,
        retry_backoff: Optional[BackoffPolicy] = None,
        idle_backoff: Optional[BackoffPolicy] = None,
    ):
        """Initialize worker.

        Args:
            client: Queue client
            queue_name: Queue to consume
            handler: Called with each received message
            worker_id: Unique worker identifier
            vt: Visibility timeout per receive (queue default if not provided)
            max_receives: Deliveries before a message is dead (0 = unlimited)
            retry_backoff: Visibility delay after a failed attempt
            idle_backoff: Sleep between polls of an empty queue
        """
        self.client = client
        self.queue_name = queue_name
        self.handler = handler
        self.worker_id = worker_id or f"worker-{uuid.uuid4().hex[:8]}"
        self.vt = vt
        self.max_receives = max_receives
        self.retry_backoff = retry_backoff or BackoffPolicy()
        self.idle_backoff = idle_backoff or _default_idle_backoff()

        self._state = WorkerState.STOPPED
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._idle_attempt = 0

        self._stats = WorkerStats(worker_id=self.worker_id)
        self._processing_times: List[float] = []

        self._on_error: Optional[Callable[["QueueWorker", ReceivedMessage, Exception], None]] = None
        self._on_dead: Optional[Callable[[ReceivedMessage], None]] = None

    @property
    def state(self) -> WorkerState:
        """Get worker state."""
        return self._state

    def on_error(
        self,
        callback: Callable[["QueueWorker", ReceivedMessage, Exception], None],
    ) -> "QueueWorker":
        """Set handler error callback."""
        self._on_error = callback
        return self

    def on_dead(self, callback: Callable[[ReceivedMessage], None]) -> "QueueWorker":
        """Set callback for messages over the receive limit."""
        self._on_dead = callback
        return self

    def run_once(self) -> Optional[bool]:
        """Receive and process at most one message.

        Returns:
            None if no message was due, True if the handler succeeded,
            False if it failed or the message was dead
        """
        message = self.client.receive_message(self.queue_name, vt=self.vt)
        if message is None:
            self._idle_attempt += 1
            with self._lock:
                self._stats.empty_polls += 1
            return None

        self._idle_attempt = 0
        if self.max_receives and message.rc > self.max_receives:
            self._bury(message)
            return False

        with self._lock:
            if self._state == WorkerState.IDLE:
                self._state = WorkerState.PROCESSING
            self._stats.current_message = message.id

        start_time = time.time()
        try:
            self.handler(message)
        except Exception as e:
            logger.error(
                f"Worker {self.worker_id} error processing {message.id} "
                f"(rc={message.rc}): {e}"
            )
            with self._lock:
                self._stats.messages_failed += 1

            if self.max_receives and message.rc >= self.max_receives:
                self._bury(message)
            else:
                delay = self.retry_backoff.get_delay_seconds(message.rc)
                self.client.change_message_visibility(self.queue_name, message.id, delay)
                logger.debug(f"Message {message.id} redelivered in {delay}s")

            if self._on_error:
                try:
                    self._on_error(self, message, e)
                except Exception as callback_error:
                    logger.error(f"Worker {self.worker_id} error callback failed: {callback_error}")
            return False
        else:
            self.client.delete_message(self.queue_name, message.id)
            with self._lock:
                self._stats.messages_processed += 1
            return True
        finally:
            with self._lock:
                self._record_time((time.time() - start_time) * 1000)
                self._stats.current_message = None
                if self._state == WorkerState.PROCESSING:
                    self._state = WorkerState.IDLE

    def _bury(self, message: ReceivedMessage) -> None:
        """Delete a message that exceeded the receive limit."""
        self.client.delete_message(self.queue_name, message.id)
        with self._lock:
            self._stats.messages_dead += 1
        logger.warning(
            f"Message {message.id} on {self.queue_name} dead after {message.rc} receives"
        )
        if self._on_dead:
            self._on_dead(message)

    def _record_time(self, elapsed_ms: float) -> None:
        self._processing_times.append(elapsed_ms)
        self._stats.total_processing_time_ms += elapsed_ms

        # Keep last 100
        if len(self._processing_times) > 100:
            self._processing_times = self._processing_times[-100:]
        self._stats.avg_processing_time_ms = sum(self._processing_times) / len(
            self._processing_times
        )

    def _loop(self) -> None:
        """Background polling loop."""
        while not self._stop_event.is_set():
            try:
                result = self.run_once()
            except Exception as e:
                logger.error(f"Worker {self.worker_id} poll failed: {e}")
                self._idle_attempt += 1
                result = None

            if result is None:
                delay_ms = self.idle_backoff.get_delay_ms(self._idle_attempt)
                self._stop_event.wait(delay_ms / 1000)

    def start(self) -> None:
        """Start polling in a background thread."""
        with self._lock:
            if self._state != WorkerState.STOPPED:
                return

            self._state = WorkerState.IDLE
            self._stats.started_at = datetime.now()
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._loop,
                daemon=True,
                name=f"QueueWorker-{self.worker_id}",
            )
            self._thread.start()

        logger.info(f"Worker {self.worker_id} started on {self.queue_name}")

    def stop(self, timeout: float = 30.0) -> None:
        """Stop the worker, waiting for the current message to finish."""
        with self._lock:
            if self._state == WorkerState.STOPPED:
                return
            self._state = WorkerState.STOPPING
            self._stop_event.set()
            thread = self._thread

        if thread:
            thread.join(timeout=timeout)

        with self._lock:
            self._thread = None
            self._state = WorkerState.STOPPED

        logger.info(f"Worker {self.worker_id} stopped")

    def get_stats(self) -> WorkerStats:
        """Get a snapshot of worker statistics."""
        with self._lock:
            return replace(self._stats, state=self._state)

    def __repr__(self) -> str:
        return f"QueueWorker(id={self.worker_id!r}, queue={self.queue_name!r}, state={self._state.name})"


__all__ = ["QueueWorker", "WorkerState", "WorkerStats"]
