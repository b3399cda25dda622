"""RoadSMQ Monitor - Queue Monitoring.

Samples queue attributes and derives depth and throughput figures. Rates
are computed from the counters of two consecutive samples, timed with the
backend clock.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from roadsmq_core.queue.client import QueueClient

logger = logging.getLogger(__name__)


@dataclass
class QueueMetrics:
    """Metrics for a queue."""

    queue_name: str
    messages_total: int = 0
    messages_hidden: int = 0
    messages_visible: int = 0
    total_sent: int = 0
    total_received: int = 0
    send_rate: float = 0.0
    receive_rate: float = 0.0
    timestamp_ms: int = 0


class QueueMonitor:
    """Queue monitoring service."""

    def __init__(
        self,
        client: QueueClient,
        queues: Optional[List[str]] = None,
        check_interval_seconds: float = 10.0,
        history_size: int = 360,
    ):
        """Initialize monitor.

        Args:
            client: Queue client
            queues: Queues to sample (all registered queues if not provided)
            check_interval_seconds: Interval between background samples
            history_size: Samples kept per queue
        """
        self.client = client
        self.queues = queues
        self.check_interval = check_interval_seconds
        self.history_size = history_size

        self._history: Dict[str, List[QueueMetrics]] = defaultdict(list)
        self._callbacks: List[Callable[[QueueMetrics], None]] = []
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def collect(self, queue_name: str) -> QueueMetrics:
        """Sample one queue and record the metrics."""
        attrs = self.client.get_queue_attributes(queue_name)
        now_ms = self.client.backend.current_time().ms

        metrics = QueueMetrics(
            queue_name=queue_name,
            messages_total=attrs.msgs,
            messages_hidden=attrs.hiddenmsgs,
            messages_visible=max(attrs.msgs - attrs.hiddenmsgs, 0),
            total_sent=attrs.totalsent,
            total_received=attrs.totalrecv,
            timestamp_ms=now_ms,
        )

        with self._lock:
            history = self._history[queue_name]
            if history:
                previous = history[-1]
                elapsed = (now_ms - previous.timestamp_ms) / 1000
                if elapsed > 0:
                    metrics.send_rate = (metrics.total_sent - previous.total_sent) / elapsed
                    metrics.receive_rate = (
                        metrics.total_received - previous.total_received
                    ) / elapsed
            history.append(metrics)
            if len(history) > self.history_size:
                del history[:-self.history_size]

        for callback in self._callbacks:
            try:
                callback(metrics)
            except Exception as e:
                logger.error(f"Metrics callback error: {e}")

        return metrics

    def collect_all(self) -> List[QueueMetrics]:
        """Sample every monitored queue."""
        names = self.queues if self.queues is not None else self.client.list_queues()
        return [self.collect(name) for name in names]

    def get_queue_metrics(self, queue_name: str) -> List[QueueMetrics]:
        """Get recorded samples for a queue, oldest first."""
        with self._lock:
            return list(self._history.get(queue_name, []))

    def latest(self, queue_name: str) -> Optional[QueueMetrics]:
        """Get the most recent sample for a queue."""
        with self._lock:
            history = self._history.get(queue_name)
            return history[-1] if history else None

    def on_metrics(self, callback: Callable[[QueueMetrics], None]) -> None:
        """Register metrics callback."""
        self._callbacks.append(callback)

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.collect_all()
            except Exception as e:
                logger.error(f"Monitor sampling failed: {e}")
            self._stop_event.wait(self.check_interval)

    def start(self) -> None:
        """Start background sampling."""
        if self._thread is not None:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="QueueMonitor")
        self._thread.start()
        logger.info("Monitor started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop background sampling."""
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Monitor stopped")


__all__ = ["QueueMonitor", "QueueMetrics"]
