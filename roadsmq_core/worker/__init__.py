"""RoadSMQ Worker Module - Queue Consumers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsmq_core.worker.retry import BackoffConfig, BackoffPolicy, BackoffStrategy
from roadsmq_core.worker.worker import QueueWorker, WorkerState, WorkerStats

__all__ = [
    "QueueWorker",
    "WorkerState",
    "WorkerStats",
    "BackoffPolicy",
    "BackoffConfig",
    "BackoffStrategy",
]
