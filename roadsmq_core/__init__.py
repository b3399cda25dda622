"""RoadSMQ - Simple Message Queue on a Shared Store.

RoadSMQ is a lightweight, at-least-once message queue built on Redis (or an
in-process store with the same semantics). Producers and consumers
coordinate only through the store: there is no broker process. Messages
are hidden for a visibility timeout when received and reappear unless the
consumer deletes them.

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────┐
│                            RoadSMQ System                               │
├─────────────────────────────────────────────────────────────────────────┤
│  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐     │
│  │  Producers  │  │ QueueClient │  │   Engine    │  │   Storage   │     │
│  │             │──▶│             │──▶│             │──▶│             │     │
│  │ • Send      │  │ • Validate  │  │ • Receive   │  │ • Batches   │     │
│  │ • Delay     │  │ • Defaults  │  │ • Pop       │  │ • Scripts   │     │
│  │ • Realtime  │  │ • Clock     │  │ • Visibility│  │ • TIME      │     │
│  └─────────────┘  └─────────────┘  └─────────────┘  └─────────────┘     │
├─────────────────────────────────────────────────────────────────────────┤
│                           Core Components                               │
├─────────────────────────────────────────────────────────────────────────┤
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                        Queue Module                               │ │
│  │  • QueueClient - Queue and message operations                     │ │
│  │  • QueueAttributes - Queue configuration and counts               │ │
│  │  • MessageIdGenerator - Time-ordered message ids                  │ │
│  │  • Validator - Name, id and attribute validation                  │ │
│  └───────────────────────────────────────────────────────────────────┘ │
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                        Engine Module                              │ │
│  │  • VisibilityEngine - Atomic receive/pop/change-visibility        │ │
│  │  • Procedure - Lua script with in-process equivalent              │ │
│  │  • Clock - Authoritative time source                              │ │
│  └───────────────────────────────────────────────────────────────────┘ │
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                        Storage Module                             │ │
│  │  • StorageBackend - Abstract storage interface                    │ │
│  │  • MemoryBackend - In-process storage                             │ │
│  │  • RedisBackend - Redis single node and cluster                   │ │
│  └───────────────────────────────────────────────────────────────────┘ │
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                    Worker & Monitoring Modules                    │ │
│  │  • QueueWorker - Polling consumer                                 │ │
│  │  • BackoffPolicy - Idle and redelivery backoff                    │ │
│  │  • QueueMonitor - Depth and throughput sampling                   │ │
│  └───────────────────────────────────────────────────────────────────┘ │
└─────────────────────────────────────────────────────────────────────────┘

Features:
- Visibility timeouts with automatic redelivery
- Delayed messages
- Receive counts and first-receive timestamps
- Atomic select-and-mutate via Lua scripts
- Redis single node and cluster key routing
- Optional realtime depth notifications

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

# Engine components
from roadsmq_core.engine.clock import Clock, ManualClock, SystemClock, Timestamp
from roadsmq_core.engine.engine import Delivery, VisibilityEngine

# Storage components
from roadsmq_core.storage.backend import StorageBackend
from roadsmq_core.storage.memory import MemoryBackend
from roadsmq_core.storage.redis import RedisBackend

# Config
from roadsmq_core.config import SMQConfig

# Queue components
from roadsmq_core.queue.attributes import QueueAttributes, UNLIMITED
from roadsmq_core.queue.client import QueueClient
from roadsmq_core.queue.errors import (
    AlreadyExistsError,
    ErrorKind,
    NotFoundError,
    PayloadTooLargeError,
    QueueError,
    ValidationError,
)
from roadsmq_core.queue.ids import MessageIdGenerator
from roadsmq_core.queue.message import ReceivedMessage

# Worker components
from roadsmq_core.worker.retry import BackoffConfig, BackoffPolicy, BackoffStrategy
from roadsmq_core.worker.worker import QueueWorker, WorkerState

# Monitoring components
from roadsmq_core.monitoring.monitor import QueueMetrics, QueueMonitor

__version__ = "1.0.0"
__author__ = "BlackRoad OS"
__license__ = "Proprietary"

__all__ = [
    # Version
    "__version__",
    # Engine
    "Clock",
    "ManualClock",
    "SystemClock",
    "Timestamp",
    "Delivery",
    "VisibilityEngine",
    # Storage
    "StorageBackend",
    "MemoryBackend",
    "RedisBackend",
    # Config
    "SMQConfig",
    # Queue
    "QueueClient",
    "QueueAttributes",
    "UNLIMITED",
    "ReceivedMessage",
    "MessageIdGenerator",
    "ErrorKind",
    "QueueError",
    "ValidationError",
    "NotFoundError",
    "AlreadyExistsError",
    "PayloadTooLargeError",
    # Worker
    "QueueWorker",
    "WorkerState",
    "BackoffPolicy",
    "BackoffConfig",
    "BackoffStrategy",
    # Monitoring
    "QueueMonitor",
    "QueueMetrics",
]
