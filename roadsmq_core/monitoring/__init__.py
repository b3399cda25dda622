"""RoadSMQ Monitoring Module - Queue Monitoring.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsmq_core.monitoring.monitor import QueueMetrics, QueueMonitor

__all__ = ["QueueMonitor", "QueueMetrics"]
