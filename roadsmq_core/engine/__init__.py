"""RoadSMQ Engine Module - Scheduling Core.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsmq_core.engine.clock import Clock, ManualClock, SystemClock, Timestamp
from roadsmq_core.engine.procedures import (
    CHANGE_MESSAGE_VISIBILITY,
    POP_MESSAGE,
    PROCEDURES,
    RECEIVE_MESSAGE,
    Procedure,
)
from roadsmq_core.engine.engine import Delivery, VisibilityEngine

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "Timestamp",
    "Procedure",
    "PROCEDURES",
    "RECEIVE_MESSAGE",
    "POP_MESSAGE",
    "CHANGE_MESSAGE_VISIBILITY",
    "Delivery",
    "VisibilityEngine",
]
