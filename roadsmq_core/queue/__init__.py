"""RoadSMQ Queue Module - Queue Facade and Message Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsmq_core.queue.errors import (
    AlreadyExistsError,
    ErrorKind,
    NotFoundError,
    PayloadTooLargeError,
    QueueError,
    ValidationError,
)
from roadsmq_core.queue.attributes import QueueAttributes, QueueSnapshot, UNLIMITED
from roadsmq_core.queue.ids import MessageIdGenerator, sent_at
from roadsmq_core.queue.message import ReceivedMessage
from roadsmq_core.queue.validator import ValidationRule, Validator, default_validator
from roadsmq_core.queue.client import QueueClient

__all__ = [
    "QueueClient",
    "QueueAttributes",
    "QueueSnapshot",
    "UNLIMITED",
    "ReceivedMessage",
    "MessageIdGenerator",
    "sent_at",
    "Validator",
    "ValidationRule",
    "default_validator",
    "ErrorKind",
    "QueueError",
    "ValidationError",
    "NotFoundError",
    "AlreadyExistsError",
    "PayloadTooLargeError",
]
