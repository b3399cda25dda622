"""RoadSMQ Errors - Queue Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Kinds of queue errors."""

    VALIDATION = auto()         # Malformed name, id or attribute
    NOT_FOUND = auto()          # Queue or message absent
    ALREADY_EXISTS = auto()     # Duplicate queue creation
    PAYLOAD_TOO_LARGE = auto()  # Body exceeds the queue's maxsize


class QueueError(Exception):
    """Base class for errors raised by queue operations.

    Attributes:
        kind: Error kind
        details: Extra context (queue name, limits)
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(QueueError):
    """Raised before any store access when input is malformed."""

    kind = ErrorKind.VALIDATION


class NotFoundError(QueueError):
    """Raised when a queue does not exist."""

    kind = ErrorKind.NOT_FOUND


class AlreadyExistsError(QueueError):
    """Raised when creating a queue that already exists."""

    kind = ErrorKind.ALREADY_EXISTS


class PayloadTooLargeError(QueueError):
    """Raised when a message body exceeds the queue's maxsize."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE


__all__ = [
    "ErrorKind",
    "QueueError",
    "ValidationError",
    "NotFoundError",
    "AlreadyExistsError",
    "PayloadTooLargeError",
]
