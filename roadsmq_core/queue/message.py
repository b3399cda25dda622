"""RoadSMQ Message - Delivered Message Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass

from roadsmq_core.engine.engine import Delivery
from roadsmq_core.queue.ids import sent_at


@dataclass(frozen=True)
class ReceivedMessage:
    """A message handed to a consumer.

    Attributes:
        id: Message id
        message: Message body
        rc: Number of times the message has been delivered
        fr: First-received time in epoch milliseconds
        sent: Send time in epoch milliseconds
    """

    id: str
    message: str
    rc: int
    fr: int
    sent: int

    @property
    def body(self) -> str:
        """Message body."""
        return self.message

    @classmethod
    def from_delivery(cls, delivery: Delivery) -> "ReceivedMessage":
        """Create from an engine delivery."""
        return cls(
            id=delivery.id,
            message=delivery.body,
            rc=delivery.rc,
            fr=delivery.fr,
            sent=sent_at(delivery.id),
        )


__all__ = ["ReceivedMessage"]
