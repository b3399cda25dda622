"""RoadSMQ Engine - Visibility-Ordered Scheduling.

The engine owns the three select-and-mutate operations. Each one is a
single procedure call on the backend, so the decision of which message is
next and the mutation that hides or removes it happen as one unit: two
concurrent receivers can never select the same message before its
due-time has moved.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional

from roadsmq_core.engine.procedures import (
    CHANGE_MESSAGE_VISIBILITY,
    POP_MESSAGE,
    PROCEDURES,
    RECEIVE_MESSAGE,
)

if TYPE_CHECKING:
    from roadsmq_core.storage.backend import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """Raw result of a receive or pop procedure.

    Attributes:
        id: Message id
        body: Message body
        rc: Receive count after this delivery
        fr: First-received time in epoch milliseconds
    """

    id: str
    body: str
    rc: int
    fr: int

    @classmethod
    def from_reply(cls, reply: List[Any]) -> "Delivery":
        """Create from a procedure reply [id, body, rc, fr]."""
        msg_id, body, rc, fr = reply
        return cls(id=msg_id, body=body, rc=int(rc), fr=int(fr))


class VisibilityEngine:
    """Atomic receive, pop and change-visibility over a storage backend.

    Procedures are prepared once when the engine is built. Times are epoch
    milliseconds read by the caller from the backend clock.
    """

    def __init__(self, backend: "StorageBackend"):
        self.backend = backend
        self.backend.prepare(PROCEDURES.values())

    def _keys(self, queue_name: str):
        return [self.backend.queue_key(queue_name), self.backend.config_key(queue_name)]

    def receive(self, queue_name: str, now: int, new_due: int) -> Optional[Delivery]:
        """Lease the earliest due message until new_due.

        Args:
            queue_name: Queue name
            now: Current time; messages due at or before it are eligible
            new_due: Due-time assigned to the selected message

        Returns:
            The delivery, or None if no message is due
        """
        reply = self.backend.run_procedure(
            RECEIVE_MESSAGE,
            self._keys(queue_name),
            [now, new_due],
        )
        if not reply:
            return None

        delivery = Delivery.from_reply(reply)
        logger.debug(
            f"Received {delivery.id} from {queue_name} (rc={delivery.rc}, due={new_due})"
        )
        return delivery

    def pop(self, queue_name: str, now: int) -> Optional[Delivery]:
        """Deliver the earliest due message and delete it.

        Returns:
            The delivery, or None if no message is due
        """
        reply = self.backend.run_procedure(
            POP_MESSAGE,
            self._keys(queue_name),
            [now],
        )
        if not reply:
            return None

        delivery = Delivery.from_reply(reply)
        logger.debug(f"Popped {delivery.id} from {queue_name} (rc={delivery.rc})")
        return delivery

    def change_visibility(self, queue_name: str, message_id: str, new_due: int) -> bool:
        """Move a message's due-time.

        Returns:
            False if the message is not in the index
        """
        changed = self.backend.run_procedure(
            CHANGE_MESSAGE_VISIBILITY,
            self._keys(queue_name),
            [message_id, new_due],
        )
        return bool(changed)


__all__ = ["VisibilityEngine", "Delivery"]
