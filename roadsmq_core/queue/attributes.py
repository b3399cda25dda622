"""RoadSMQ Queue Attributes - Queue Configuration Records.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from roadsmq_core.engine.clock import Timestamp

MAX_DELAY = 9999999
MIN_MESSAGE_SIZE = 1024
MAX_PAYLOAD_SIZE = 65536
UNLIMITED = -1

DEFAULT_VT = 30
DEFAULT_DELAY = 0
DEFAULT_MAXSIZE = MAX_PAYLOAD_SIZE

# Fields of the config hash, in the order they are read back.
CONFIG_FIELDS: List[str] = [
    "vt",
    "delay",
    "maxsize",
    "totalrecv",
    "totalsent",
    "created",
    "modified",
]


def _to_int(value: Optional[str]) -> int:
    return int(value) if value is not None else 0


@dataclass
class QueueAttributes:
    """Queue configuration plus live counts.

    Attributes:
        vt: Default visibility timeout in seconds
        delay: Default delivery delay in seconds
        maxsize: Maximum body size in bytes, -1 for unlimited
        totalrecv: Total receive/pop deliveries
        totalsent: Total messages sent
        created: Creation time in epoch milliseconds
        modified: Last modification time in epoch milliseconds
        msgs: Messages currently in the queue
        hiddenmsgs: Messages whose due-time is not yet reached
    """

    vt: int
    delay: int
    maxsize: int
    totalrecv: int = 0
    totalsent: int = 0
    created: int = 0
    modified: int = 0
    msgs: int = 0
    hiddenmsgs: int = 0

    @property
    def unlimited(self) -> bool:
        """Whether the queue accepts bodies of any size."""
        return self.maxsize == UNLIMITED

    @classmethod
    def from_fields(
        cls,
        values: List[Optional[str]],
        msgs: int = 0,
        hiddenmsgs: int = 0,
    ) -> "QueueAttributes":
        """Build from an HMGET reply over CONFIG_FIELDS."""
        fields = dict(zip(CONFIG_FIELDS, values))
        return cls(
            vt=_to_int(fields["vt"]),
            delay=_to_int(fields["delay"]),
            maxsize=_to_int(fields["maxsize"]),
            totalrecv=_to_int(fields["totalrecv"]),
            totalsent=_to_int(fields["totalsent"]),
            created=_to_int(fields["created"]),
            modified=_to_int(fields["modified"]),
            msgs=int(msgs),
            hiddenmsgs=int(hiddenmsgs),
        )


@dataclass(frozen=True)
class QueueSnapshot:
    """Queue defaults read together with the time of the read.

    Attributes:
        name: Queue name
        vt: Default visibility timeout in seconds
        delay: Default delivery delay in seconds
        maxsize: Maximum body size in bytes, -1 for unlimited
        now: Clock value read in the same transaction
    """

    name: str
    vt: int
    delay: int
    maxsize: int
    now: Timestamp

    def due_after(self, seconds: int) -> int:
        """Due-time in ms for something becoming eligible after seconds."""
        return self.now.ms + seconds * 1000


__all__ = [
    "QueueAttributes",
    "QueueSnapshot",
    "CONFIG_FIELDS",
    "MAX_DELAY",
    "MIN_MESSAGE_SIZE",
    "MAX_PAYLOAD_SIZE",
    "UNLIMITED",
    "DEFAULT_VT",
    "DEFAULT_DELAY",
    "DEFAULT_MAXSIZE",
]
