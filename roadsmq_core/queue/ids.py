"""RoadSMQ Message IDs - Time-Ordered Identifiers.

A message id is the base-36 encoding of the send time in microseconds,
padded to a fixed width, followed by a random suffix. Fixed width plus an
alphabet whose digits sort before its letters makes lexicographic order
match send order.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import random
import string
from typing import Optional

from roadsmq_core.engine.clock import Timestamp

BASE36_DIGITS = string.digits + string.ascii_lowercase
SUFFIX_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

TIMESTAMP_WIDTH = 10
SUFFIX_LENGTH = 22
ID_LENGTH = TIMESTAMP_WIDTH + SUFFIX_LENGTH


def to_base36(value: int, width: int = TIMESTAMP_WIDTH) -> str:
    """Encode a non-negative integer in base 36, left-padded with zeros.

    Raises:
        ValueError: If the value is negative or does not fit in width
    """
    if value < 0:
        raise ValueError("Cannot encode a negative value")

    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(BASE36_DIGITS[rem])
    encoded = "".join(reversed(digits)) or "0"

    if len(encoded) > width:
        raise ValueError(f"Value does not fit in {width} base-36 digits")
    return encoded.rjust(width, "0")


def sent_at(message_id: str) -> int:
    """Decode the send time of a message id in epoch milliseconds."""
    return int(message_id[:TIMESTAMP_WIDTH], 36) // 1000


class MessageIdGenerator:
    """Builds 32-character message ids.

    Pure function of the timestamp and the random source, so a seeded
    random.Random gives reproducible ids.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def suffix(self, length: int = SUFFIX_LENGTH) -> str:
        """Random suffix drawn uniformly from the 62-symbol alphabet."""
        return "".join(self._rng.choice(SUFFIX_ALPHABET) for _ in range(length))

    def generate(self, timestamp: Timestamp) -> str:
        """Generate an id for a message sent at the given time."""
        return to_base36(int(timestamp.micro_digits)) + self.suffix()


__all__ = [
    "MessageIdGenerator",
    "to_base36",
    "sent_at",
    "ID_LENGTH",
    "TIMESTAMP_WIDTH",
    "SUFFIX_LENGTH",
]
