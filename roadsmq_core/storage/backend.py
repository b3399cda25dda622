"""RoadSMQ Storage Backend - Abstract Storage Interface.

A backend offers four capabilities to the engine and the facade: single
reads, atomic command batches, named atomic procedures and the current
time. Commands use Redis command names and redis-py argument order, so a
batch means the same thing on every backend. Key layout is owned by the
backend; a clustered backend can route keys without the engine knowing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

from roadsmq_core.engine.clock import Timestamp

if TYPE_CHECKING:
    from roadsmq_core.engine.procedures import Procedure


@dataclass(frozen=True)
class Command:
    """A single store command.

    Attributes:
        name: Command name as exposed by redis-py (e.g. "hsetnx")
        args: Positional arguments in redis-py order
    """

    name: str
    args: Tuple[Any, ...] = ()


def command(name: str, *args: Any) -> Command:
    """Build a command."""
    return Command(name=name, args=args)


class StorageBackend(ABC):
    """Abstract storage backend for queue state."""

    def __init__(self, namespace: str = "rsmq"):
        self.namespace = namespace

    # Key layout

    def queue_key(self, queue_name: str) -> str:
        """Key of the queue's visibility index (sorted set)."""
        return f"{self.namespace}:{queue_name}"

    def config_key(self, queue_name: str) -> str:
        """Key of the queue's config and body hash."""
        return f"{self.queue_key(queue_name)}:Q"

    @property
    def shared_slot(self) -> bool:
        """Whether a batch may mix per-queue keys with the registry key."""
        return True

    def registry_key(self) -> str:
        """Key of the set of all queue names."""
        return f"{self.namespace}:QUEUES"

    def realtime_channel(self, queue_name: str) -> str:
        """Channel receiving queue depth notifications."""
        return f"{self.namespace}:rt:{queue_name}"

    # Capabilities

    @abstractmethod
    def read(self, name: str, *args: Any) -> Any:
        """Execute a single read command."""
        pass

    @abstractmethod
    def atomic_batch(self, commands: Sequence[Command]) -> List[Any]:
        """Execute commands as one indivisible unit.

        Returns:
            One reply per command, in order
        """
        pass

    @abstractmethod
    def guarded_batch(self, key: str, commands: Sequence[Command]) -> Optional[List[Any]]:
        """Execute commands as one unit only if key exists when they commit.

        Returns:
            One reply per command, or None if key did not exist
        """
        pass

    @abstractmethod
    def run_procedure(
        self,
        procedure: "Procedure",
        keys: Sequence[str],
        args: Sequence[Any],
    ) -> Any:
        """Run a named select-and-mutate procedure atomically."""
        pass

    @abstractmethod
    def publish(self, channel: str, message: Any) -> int:
        """Publish a notification.

        Returns:
            Number of subscribers that received it
        """
        pass

    def prepare(self, procedures: Iterable["Procedure"]) -> None:
        """Make procedures ready to run (e.g. load scripts)."""
        pass

    def current_time(self) -> Timestamp:
        """Read the authoritative current time."""
        return Timestamp.from_redis(self.read("time"))

    def close(self) -> None:
        """Close the backend connection."""
        pass


__all__ = ["StorageBackend", "Command", "command"]
