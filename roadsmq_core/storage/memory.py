"""RoadSMQ Memory Backend - In-Process Storage.

Implements the subset of Redis hash, sorted set and set commands the queue
needs, with Redis reply shapes. One re-entrant lock serialises every
command, batch and procedure, which gives the same atomicity the Redis
backend gets from MULTI/EXEC and Lua.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from roadsmq_core.engine.clock import Clock, SystemClock
from roadsmq_core.storage.backend import Command, StorageBackend

if TYPE_CHECKING:
    from roadsmq_core.engine.procedures import Procedure

logger = logging.getLogger(__name__)


def _score(value: Any) -> float:
    return float(value)


class MemoryBackend(StorageBackend):
    """In-memory storage backend."""

    def __init__(self, namespace: str = "rsmq", clock: Optional[Clock] = None):
        super().__init__(namespace=namespace)
        self.clock = clock or SystemClock()

        self._hashes: Dict[str, Dict[str, str]] = {}
        self._zsets: Dict[str, Dict[str, float]] = {}
        self._sets: Dict[str, Set[str]] = {}
        self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)
        self._lock = threading.RLock()

    # Capabilities

    def read(self, name: str, *args: Any) -> Any:
        return self.execute(name, *args)

    def atomic_batch(self, commands: Sequence[Command]) -> List[Any]:
        with self._lock:
            return [self.execute(c.name, *c.args) for c in commands]

    def guarded_batch(self, key: str, commands: Sequence[Command]) -> Optional[List[Any]]:
        with self._lock:
            if not self._cmd_exists(key):
                return None
            return self.atomic_batch(commands)

    def run_procedure(
        self,
        procedure: "Procedure",
        keys: Sequence[str],
        args: Sequence[Any],
    ) -> Any:
        with self._lock:
            return procedure.func(self.execute, list(keys), list(args))

    def publish(self, channel: str, message: Any) -> int:
        with self._lock:
            callbacks = list(self._subscribers.get(channel, []))

        for callback in callbacks:
            try:
                callback(channel, message)
            except Exception as e:
                logger.error(f"Subscriber callback error on {channel}: {e}")
        return len(callbacks)

    def subscribe(self, channel: str, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for published notifications."""
        with self._lock:
            self._subscribers[channel].append(callback)

    def unsubscribe(self, channel: str, callback: Callable[[str, Any], None]) -> bool:
        """Remove a notification callback."""
        with self._lock:
            if callback in self._subscribers.get(channel, []):
                self._subscribers[channel].remove(callback)
                return True
            return False

    def execute(self, name: str, *args: Any) -> Any:
        """Execute one command by name."""
        handler = getattr(self, f"_cmd_{name}", None)
        if handler is None:
            raise ValueError(f"Unsupported command: {name}")
        with self._lock:
            return handler(*args)

    def flush(self) -> None:
        """Drop all stored data."""
        with self._lock:
            self._hashes.clear()
            self._zsets.clear()
            self._sets.clear()

    # Commands

    def _cmd_time(self) -> Tuple[int, int]:
        now = self.clock.now()
        return (now.seconds, now.microseconds)

    def _cmd_exists(self, *names: str) -> int:
        return sum(
            1 for n in names
            if n in self._hashes or n in self._zsets or n in self._sets
        )

    def _cmd_delete(self, *names: str) -> int:
        deleted = 0
        for n in names:
            found = False
            for store in (self._hashes, self._zsets, self._sets):
                if n in store:
                    del store[n]
                    found = True
            deleted += int(found)
        return deleted

    def _cmd_hget(self, name: str, key: str) -> Optional[str]:
        return self._hashes.get(name, {}).get(key)

    def _cmd_hmget(self, name: str, keys: Any, *args: str) -> List[Optional[str]]:
        fields = list(keys) if isinstance(keys, (list, tuple)) else [keys]
        fields.extend(args)
        data = self._hashes.get(name, {})
        return [data.get(f) for f in fields]

    def _cmd_hgetall(self, name: str) -> Dict[str, str]:
        return dict(self._hashes.get(name, {}))

    def _cmd_hset(self, name: str, key: str, value: Any) -> int:
        data = self._hashes.setdefault(name, {})
        added = int(key not in data)
        data[key] = str(value)
        return added

    def _cmd_hsetnx(self, name: str, key: str, value: Any) -> int:
        data = self._hashes.setdefault(name, {})
        if key in data:
            return 0
        data[key] = str(value)
        return 1

    def _cmd_hincrby(self, name: str, key: str, amount: int = 1) -> int:
        data = self._hashes.setdefault(name, {})
        value = int(data.get(key, "0")) + int(amount)
        data[key] = str(value)
        return value

    def _cmd_hdel(self, name: str, *keys: str) -> int:
        data = self._hashes.get(name)
        if data is None:
            return 0
        removed = 0
        for k in keys:
            if k in data:
                del data[k]
                removed += 1
        if not data:
            del self._hashes[name]
        return removed

    def _cmd_hlen(self, name: str) -> int:
        return len(self._hashes.get(name, {}))

    def _cmd_zadd(self, name: str, mapping: Dict[str, Any]) -> int:
        zset = self._zsets.setdefault(name, {})
        added = 0
        for member, score in mapping.items():
            if member not in zset:
                added += 1
            zset[member] = _score(score)
        return added

    def _cmd_zrem(self, name: str, *members: str) -> int:
        zset = self._zsets.get(name)
        if zset is None:
            return 0
        removed = 0
        for m in members:
            if m in zset:
                del zset[m]
                removed += 1
        if not zset:
            del self._zsets[name]
        return removed

    def _cmd_zscore(self, name: str, member: str) -> Optional[float]:
        return self._zsets.get(name, {}).get(member)

    def _cmd_zcard(self, name: str) -> int:
        return len(self._zsets.get(name, {}))

    def _cmd_zcount(self, name: str, min_score: Any, max_score: Any) -> int:
        low, high = _score(min_score), _score(max_score)
        return sum(1 for s in self._zsets.get(name, {}).values() if low <= s <= high)

    def _cmd_zrangebyscore(
        self,
        name: str,
        min_score: Any,
        max_score: Any,
        start: Optional[int] = None,
        num: Optional[int] = None,
    ) -> List[str]:
        low, high = _score(min_score), _score(max_score)
        members = sorted(
            (s, m) for m, s in self._zsets.get(name, {}).items() if low <= s <= high
        )
        result = [m for _, m in members]
        if start is not None and num is not None:
            result = result[start:start + num]
        return result

    def _cmd_sadd(self, name: str, *values: str) -> int:
        members = self._sets.setdefault(name, set())
        added = len(set(values) - members)
        members.update(values)
        return added

    def _cmd_srem(self, name: str, *values: str) -> int:
        members = self._sets.get(name)
        if members is None:
            return 0
        removed = len(members & set(values))
        members.difference_update(values)
        if not members:
            del self._sets[name]
        return removed

    def _cmd_smembers(self, name: str) -> Set[str]:
        return set(self._sets.get(name, set()))


__all__ = ["MemoryBackend"]
