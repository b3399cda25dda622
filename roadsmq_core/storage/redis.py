"""RoadSMQ Redis Backend - Redis-Based Persistence.

Batches run as MULTI/EXEC pipelines and procedures as Lua scripts invoked
by SHA. Script SHAs live in a process-wide cache keyed by procedure name;
when the server no longer knows a script (after a restart or SCRIPT FLUSH)
it is loaded again and the call retried once.

In cluster mode every per-queue key carries the queue name as a hash tag so
a queue's index and config hash share a slot.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

import redis
from redis.cluster import RedisCluster
from redis.exceptions import NoScriptError, WatchError

from roadsmq_core.storage.backend import Command, StorageBackend

if TYPE_CHECKING:
    from roadsmq_core.engine.procedures import Procedure

logger = logging.getLogger(__name__)


class ScriptCache:
    """Loaded script SHAs keyed by procedure name."""

    def __init__(self):
        self._shas: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._shas.get(name)

    def load(self, client: Any, procedure: "Procedure") -> str:
        """Load a procedure's script on the server and cache its SHA."""
        sha = client.script_load(procedure.script)
        with self._lock:
            self._shas[procedure.name] = sha
        logger.debug(f"Loaded script {procedure.name} ({sha})")
        return sha

    def invalidate(self, name: str) -> None:
        with self._lock:
            self._shas.pop(name, None)

    def clear(self) -> None:
        with self._lock:
            self._shas.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._shas)


script_cache = ScriptCache()


class RedisBackend(StorageBackend):
    """Redis-based storage backend."""

    def __init__(
        self,
        client: Optional[Any] = None,
        namespace: str = "rsmq",
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        cluster: bool = False,
        cache: Optional[ScriptCache] = None,
    ):
        super().__init__(namespace=namespace)
        self.host = host
        self.port = port
        self.db = db
        self.password = password
        self.cluster = cluster
        self._client = client
        self._cache = cache if cache is not None else script_cache

    @classmethod
    def from_url(
        cls,
        url: str,
        namespace: str = "rsmq",
        cluster: bool = False,
    ) -> "RedisBackend":
        """Create a backend from a redis:// URL."""
        if cluster:
            client = RedisCluster.from_url(url, decode_responses=True)
        else:
            client = redis.Redis.from_url(url, decode_responses=True)
        return cls(client=client, namespace=namespace, cluster=cluster)

    def _connect(self):
        """Lazy connect to Redis."""
        if self._client is None:
            if self.cluster:
                self._client = RedisCluster(
                    host=self.host,
                    port=self.port,
                    password=self.password,
                    decode_responses=True,
                )
            else:
                self._client = redis.Redis(
                    host=self.host,
                    port=self.port,
                    db=self.db,
                    password=self.password,
                    decode_responses=True,
                )
            logger.info(f"Connected to Redis at {self.host}:{self.port}")

    @property
    def client(self) -> Any:
        """The underlying redis-py client."""
        self._connect()
        return self._client

    @property
    def shared_slot(self) -> bool:
        return not self.cluster

    def queue_key(self, queue_name: str) -> str:
        if self.cluster:
            return f"{self.namespace}:{{{queue_name}}}"
        return super().queue_key(queue_name)

    def read(self, name: str, *args: Any) -> Any:
        return getattr(self.client, name)(*args)

    def atomic_batch(self, commands: Sequence[Command]) -> List[Any]:
        pipe = self.client.pipeline(transaction=True)
        for c in commands:
            getattr(pipe, c.name)(*c.args)
        return pipe.execute()

    def guarded_batch(self, key: str, commands: Sequence[Command]) -> Optional[List[Any]]:
        pipe = self.client.pipeline(transaction=True)
        try:
            while True:
                try:
                    pipe.watch(key)
                    if not pipe.exists(key):
                        return None
                    pipe.multi()
                    for c in commands:
                        getattr(pipe, c.name)(*c.args)
                    return pipe.execute()
                except WatchError:
                    logger.debug(f"{key} changed during guarded batch, retrying")
        finally:
            pipe.reset()

    def prepare(self, procedures: Iterable["Procedure"]) -> None:
        for procedure in procedures:
            if self._cache.get(procedure.name) is None:
                self._cache.load(self.client, procedure)

    def run_procedure(
        self,
        procedure: "Procedure",
        keys: Sequence[str],
        args: Sequence[Any],
    ) -> Any:
        sha = self._cache.get(procedure.name) or self._cache.load(self.client, procedure)
        try:
            return self.client.evalsha(sha, len(keys), *keys, *args)
        except NoScriptError:
            logger.warning(f"Script {procedure.name} missing on server, reloading")
            sha = self._cache.load(self.client, procedure)
            return self.client.evalsha(sha, len(keys), *keys, *args)

    def publish(self, channel: str, message: Any) -> int:
        return self.client.publish(channel, message)

    def close(self) -> None:
        if self._client:
            self._client.close()


__all__ = ["RedisBackend", "ScriptCache", "script_cache"]
