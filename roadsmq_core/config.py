"""RoadSMQ Config - Client Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from roadsmq_core.storage.redis import RedisBackend

NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass
class SMQConfig:
    """Client configuration.

    Attributes:
        host: Redis host
        port: Redis port
        db: Redis database index (ignored in cluster mode)
        password: Redis password
        url: redis:// URL; takes precedence over host/port/db/password
        namespace: Prefix of every key and channel
        realtime: Publish queue depth on every send
        cluster: Use cluster key routing and client
    """

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    url: Optional[str] = None
    namespace: str = "rsmq"
    realtime: bool = False
    cluster: bool = False

    def __post_init__(self):
        if not NAMESPACE_PATTERN.match(self.namespace or ""):
            raise ValueError(f"Invalid namespace: {self.namespace!r}")
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}")
        if self.db < 0:
            raise ValueError(f"Invalid database index: {self.db}")

    def create_backend(self) -> RedisBackend:
        """Build a Redis backend from this configuration."""
        if self.url:
            return RedisBackend.from_url(
                self.url,
                namespace=self.namespace,
                cluster=self.cluster,
            )
        return RedisBackend(
            namespace=self.namespace,
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            cluster=self.cluster,
        )


__all__ = ["SMQConfig"]
