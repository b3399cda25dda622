"""RoadSMQ Storage Module - Queue State Persistence.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from roadsmq_core.storage.backend import Command, StorageBackend, command
from roadsmq_core.storage.memory import MemoryBackend
from roadsmq_core.storage.redis import RedisBackend, ScriptCache, script_cache

__all__ = [
    "StorageBackend",
    "Command",
    "command",
    "MemoryBackend",
    "RedisBackend",
    "ScriptCache",
    "script_cache",
]
