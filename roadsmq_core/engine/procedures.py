"""RoadSMQ Procedures - Atomic Select-and-Mutate Scripts.

Each procedure exists twice: as a Lua script for Redis, and as a Python
function for the in-process backend. The Python version talks to the store
through a ``call(command, *args)`` function with redis-py argument order,
mirroring ``redis.call`` in the script, and is run under the backend lock.

KEYS[1] is the queue's visibility index, KEYS[2] its config/body hash.
Timestamps are passed as ARGV in epoch milliseconds.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

StoreCall = Callable[..., Any]


@dataclass(frozen=True)
class Procedure:
    """A named atomic procedure.

    Attributes:
        name: Procedure identity, used as the script cache key
        script: Lua source
        func: Equivalent Python implementation
    """

    name: str
    script: str = field(repr=False)
    func: Callable[[StoreCall, List[str], List[Any]], Any] = field(repr=False, compare=False)

    @property
    def sha(self) -> str:
        """SHA1 digest Redis uses to identify the script."""
        return hashlib.sha1(self.script.encode("utf-8")).hexdigest()


RECEIVE_MESSAGE_SCRIPT = """
local msg = redis.call("ZRANGEBYSCORE", KEYS[1], "-inf", ARGV[1], "LIMIT", "0", "1")
if #msg == 0 then
    return {}
end
redis.call("ZADD", KEYS[1], ARGV[2], msg[1])
redis.call("HINCRBY", KEYS[2], "totalrecv", 1)
local mbody = redis.call("HGET", KEYS[2], msg[1])
local rc = redis.call("HINCRBY", KEYS[2], msg[1] .. ":rc", 1)
local o = {msg[1], mbody, rc}
if rc == 1 then
    redis.call("HSET", KEYS[2], msg[1] .. ":fr", ARGV[1])
    table.insert(o, ARGV[1])
else
    local fr = redis.call("HGET", KEYS[2], msg[1] .. ":fr")
    table.insert(o, fr)
end
return o
"""

POP_MESSAGE_SCRIPT = """
local msg = redis.call("ZRANGEBYSCORE", KEYS[1], "-inf", ARGV[1], "LIMIT", "0", "1")
if #msg == 0 then
    return {}
end
redis.call("HINCRBY", KEYS[2], "totalrecv", 1)
local mbody = redis.call("HGET", KEYS[2], msg[1])
local rc = redis.call("HINCRBY", KEYS[2], msg[1] .. ":rc", 1)
local o = {msg[1], mbody, rc}
if rc == 1 then
    table.insert(o, ARGV[1])
else
    local fr = redis.call("HGET", KEYS[2], msg[1] .. ":fr")
    table.insert(o, fr)
end
redis.call("ZREM", KEYS[1], msg[1])
redis.call("HDEL", KEYS[2], msg[1], msg[1] .. ":rc", msg[1] .. ":fr")
return o
"""

CHANGE_MESSAGE_VISIBILITY_SCRIPT = """
local msg = redis.call("ZSCORE", KEYS[1], ARGV[1])
if not msg then
    return 0
end
redis.call("ZADD", KEYS[1], ARGV[2], ARGV[1])
return 1
"""


def _deliver(call: StoreCall, index: str, config: str, now: Any) -> List[Any]:
    """Select the earliest due message and record the delivery.

    Returns:
        [id, body, rc] or [] when nothing is due
    """
    found = call("zrangebyscore", index, "-inf", now, 0, 1)
    if not found:
        return []
    msg_id = found[0]
    call("hincrby", config, "totalrecv", 1)
    body = call("hget", config, msg_id)
    rc = call("hincrby", config, f"{msg_id}:rc", 1)
    return [msg_id, body, rc]


def receive_message(call: StoreCall, keys: List[str], args: List[Any]) -> List[Any]:
    index, config = keys
    now, new_due = args
    reply = _deliver(call, index, config, now)
    if not reply:
        return reply

    msg_id, _, rc = reply
    call("zadd", index, {msg_id: new_due})
    if rc == 1:
        call("hset", config, f"{msg_id}:fr", now)
        reply.append(str(now))
    else:
        reply.append(call("hget", config, f"{msg_id}:fr"))
    return reply


def pop_message(call: StoreCall, keys: List[str], args: List[Any]) -> List[Any]:
    index, config = keys
    now = args[0]
    reply = _deliver(call, index, config, now)
    if not reply:
        return reply

    msg_id, _, rc = reply
    if rc == 1:
        reply.append(str(now))
    else:
        reply.append(call("hget", config, f"{msg_id}:fr"))
    call("zrem", index, msg_id)
    call("hdel", config, msg_id, f"{msg_id}:rc", f"{msg_id}:fr")
    return reply


def change_message_visibility(call: StoreCall, keys: List[str], args: List[Any]) -> int:
    index = keys[0]
    msg_id, new_due = args
    if call("zscore", index, msg_id) is None:
        return 0
    call("zadd", index, {msg_id: new_due})
    return 1


RECEIVE_MESSAGE = Procedure(
    name="receive_message",
    script=RECEIVE_MESSAGE_SCRIPT,
    func=receive_message,
)

POP_MESSAGE = Procedure(
    name="pop_message",
    script=POP_MESSAGE_SCRIPT,
    func=pop_message,
)

CHANGE_MESSAGE_VISIBILITY = Procedure(
    name="change_message_visibility",
    script=CHANGE_MESSAGE_VISIBILITY_SCRIPT,
    func=change_message_visibility,
)

PROCEDURES: Dict[str, Procedure] = {
    p.name: p for p in (RECEIVE_MESSAGE, POP_MESSAGE, CHANGE_MESSAGE_VISIBILITY)
}


__all__ = [
    "Procedure",
    "PROCEDURES",
    "RECEIVE_MESSAGE",
    "POP_MESSAGE",
    "CHANGE_MESSAGE_VISIBILITY",
]
