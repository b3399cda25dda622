"""RoadSMQ Client - Queue Facade.

This module provides the public queue API: queue lifecycle, attributes and
message send/receive/pop/delete/visibility. Inputs are validated before any
store access; every mutation is submitted to the backend as one atomic
batch or procedure, and every operation reads the backend clock once.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from roadsmq_core.config import SMQConfig
from roadsmq_core.engine.engine import VisibilityEngine
from roadsmq_core.queue.attributes import (
    CONFIG_FIELDS,
    DEFAULT_DELAY,
    DEFAULT_MAXSIZE,
    DEFAULT_VT,
    UNLIMITED,
    QueueAttributes,
    QueueSnapshot,
)
from roadsmq_core.queue.errors import (
    AlreadyExistsError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from roadsmq_core.queue.ids import MessageIdGenerator
from roadsmq_core.queue.message import ReceivedMessage
from roadsmq_core.queue.validator import Validator, default_validator
from roadsmq_core.storage.backend import StorageBackend, command

logger = logging.getLogger(__name__)


class QueueClient:
    """Visibility-timeout message queue client.

    Provides:
    - Queue creation, listing, deletion and attributes
    - At-least-once delivery with per-receive visibility timeouts
    - Delayed sends
    - Optional realtime depth notifications
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        config: Optional[SMQConfig] = None,
        id_generator: Optional[MessageIdGenerator] = None,
        validator: Optional[Validator] = None,
        realtime: Optional[bool] = None,
    ):
        """Initialize client.

        Args:
            backend: Storage backend (built from config if not provided)
            config: Client configuration
            id_generator: Message id generator
            validator: Parameter validator
            realtime: Override the configured realtime setting
        """
        self.config = config or SMQConfig()
        self.backend = backend or self.config.create_backend()
        self.realtime = self.config.realtime if realtime is None else realtime
        self.engine = VisibilityEngine(self.backend)

        self._ids = id_generator or MessageIdGenerator()
        self._validator = validator or default_validator()

    def _snapshot(self, name: str) -> QueueSnapshot:
        """Read queue defaults and the current time.

        Raises:
            NotFoundError: If the queue does not exist
        """
        now = self.backend.current_time()
        vt, delay, maxsize = self.backend.read(
            "hmget",
            self.backend.config_key(name),
            ["vt", "delay", "maxsize"],
        )
        if vt is None:
            raise NotFoundError("Queue not found.", details={"queue": name})

        return QueueSnapshot(
            name=name,
            vt=int(vt),
            delay=int(delay),
            maxsize=int(maxsize),
            now=now,
        )

    # Queues

    def create_queue(
        self,
        name: str,
        vt: int = DEFAULT_VT,
        delay: int = DEFAULT_DELAY,
        maxsize: int = DEFAULT_MAXSIZE,
    ) -> bool:
        """Create a queue.

        Args:
            name: Queue name
            vt: Default visibility timeout in seconds
            delay: Default delivery delay in seconds
            maxsize: Maximum body size in bytes, -1 for unlimited

        Returns:
            True if the queue was added to the registry

        Raises:
            AlreadyExistsError: If the queue already exists
        """
        self._validator.validate(queue=name, vt=vt, delay=delay, maxsize=maxsize)

        key = self.backend.config_key(name)
        now = self.backend.current_time().ms
        commands = [
            command("hsetnx", key, "vt", vt),
            command("hsetnx", key, "delay", delay),
            command("hsetnx", key, "maxsize", maxsize),
            command("hsetnx", key, "created", now),
            command("hsetnx", key, "modified", now),
        ]
        register = command("sadd", self.backend.registry_key(), name)
        if self.backend.shared_slot:
            results = self.backend.atomic_batch(commands + [register])
        else:
            results = self.backend.atomic_batch(commands)
            if all(results):
                results += self.backend.atomic_batch([register])
        if not all(results[:5]):
            raise AlreadyExistsError("Queue already exists.", details={"queue": name})

        added = results[5]
        logger.info(f"Created queue {name} (vt={vt}, delay={delay}, maxsize={maxsize})")
        return bool(added)

    def list_queues(self) -> List[str]:
        """List all queue names."""
        return sorted(self.backend.read("smembers", self.backend.registry_key()))

    def delete_queue(self, name: str) -> None:
        """Delete a queue with all its messages.

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=name)

        remove = command(
            "delete", self.backend.config_key(name), self.backend.queue_key(name)
        )
        unregister = command("srem", self.backend.registry_key(), name)
        if self.backend.shared_slot:
            deleted = self.backend.atomic_batch([remove, unregister])[0]
        else:
            deleted = self.backend.atomic_batch([remove])[0]
            if deleted:
                self.backend.atomic_batch([unregister])
        if not deleted:
            raise NotFoundError("Queue not found.", details={"queue": name})
        logger.info(f"Deleted queue {name}")

    def get_queue_attributes(self, name: str) -> QueueAttributes:
        """Get queue configuration and live counts.

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=name)

        index = self.backend.queue_key(name)
        now = self.backend.current_time()
        values, msgs, hidden = self.backend.atomic_batch([
            command("hmget", self.backend.config_key(name), CONFIG_FIELDS),
            command("zcard", index),
            command("zcount", index, now.ms, "+inf"),
        ])
        if values[0] is None:
            raise NotFoundError("Queue not found.", details={"queue": name})

        return QueueAttributes.from_fields(values, msgs=msgs, hiddenmsgs=hidden)

    def set_queue_attributes(
        self,
        name: str,
        vt: Optional[int] = None,
        delay: Optional[int] = None,
        maxsize: Optional[int] = None,
    ) -> QueueAttributes:
        """Update supplied queue attributes.

        Returns:
            The attributes after the update

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=name, vt=vt, delay=delay, maxsize=maxsize)
        snapshot = self._snapshot(name)

        key = self.backend.config_key(name)
        commands = [command("hset", key, "modified", snapshot.now.ms)]
        for field, value in (("vt", vt), ("delay", delay), ("maxsize", maxsize)):
            if value is not None:
                commands.append(command("hset", key, field, value))
        if self.backend.guarded_batch(key, commands) is None:
            raise NotFoundError("Queue not found.", details={"queue": name})

        logger.info(f"Updated queue {name} attributes")
        return self.get_queue_attributes(name)

    # Messages

    def send_message(
        self,
        queue: str,
        message: str,
        delay: Optional[int] = None,
    ) -> str:
        """Send a message.

        Args:
            queue: Queue name
            message: Message body
            delay: Delay in seconds before the message becomes visible
                (queue default if not provided)

        Returns:
            The message id

        Raises:
            NotFoundError: If the queue does not exist
            PayloadTooLargeError: If the body exceeds the queue's maxsize
        """
        self._validator.validate(queue=queue, delay=delay)
        if not isinstance(message, str):
            raise ValidationError("Message must be a string", details={"queue": queue})

        snapshot = self._snapshot(queue)
        if delay is None:
            delay = snapshot.delay

        size = len(message.encode("utf-8"))
        if snapshot.maxsize != UNLIMITED and size > snapshot.maxsize:
            raise PayloadTooLargeError(
                "Message too long",
                details={"queue": queue, "size": size, "maxsize": snapshot.maxsize},
            )

        msg_id = self._ids.generate(snapshot.now)
        index = self.backend.queue_key(queue)
        key = self.backend.config_key(queue)
        commands = [
            command("zadd", index, {msg_id: snapshot.due_after(delay)}),
            command("hset", key, msg_id, message),
            command("hincrby", key, "totalsent", 1),
        ]
        if self.realtime:
            commands.append(command("zcard", index))

        results = self.backend.guarded_batch(key, commands)
        if results is None:
            raise NotFoundError("Queue not found.", details={"queue": queue})
        logger.debug(f"Sent {msg_id} to {queue} (delay={delay}s)")

        if self.realtime:
            self._notify(queue, results[3])
        return msg_id

    def _notify(self, queue: str, depth: Any) -> None:
        """Publish queue depth; advisory only."""
        try:
            self.backend.publish(self.backend.realtime_channel(queue), depth)
        except Exception as e:
            logger.warning(f"Realtime notification for {queue} failed: {e}")

    def receive_message(
        self,
        queue: str,
        vt: Optional[int] = None,
    ) -> Optional[ReceivedMessage]:
        """Receive the next due message and hide it for vt seconds.

        Args:
            queue: Queue name
            vt: Visibility timeout in seconds (queue default if not provided)

        Returns:
            The message, or None if no message is due

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=queue, vt=vt)
        snapshot = self._snapshot(queue)
        if vt is None:
            vt = snapshot.vt

        delivery = self.engine.receive(queue, snapshot.now.ms, snapshot.due_after(vt))
        if delivery is None:
            return None
        return ReceivedMessage.from_delivery(delivery)

    def pop_message(self, queue: str) -> Optional[ReceivedMessage]:
        """Receive the next due message and delete it.

        Returns:
            The message, or None if no message is due

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=queue)
        snapshot = self._snapshot(queue)

        delivery = self.engine.pop(queue, snapshot.now.ms)
        if delivery is None:
            return None
        return ReceivedMessage.from_delivery(delivery)

    def delete_message(self, queue: str, message_id: str) -> bool:
        """Delete a message.

        Returns:
            True if the message existed and was removed
        """
        self._validator.validate(queue=queue, id=message_id)

        removed, fields = self.backend.atomic_batch([
            command("zrem", self.backend.queue_key(queue), message_id),
            command(
                "hdel",
                self.backend.config_key(queue),
                message_id,
                f"{message_id}:rc",
                f"{message_id}:fr",
            ),
        ])
        deleted = removed == 1 and fields > 0
        if deleted:
            logger.debug(f"Deleted {message_id} from {queue}")
        return deleted

    def change_message_visibility(self, queue: str, message_id: str, vt: int) -> bool:
        """Hide a message for vt seconds from now.

        Returns:
            False if the message does not exist

        Raises:
            NotFoundError: If the queue does not exist
        """
        self._validator.validate(queue=queue, id=message_id, vt=vt)
        snapshot = self._snapshot(queue)
        return self.engine.change_visibility(queue, message_id, snapshot.due_after(vt))

    def close(self) -> None:
        """Close the backend connection."""
        self.backend.close()

    def __enter__(self) -> "QueueClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"QueueClient(namespace={self.backend.namespace!r}, realtime={self.realtime})"


__all__ = ["QueueClient"]
