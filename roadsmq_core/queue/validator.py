"""RoadSMQ Validator - Input Validation.

Every facade operation validates its arguments here before touching the
store.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from roadsmq_core.queue.attributes import (
    MAX_DELAY,
    MAX_PAYLOAD_SIZE,
    MIN_MESSAGE_SIZE,
    UNLIMITED,
)
from roadsmq_core.queue.errors import ValidationError

logger = logging.getLogger(__name__)

QUEUE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,160}$")
MESSAGE_ID_PATTERN = re.compile(r"^[A-Za-z0-9:]{32}$")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class ValidationRule:
    """A validation rule for one named parameter."""

    name: str
    validator: Callable[[Any], bool]
    error_message: str = "Validation failed"


class Validator:
    """Parameter validator.

    Rules are keyed by parameter name; parameters passed as None are
    skipped, so optional arguments are only checked when supplied.
    """

    def __init__(self):
        self._rules: Dict[str, ValidationRule] = {}

    def add_rule(self, rule: ValidationRule) -> "Validator":
        """Add a validation rule."""
        self._rules[rule.name] = rule
        return self

    def validate(self, **params: Any) -> None:
        """Validate parameters.

        Raises:
            ValidationError: On the first parameter that fails its rule
        """
        for name, value in params.items():
            if value is None:
                continue
            rule = self._rules.get(name)
            if rule is None:
                raise KeyError(f"No validation rule for {name}")
            if not rule.validator(value):
                logger.debug(f"Validation failed for {name}={value!r}")
                raise ValidationError(rule.error_message, details={name: value})


def default_validator() -> Validator:
    """Validator with the queue, id, vt, delay and maxsize rules."""
    return (
        Validator()
        .add_rule(ValidationRule(
            name="queue",
            validator=lambda v: isinstance(v, str) and bool(QUEUE_NAME_PATTERN.match(v)),
            error_message="Invalid queue name",
        ))
        .add_rule(ValidationRule(
            name="id",
            validator=lambda v: isinstance(v, str) and bool(MESSAGE_ID_PATTERN.match(v)),
            error_message="Invalid message id",
        ))
        .add_rule(ValidationRule(
            name="vt",
            validator=lambda v: _is_int(v) and 0 <= v <= MAX_DELAY,
            error_message=f"Visibility time must be between 0 and {MAX_DELAY}",
        ))
        .add_rule(ValidationRule(
            name="delay",
            validator=lambda v: _is_int(v) and 0 <= v <= MAX_DELAY,
            error_message=f"Delay must be between 0 and {MAX_DELAY}",
        ))
        .add_rule(ValidationRule(
            name="maxsize",
            validator=lambda v: _is_int(v) and (
                v == UNLIMITED or MIN_MESSAGE_SIZE <= v <= MAX_PAYLOAD_SIZE
            ),
            error_message=(
                f"Maximum message size must be between {MIN_MESSAGE_SIZE} "
                f"and {MAX_PAYLOAD_SIZE}"
            ),
        ))
    )


__all__ = [
    "Validator",
    "ValidationRule",
    "default_validator",
    "QUEUE_NAME_PATTERN",
    "MESSAGE_ID_PATTERN",
]
