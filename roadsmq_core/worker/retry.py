"""RoadSMQ Backoff - Delay Strategies for Polling and Redelivery.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional


class BackoffStrategy(Enum):
    """Backoff strategies."""

    FIXED = auto()         # Fixed delay
    LINEAR = auto()        # Linear increase
    EXPONENTIAL = auto()   # Exponential increase
    FIBONACCI = auto()     # Fibonacci sequence


@dataclass
class BackoffConfig:
    """Backoff configuration.

    Attributes:
        initial_delay_ms: Delay for the first attempt
        max_delay_ms: Ceiling for any delay
        multiplier: Growth factor for exponential backoff
        jitter: Random jitter factor (0.0 to 1.0)
        strategy: Backoff strategy
    """

    initial_delay_ms: int = 1000
    max_delay_ms: int = 60000
    multiplier: float = 2.0
    jitter: float = 0.1
    strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL

    def __post_init__(self):
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("Delays must not be negative")
        if not 0.0 <= self.jitter <= 1.0:
            raise ValueError("Jitter must be between 0.0 and 1.0")


class BackoffPolicy:
    """Computes delays that grow with the attempt number.

    Used by the worker both for idle polling and for pushing a failed
    message's visibility further into the future on each redelivery.
    """

    def __init__(
        self,
        config: Optional[BackoffConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or BackoffConfig()
        self._rng = rng or random.Random()
        self._fibonacci_cache: List[int] = [0, 1]

    def get_delay_ms(self, attempt: int) -> float:
        """Calculate delay for attempt.

        Args:
            attempt: Attempt number (1-based); 0 or less means no delay

        Returns:
            Delay in milliseconds
        """
        if attempt <= 0:
            return 0

        base_delay = self._calculate_base_delay(attempt)
        spread = base_delay * self.config.jitter
        if spread:
            base_delay += self._rng.uniform(-spread, spread)

        return max(0.0, min(base_delay, self.config.max_delay_ms))

    def get_delay_seconds(self, attempt: int) -> int:
        """Delay for attempt rounded up to whole seconds."""
        delay_ms = self.get_delay_ms(attempt)
        return int(-(-delay_ms // 1000))

    def _calculate_base_delay(self, attempt: int) -> float:
        """Delay for an attempt before jitter and the ceiling."""
        growth = {
            BackoffStrategy.FIXED: lambda n: 1,
            BackoffStrategy.LINEAR: lambda n: n,
            BackoffStrategy.EXPONENTIAL: lambda n: self.config.multiplier ** (n - 1),
            BackoffStrategy.FIBONACCI: self._fibonacci,
        }[self.config.strategy]
        return self.config.initial_delay_ms * growth(attempt)

    def _fibonacci(self, n: int) -> int:
        cache = self._fibonacci_cache
        while len(cache) <= n:
            cache.append(cache[-2] + cache[-1])
        return cache[n]


__all__ = ["BackoffPolicy", "BackoffConfig", "BackoffStrategy"]
