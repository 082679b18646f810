"""
Exponential backoff policy for store write retries.

Usage:
    policy = BackoffPolicy(min_seconds=0.1, max_seconds=10.0)
    delay = policy.delay(attempt)   # attempt is 1 for the first failure
"""

import random
from typing import Callable

from influx_loader.core.config import LoaderConfig

DEFAULT_MIN_SECONDS = 0.1
DEFAULT_MAX_SECONDS = 10.0
DEFAULT_FACTOR = 2.0


class BackoffPolicy:
    """
    Stateless exponential backoff with an optional jitter.

    The delay after the n-th consecutive failure is
    ``min(max_seconds, min_seconds * factor ** (n - 1))``. With jitter the
    delay is drawn uniformly between ``min_seconds`` and that value.
    """

    def __init__(
        self,
        min_seconds: float = DEFAULT_MIN_SECONDS,
        max_seconds: float = DEFAULT_MAX_SECONDS,
        factor: float = DEFAULT_FACTOR,
        jitter: bool = False,
        rng: Callable[[float, float], float] | None = None,
    ):
        """
        Initialize backoff policy.

        Args:
            min_seconds: Delay after the first failure
            max_seconds: Upper bound for any delay
            factor: Growth factor between consecutive failures
            jitter: Randomise delays
            rng: Uniform sampler used for jitter (defaults to random.uniform)
        """
        if min_seconds <= 0 or max_seconds < min_seconds:
            raise ValueError(f"Invalid backoff bounds: min={min_seconds}, max={max_seconds}")
        if factor < 1:
            raise ValueError(f"Backoff factor must be at least 1, got {factor}")
        self.min_seconds = min_seconds
        self.max_seconds = max_seconds
        self.factor = factor
        self.jitter = jitter
        self.rng = rng or random.uniform

    @classmethod
    def from_config(cls, config: LoaderConfig) -> "BackoffPolicy":
        return cls(
            min_seconds=config.backoff_min_seconds,
            max_seconds=config.backoff_max_seconds,
            factor=config.backoff_factor,
            jitter=config.backoff_jitter,
        )

    def delay(self, attempt: int) -> float:
        """
        Delay to wait after the given failed attempt.

        Args:
            attempt: 1-based count of consecutive failures

        Returns:
            Delay in seconds
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        # float pow overflows past 2 ** 1024
        exponent = min(attempt - 1, 1024)
        try:
            delay = self.min_seconds * (self.factor ** exponent)
        except OverflowError:
            delay = self.max_seconds
        delay = min(delay, self.max_seconds)

        if self.jitter:
            delay = self.rng(self.min_seconds, delay)
        return delay
