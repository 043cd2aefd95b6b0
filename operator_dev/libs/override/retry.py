"""
Conflict Retry

Bounded exponential backoff around read-modify-write cycles that may lose an
optimistic-concurrency race with another controller.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from ..core.constants import RetryConstants
from ..core.utils import is_conflict

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Backoff:
    """Retry policy for conflict retries"""
    steps: int = RetryConstants.DEFAULT_STEPS
    duration: float = RetryConstants.DEFAULT_DURATION
    factor: float = RetryConstants.DEFAULT_FACTOR
    jitter: float = RetryConstants.DEFAULT_JITTER
    cap: float = RetryConstants.DEFAULT_CAP

    def delay(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """
        Delay before the retry following a failed attempt.

        Args:
            attempt: Zero-based index of the attempt that just failed
            rand: Source of uniform [0, 1) values for jitter

        Returns:
            Delay in seconds, never above the cap
        """
        base = min(self.duration * (self.factor ** attempt), self.cap)
        if self.jitter > 0:
            base += base * self.jitter * rand()
        return min(base, self.cap)

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> 'Backoff':
        """Build a policy from the 'retry' configuration section"""
        section = section or {}
        known = {k: v for k, v in section.items() if k in cls.__dataclass_fields__ and v is not None}
        return cls(**known)


DEFAULT_BACKOFF = Backoff()


def retry_on_conflict(fn: Callable[[], T], backoff: Backoff = DEFAULT_BACKOFF,
                      conflict: Callable[[Exception], bool] = is_conflict,
                      sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Run fn, retrying while it fails with a conflict error.

    fn must re-read the object it updates on every call; a conflict means any
    previously read copy is stale.

    Args:
        fn: Read-modify-write unit to run
        backoff: Retry policy
        conflict: Predicate selecting retryable errors
        sleep: Sleep function, injectable for tests

    Returns:
        Whatever fn returns on its first successful call

    Raises:
        Exception: The first non-conflict error, or the last conflict error
            once backoff.steps attempts have failed
    """
    steps = max(1, backoff.steps)
    last_error = None

    for attempt in range(steps):
        try:
            return fn()
        except Exception as e:
            if not conflict(e):
                raise
            last_error = e

        if attempt < steps - 1:
            wait_time = backoff.delay(attempt)
            logger.debug(f"Update conflict (attempt {attempt + 1}/{steps}), retrying in {wait_time:.3f}s")
            sleep(wait_time)

    logger.warning(f"Update conflict persisted after {steps} attempts")
    raise last_error
