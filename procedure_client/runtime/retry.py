"""
Backoff policy for subscription retries.

Subscriptions retry failed polls forever; this module only decides how long
to wait before each retry.
"""

from __future__ import annotations

import random

from pydantic import BaseModel


class BackoffPolicy(BaseModel):
    """Exponential backoff with a cap.

    The delay for attempt N is 0 when N is 0, otherwise
    min(base_delay * (exponential_base ** N), max_delay), plus optional jitter.

    Attributes:
        base_delay: Delay multiplier in seconds.
        max_delay: Maximum delay in seconds (caps backoff).
        exponential_base: Base for exponential backoff calculation.
        jitter: Whether to add up to 25% random jitter to delays.
    """

    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = False

    model_config = {"frozen": True}

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number.

        Args:
            attempt: Consecutive failures so far (0 means none).

        Returns:
            Delay in seconds before the next retry.
        """
        if attempt <= 0:
            return 0.0

        delay = self.base_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            delay += delay * 0.25 * random.random()

        return delay


# Default policy: 2s, 4s, 8s, 16s, then 30s
DEFAULT_BACKOFF_POLICY = BackoffPolicy()


def retry_delay(attempt_index: int) -> float:
    """Seconds to wait before retry ``attempt_index`` under the default policy."""
    return DEFAULT_BACKOFF_POLICY.calculate_delay(attempt_index)
