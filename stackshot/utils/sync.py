"""Synchronization utilities used while waiting on remote state"""

import time
from typing import Callable

Waiter = Callable[[], None]
"""Blocks between two polls. Any zero-argument callable can be used, e.g., a no-op in tests."""


class FixedDelayWaiter:
    """Waits a constant number of seconds on every call, there is no backoff."""

    delay: float

    def __init__(self, delay: float):
        if delay < 0:
            raise ValueError(f"delay must not be negative, got {delay}")
        self.delay = delay

    def __call__(self) -> None:
        time.sleep(self.delay)

    def __repr__(self):
        return f"FixedDelayWaiter(delay={self.delay})"
