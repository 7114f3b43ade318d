"""Wall clock budget tracking for exchanges."""

import time
from typing import Optional


class TimeoutHandler:
    """Tracks the time budget of a single exchange."""

    def __init__(self, timeout: float):
        """Initialize timeout handler.

        Args:
            timeout: Overall budget in seconds.
        """
        self.timeout = timeout
        self._start_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since start."""
        if self._start_time is None:
            return 0.0
        return time.monotonic() - self._start_time

    @property
    def remaining(self) -> float:
        """Seconds left of the budget, negative once it is exceeded."""
        return self.timeout - self.elapsed

    @property
    def is_expired(self) -> bool:
        """Whether the budget has been used up."""
        return self.remaining <= 0

    def start(self) -> "TimeoutHandler":
        """Start the timer."""
        self._start_time = time.monotonic()
        return self
