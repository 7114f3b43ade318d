"""Retry policy for request/response exchanges.

Every attempt sends a burst of identical requests and waits for one
response. Both the burst size and the time waited per attempt grow
until the overall time budget of the exchange is used up.
"""

from dataclasses import dataclass

# Lowest sane per attempt timeout in seconds
DEFAULT_MIN_TIMEOUT = 0.035


@dataclass
class RetryPolicy:
    """Adaptive retry policy with growing request bursts."""
    min_timeout: float = DEFAULT_MIN_TIMEOUT
    initial_burst: float = 1.0
    burst_growth: float = 2.0

    def __post_init__(self):
        if self.min_timeout <= 0:
            raise ValueError(f"min_timeout must be positive, got {self.min_timeout}")
        if self.initial_burst < 1:
            raise ValueError(f"initial_burst must be at least 1, got {self.initial_burst}")
        if self.burst_growth < 1:
            raise ValueError(f"burst_growth must be at least 1, got {self.burst_growth}")

    def floor_timeout(self, timeout: float) -> float:
        """Raise timeouts below the minimum to the minimum."""
        return max(timeout, self.min_timeout)

    def next_timeout(self, current: float, remaining: float) -> float:
        """Per attempt timeout of the next attempt.

        Doubles the current timeout unless that would overshoot the
        remaining budget, in which case exactly the remainder is used.
        """
        if remaining <= current:
            return remaining
        return current * 2

    def next_burst(self, burst: float) -> float:
        return burst * self.burst_growth

    @staticmethod
    def burst_count(burst: float) -> int:
        """Number of requests to send for an accumulated burst value."""
        # floor: 1.2x growth sends 1, 1, 1, 1, 2, 2, 2, 3... A loop counting
        # up to the float in steps of one would send the ceiling instead.
        return max(1, int(burst))


def token_retry_policy() -> RetryPolicy:
    """Create the policy for token handshakes.

    35ms minimum timeout, burst grows by 1.2x per attempt.
    """
    return RetryPolicy(burst_growth=1.2)


def request_retry_policy() -> RetryPolicy:
    """Create the policy for token protected requests.

    35ms minimum timeout, burst doubles per attempt.
    """
    return RetryPolicy(burst_growth=2.0)
