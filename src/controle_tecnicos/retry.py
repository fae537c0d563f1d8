"""Retry policy for rate-limited upstream calls."""

from dataclasses import dataclass

RATE_LIMITED = 429


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times a request may be sent and how long to wait in between.

    The default sends a request at most twice, waiting one second after a
    rate-limit response, which is what the public Nominatim fair-use policy
    expects from a well-behaved client.
    """

    max_attempts: int = 2
    delay: float = 1.0
    statuses: frozenset = frozenset({RATE_LIMITED})

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """True if a response with *status_code* on *attempt* (1-based) is retried."""
        return status_code in self.statuses and attempt < self.max_attempts

    @classmethod
    def with_retries(cls, retries: int, delay: float = 1.0) -> "RetryPolicy":
        return cls(max_attempts=retries + 1, delay=delay)


NO_RETRY = RetryPolicy(max_attempts=1, delay=0.0)
