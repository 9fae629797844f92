"""
Circuit breaker for the call provider.
Fails a request immediately while the provider is known to be down, instead of
waiting out another timeout. It never retries.

Usage:
    from scripts.lib.circuit_breaker import CircuitBreaker

    breaker = CircuitBreaker.get("vapi", failure_threshold=5, reset_timeout=60)
    breaker.check()  # raises CircuitOpenError while open
    try:
        calls = await fetch()
        breaker.record_success()
    except ProviderUnavailableError:
        breaker.record_failure()
        raise
"""
import time

from scripts.lib.errors import CircuitOpenError
from scripts.lib.logger import setup_logger

logger = setup_logger("circuit_breaker")


class CircuitBreaker:
    """
    Circuit breaker with three states: CLOSED, OPEN, HALF_OPEN.

    CLOSED: Requests pass through normally. Failures are counted.
    OPEN: Requests are blocked. After reset_timeout, moves to HALF_OPEN.
    HALF_OPEN: One test request allowed. Success closes, failure re-opens.
    """

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"

    _instances: dict = {}

    def __init__(self, service: str, failure_threshold: int = 5,
                 reset_timeout: int = 60):
        self.service = service
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.state = self.CLOSED
        self.failure_count = 0
        self.last_failure_time = 0.0

    @classmethod
    def get(cls, service: str, **kwargs) -> "CircuitBreaker":
        """Get or create a circuit breaker for a service."""
        if service not in cls._instances:
            cls._instances[service] = cls(service, **kwargs)
        return cls._instances[service]

    @classmethod
    def reset_all(cls):
        """Forget every registered breaker."""
        cls._instances.clear()

    def can_execute(self) -> bool:
        """Check if a request is allowed through the breaker."""
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - self.last_failure_time
            if elapsed >= self.reset_timeout:
                self.state = self.HALF_OPEN
                logger.info(
                    "Circuit half-open for '%s' — allowing test request",
                    self.service,
                )
                return True
            return False

        return True  # HALF_OPEN

    def check(self):
        """Raise CircuitOpenError if the breaker blocks requests."""
        if not self.can_execute():
            raise CircuitOpenError(
                self.service, self.failure_count, self.time_until_reset,
            )

    def record_success(self):
        if self.state == self.HALF_OPEN:
            logger.info(
                "Circuit closed for '%s' — service recovered", self.service,
            )
        self.state = self.CLOSED
        self.failure_count = 0

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            self.state = self.OPEN
            logger.warning(
                "Circuit re-opened for '%s' — test request failed",
                self.service,
            )
        elif self.failure_count >= self.failure_threshold:
            self.state = self.OPEN
            logger.warning(
                "Circuit opened for '%s' — %d consecutive failures "
                "(threshold: %d, reset in %ds)",
                self.service, self.failure_count,
                self.failure_threshold, self.reset_timeout,
            )

    @property
    def time_until_reset(self) -> float:
        """Seconds until the breaker resets (0 if not open)."""
        if self.state != self.OPEN:
            return 0.0
        elapsed = time.time() - self.last_failure_time
        return max(0.0, self.reset_timeout - elapsed)

    def status(self) -> dict:
        """Return breaker status as a dict."""
        return {
            "service": self.service,
            "state": self.state,
            "failures": self.failure_count,
            "threshold": self.failure_threshold,
            "time_until_reset": round(self.time_until_reset, 1),
        }
