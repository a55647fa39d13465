"""
Resilience patterns for external route-data calls.

Provides a circuit breaker and retry with exponential backoff for the
optional sea-route provider. Failures here never reach route callers:
the route engine treats an open circuit like an unconfigured provider.
"""
import functools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation
    OPEN = "open"          # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitOpenError(Exception):
    """Raised when a call is attempted through an open circuit."""


@dataclass
class CircuitBreaker:
    """
    Thread-safe circuit breaker.

    After ``failure_threshold`` consecutive failures the circuit opens and
    calls are rejected for ``recovery_timeout`` seconds. The next call is
    then let through half-open; ``half_open_max_calls`` successes close it,
    any failure re-opens it.

    Usage:
        breaker = CircuitBreaker(name="sea_route_api")

        @breaker
        def fetch_route(...):
            ...
    """
    name: str
    failure_threshold: int = 3
    recovery_timeout: float = 120.0  # seconds
    half_open_max_calls: int = 1

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _half_open_calls: int = field(default=0, init=False)
    _last_failure_time: Optional[datetime] = field(default=None, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False)

    @property
    def state(self) -> CircuitState:
        return self._check_state()

    @property
    def is_open(self) -> bool:
        return self._check_state() == CircuitState.OPEN

    def _check_state(self) -> CircuitState:
        with self._lock:
            if self._state == CircuitState.OPEN and self._last_failure_time:
                elapsed = (datetime.now(timezone.utc) - self._last_failure_time).total_seconds()
                if elapsed >= self.recovery_timeout:
                    self._state = CircuitState.HALF_OPEN
                    self._half_open_calls = 0
                    logger.info(f"Circuit breaker '{self.name}' transitioning to HALF_OPEN")
            return self._state

    def record_success(self):
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._half_open_calls += 1
                if self._half_open_calls >= self.half_open_max_calls:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    logger.info(f"Circuit breaker '{self.name}' CLOSED - service recovered")
            else:
                self._failure_count = 0

    def record_failure(self, error: Exception):
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = datetime.now(timezone.utc)
            logger.warning(f"Circuit breaker '{self.name}' recorded failure: {error}")

            if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        f"Circuit breaker '{self.name}' OPENED after {self._failure_count} failures"
                    )
                self._state = CircuitState.OPEN

    def reset(self):
        """Force the circuit closed."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._half_open_calls = 0
            self._last_failure_time = None

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        """Decorator to wrap a function with the breaker."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            if self._check_state() == CircuitState.OPEN:
                raise CircuitOpenError(
                    f"Circuit breaker '{self.name}' is OPEN, "
                    f"retry in {self.recovery_timeout}s"
                )
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                self.record_failure(e)
                raise
            self.record_success()
            return result

        return wrapper

    def get_status(self) -> dict:
        with self._lock:
            return {
                'name': self.name,
                'state': self._state.value,
                'failure_count': self._failure_count,
                'last_failure': self._last_failure_time.isoformat() if self._last_failure_time else None,
                'failure_threshold': self.failure_threshold,
                'recovery_timeout_seconds': self.recovery_timeout,
            }


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 8.0,
    exceptions: tuple = (Exception,),
):
    """
    Decorator adding retry with exponential backoff.

    The last exception is re-raised once attempts are exhausted.

    Usage:
        @with_retry(max_attempts=3, exceptions=(requests.RequestException,))
        def call_provider():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
            retry=retry_if_exception_type(exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return func(*args, **kwargs)

        return wrapper

    return decorator
