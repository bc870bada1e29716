"""
Resilience patterns for outbound calls made by the PASSAGE API.

A circuit breaker stops hammering a failing collaborator (the marine
weather feed) and tenacity retries absorb transient network errors.
"""
import functools
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, TypeVar

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Calls flow normally
    OPEN = "open"            # Calls rejected until the recovery timeout passes
    HALF_OPEN = "half_open"  # Trial calls decide whether to close again


class CircuitOpenError(Exception):
    """Raised instead of calling a collaborator whose breaker is open."""


@dataclass
class CircuitBreaker:
    """
    Thread-safe circuit breaker.

    Usage:
        breaker = CircuitBreaker(name="marine_weather")
        data = breaker.call(fetch, url)
    """
    name: str
    failure_threshold: int = 5
    recovery_timeout: float = 60.0  # seconds
    half_open_max_calls: int = 2
    clock: Callable[[], float] = time.monotonic

    _state: CircuitState = field(default=CircuitState.CLOSED, init=False)
    _failure_count: int = field(default=0, init=False)
    _success_count: int = field(default=0, init=False)
    _opened_at: Optional[float] = field(default=None, init=False)
    _half_open_successes: int = field(default=0, init=False)
    _half_open_in_flight: int = field(default=0, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False)

    @property
    def state(self) -> CircuitState:
        """Current state, moving OPEN to HALF_OPEN once the timeout has passed."""
        with self._lock:
            if (self._state == CircuitState.OPEN and self._opened_at is not None
                    and self.clock() - self._opened_at >= self.recovery_timeout):
                self._state = CircuitState.HALF_OPEN
                self._half_open_successes = 0
                self._half_open_in_flight = 0
                logger.info(f"Circuit breaker '{self.name}' HALF_OPEN, allowing trial calls")
            return self._state

    @property
    def is_open(self) -> bool:
        return self.state == CircuitState.OPEN

    def record_success(self):
        with self._lock:
            self._success_count += 1
            if self._state == CircuitState.HALF_OPEN:
                self._half_open_successes += 1
                if self._half_open_successes >= self.half_open_max_calls:
                    self._state = CircuitState.CLOSED
                    self._failure_count = 0
                    logger.info(f"Circuit breaker '{self.name}' CLOSED, service recovered")
            elif self._state == CircuitState.CLOSED:
                self._failure_count = max(0, self._failure_count - 1)

    def record_failure(self, error: Exception):
        with self._lock:
            self._failure_count += 1
            logger.warning(f"Circuit breaker '{self.name}' recorded failure: {error}")
            if (self._state == CircuitState.HALF_OPEN
                    or self._failure_count >= self.failure_threshold):
                self._state = CircuitState.OPEN
                self._opened_at = self.clock()
                logger.warning(
                    f"Circuit breaker '{self.name}' OPEN after {self._failure_count} failures"
                )

    def _admit(self) -> bool:
        """
        Reserve a slot for one call, or raise CircuitOpenError.

        Returns:
            True if the call is a HALF_OPEN trial that must be released
        """
        with self._lock:
            state = self.state
            if state == CircuitState.OPEN:
                raise CircuitOpenError(
                    f"Circuit breaker '{self.name}' is OPEN; retry in {self.recovery_timeout:.0f}s"
                )
            if state == CircuitState.HALF_OPEN:
                if self._half_open_in_flight >= self.half_open_max_calls:
                    raise CircuitOpenError(
                        f"Circuit breaker '{self.name}' is HALF_OPEN with "
                        f"{self._half_open_in_flight} trial calls in flight"
                    )
                self._half_open_in_flight += 1
                return True
            return False

    def _release(self):
        with self._lock:
            self._half_open_in_flight = max(0, self._half_open_in_flight - 1)

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run ``func`` through the breaker.

        While HALF_OPEN at most ``half_open_max_calls`` calls run at once;
        the rest are rejected as if the breaker were open.
        """
        trial = self._admit()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self.record_failure(e)
            raise
        else:
            self.record_success()
            return result
        finally:
            if trial:
                self._release()

    def __call__(self, func: Callable[..., T]) -> Callable[..., T]:
        """Decorator form of ``call``."""
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return self.call(func, *args, **kwargs)
        return wrapper

    def reset(self):
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._success_count = 0
            self._opened_at = None
            self._half_open_successes = 0
            self._half_open_in_flight = 0

    def get_status(self) -> dict:
        state = self.state
        with self._lock:
            return {
                'name': self.name,
                'state': state.value,
                'failure_count': self._failure_count,
                'success_count': self._success_count,
                'failure_threshold': self.failure_threshold,
                'recovery_timeout_seconds': self.recovery_timeout,
            }


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 0.2,
    max_wait: float = 2.0,
    exceptions: tuple = (Exception,),
):
    """
    Decorator adding exponential-backoff retries.

    Args:
        max_attempts: Total attempts including the first
        min_wait: Minimum wait between attempts (seconds)
        max_wait: Maximum wait between attempts (seconds)
        exceptions: Exception types worth retrying
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
            retry=retry_if_exception_type(exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return func(*args, **kwargs)

        return wrapper

    return decorator


# Registry for health monitoring
_circuit_breaker_registry: Dict[str, CircuitBreaker] = {}


def register_circuit_breaker(breaker: CircuitBreaker) -> CircuitBreaker:
    _circuit_breaker_registry[breaker.name] = breaker
    return breaker


def get_all_circuit_breaker_status() -> dict:
    return {
        name: breaker.get_status()
        for name, breaker in _circuit_breaker_registry.items()
    }


marine_weather_breaker = register_circuit_breaker(CircuitBreaker(
    name="marine_weather",
    failure_threshold=5,
    recovery_timeout=120.0,
))
