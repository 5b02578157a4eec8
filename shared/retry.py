"""
Retry mechanism for resilient service calls.
"""

import random
import threading
import time
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, TypeVar

from shared.config import ResourceManagerSettings
from shared.errors import ResourceManagerException
from shared.logging import get_logger, operation_var
from shared.tracing import get_tracer, traced_span

T = TypeVar("T")

DEFAULT_RETRYABLE_CODES = frozenset({500, 502, 503, 504})


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(self,
                 max_attempts: int = 6,
                 base_delay: float = 1.0,
                 max_delay: float = 32.0,
                 exponential_base: float = 2.0,
                 jitter: bool = True,
                 backoff_strategy: str = "exponential",
                 retryable_codes: Iterable[int] = DEFAULT_RETRYABLE_CODES):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.backoff_strategy = backoff_strategy
        self.retryable_codes: FrozenSet[int] = frozenset(retryable_codes)

    @classmethod
    def from_settings(cls, settings: ResourceManagerSettings) -> "RetryConfig":
        return cls(
            max_attempts=settings.max_attempts,
            base_delay=settings.base_delay,
            max_delay=settings.max_delay,
            exponential_base=settings.exponential_base,
            jitter=settings.jitter,
            retryable_codes=settings.retryable_status_codes,
        )

    @classmethod
    def no_retries(cls) -> "RetryConfig":
        return cls(max_attempts=1, base_delay=0.0, max_delay=0.0, jitter=False)

    def is_retryable(self, error: ResourceManagerException) -> bool:
        return error.code in self.retryable_codes

    def __repr__(self) -> str:
        return (
            f"RetryConfig(max_attempts={self.max_attempts}, base_delay={self.base_delay}, "
            f"max_delay={self.max_delay}, retryable_codes={sorted(self.retryable_codes)})"
        )


def _calculate_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay between retry attempts."""
    if config.backoff_strategy == "exponential":
        delay = config.base_delay * (config.exponential_base ** (attempt - 1))
    elif config.backoff_strategy == "linear":
        delay = config.base_delay * attempt
    elif config.backoff_strategy == "fixed":
        delay = config.base_delay
    else:
        delay = config.base_delay

    # Apply max delay cap
    delay = min(delay, config.max_delay)

    # Add jitter if enabled
    if config.jitter:
        jitter_amount = delay * 0.1  # 10% jitter
        jitter = random.uniform(-jitter_amount, jitter_amount)
        delay += jitter

    return max(0.0, delay)


class RetryStats:
    """Thread-safe per-operation attempt counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self._stats: Dict[str, Dict[str, int]] = {}

    def _bump(self, name: str, counter: str):
        with self._lock:
            stats = self._stats.setdefault(
                name, {"attempts": 0, "retries": 0, "successes": 0, "failures": 0}
            )
            stats[counter] += 1

    def record_attempt(self, name: str):
        self._bump(name, "attempts")

    def record_retry(self, name: str):
        self._bump(name, "retries")

    def record_success(self, name: str):
        self._bump(name, "successes")

    def record_failure(self, name: str):
        self._bump(name, "failures")

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get a snapshot of retry statistics."""
        with self._lock:
            return {
                name: {
                    **stats,
                    "success_rate": stats["successes"] / max(1, stats["successes"] + stats["failures"])
                }
                for name, stats in self._stats.items()
            }


def _error_fields(error: ResourceManagerException) -> Dict[str, Any]:
    """Structured log fields for a failed call, trace id included."""
    return error.to_response().model_dump(mode="json", exclude_none=True)


class RetryController:
    """Runs service calls with bounded exponential backoff.

    Only ``ResourceManagerException`` codes listed in the config are retried.
    Once the attempt budget is spent the last failure is raised as-is. Any
    other exception is wrapped into an unclassified
    ``ResourceManagerException`` and never retried.
    """

    def __init__(self,
                 config: Optional[RetryConfig] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 tracing: bool = True):
        self.config = config or RetryConfig()
        self.stats = RetryStats()
        self._sleep = sleep
        self.logger = get_logger("resource_manager.retry")
        self.tracer = get_tracer("resource_manager.retry", enabled=tracing)

    def call(self, operation: str, func: Callable[..., T], *args, **kwargs) -> T:
        token = operation_var.set(operation)
        try:
            with traced_span(self.tracer, f"resourcemanager.{operation}",
                             max_attempts=self.config.max_attempts) as span:
                result, attempts = self._run(operation, func, args, kwargs)
                span.set_attribute("attempts", attempts)
                return result
        finally:
            operation_var.reset(token)

    def _run(self, operation: str, func: Callable[..., T], args, kwargs):
        config = self.config
        attempt = 0
        while True:
            attempt += 1
            self.stats.record_attempt(operation)
            self.logger.debug(
                "Retry attempt",
                attempt=attempt,
                max_attempts=config.max_attempts,
                operation=operation
            )
            try:
                result = func(*args, **kwargs)
            except ResourceManagerException as e:
                if not config.is_retryable(e):
                    self.stats.record_failure(operation)
                    self.logger.info(
                        "Terminal failure",
                        attempt=attempt,
                        operation=operation,
                        **_error_fields(e)
                    )
                    raise
                if attempt >= config.max_attempts:
                    self.stats.record_failure(operation)
                    self.logger.error(
                        "All retry attempts exhausted",
                        attempt=attempt,
                        max_attempts=config.max_attempts,
                        operation=operation,
                        **_error_fields(e)
                    )
                    raise

                delay = _calculate_delay(attempt, config)
                self.stats.record_retry(operation)
                self.logger.warning(
                    "Retry attempt failed, waiting before next attempt",
                    attempt=attempt,
                    delay=delay,
                    operation=operation,
                    code=e.code,
                    error=e.message
                )
                self._sleep(delay)
            except Exception as e:
                self.stats.record_failure(operation)
                self.logger.error(
                    "Unclassified failure",
                    attempt=attempt,
                    operation=operation,
                    error=str(e),
                    exception_type=e.__class__.__name__
                )
                raise ResourceManagerException.wrap(e) from e
            else:
                self.stats.record_success(operation)
                if attempt > 1:
                    self.logger.info(
                        "Retry succeeded",
                        attempt=attempt,
                        operation=operation
                    )
                return result, attempt
