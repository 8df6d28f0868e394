"""Rate limiting and backoff utilities for API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from kubernetes.client.exceptions import ApiException

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_PROVIDER_RATE_LIMIT_PER_SECOND = float(os.getenv("PROVIDER_RATE_LIMIT_PER_SECOND", "50.0"))

# Track last call times
_k8s_last_call_time: float = 0.0
_provider_last_call_time: float = 0.0
_provider_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Implements a simple token bucket-like rate limiter to prevent overwhelming
    the Kubernetes API server.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        current_time = time.time()
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND

        time_since_last_call = current_time - _k8s_last_call_time
        if time_since_last_call < min_interval:
            metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
            time.sleep(min_interval - time_since_last_call)

        _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_provider(func: _F) -> _F:
    """Decorator to rate limit storage provider API calls.

    Calls arrive from several pipeline threads sharing one client, so the
    spacing between calls is enforced under a lock.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _provider_last_call_time
        min_interval = 1.0 / _PROVIDER_RATE_LIMIT_PER_SECOND
        with _provider_lock:
            time_since_last_call = time.time() - _provider_last_call_time
            if time_since_last_call < min_interval:
                metrics.rate_limit_hits_total.labels(api_type="provider").inc()
                time.sleep(min_interval - time_since_last_call)
            _provider_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def handle_rate_limit_error(e: Exception, max_retries: int = 3) -> bool:
    """Check if an API exception is a rate limit error and handle it.

    Args:
        e: API exception
        max_retries: Maximum number of retries

    Returns:
        True if rate limit error was handled, False otherwise
    """
    if not isinstance(e, ApiException):
        return False

    # Kubernetes API rate limit errors typically return 429 or 503
    if e.status == 429 or (e.status == 503 and "rate limit" in str(e).lower()):
        # Exponential backoff: 1s, 2s, 4s
        retry_count = getattr(handle_rate_limit_error, "_retry_count", 0)
        if retry_count < max_retries:
            metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
            time.sleep(2 ** retry_count)
            handle_rate_limit_error._retry_count = retry_count + 1  # type: ignore
            return True
        handle_rate_limit_error._retry_count = 0  # type: ignore
        return False

    handle_rate_limit_error._retry_count = 0  # type: ignore
    return False


def wait_until(
    predicate: Callable[[], bool],
    timeout: float,
    initial_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Poll a predicate with bounded exponential backoff.

    Args:
        predicate: Callable returning True once the condition holds
        timeout: Hard deadline in seconds
        initial_delay: First delay between polls
        max_delay: Upper bound for a single delay
        backoff: Delay multiplier
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        True if the predicate held before the deadline, False otherwise
    """
    deadline = clock() + timeout
    delay = initial_delay
    while True:
        if predicate():
            return True
        remaining = deadline - clock()
        if remaining <= 0:
            return False
        sleep(min(delay, max_delay, remaining))
        delay *= backoff
