"""Retry with exponential backoff for the rewrite oracle call."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import openai

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_TYPES: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,
)
_TRANSIENT_PATTERNS = (
    "timeout",
    "timed out",
    "connection",
    "rate limit",
    "429",
    "500",
    "502",
    "503",
    "504",
    "connection reset",
    "broken pipe",
    "temporary",
    "unavailable",
)


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter_factor: float = 0.0

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        base = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if not self.jitter_factor:
            return base
        return base + base * self.jitter_factor * (2 * random.random() - 1)


class TransientError(Exception):
    """Raise to force a retry regardless of the underlying error type."""


class PermanentError(Exception):
    """Raise to stop retrying immediately."""


def is_transient_error(error: BaseException) -> bool:
    if isinstance(error, TransientError):
        return True
    if isinstance(error, PermanentError):
        return False
    if isinstance(error, _TRANSIENT_TYPES):
        return True
    message = str(error).lower()
    return any(pattern in message for pattern in _TRANSIENT_PATTERNS)


def retry_with_backoff(
    func: Callable[..., T],
    config: RetryConfig,
    *args: Any,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """Call ``func`` until it succeeds, retrying transient failures only.

    Non-transient errors and the last transient error propagate unchanged.
    """
    attempts = max(1, config.max_attempts)
    for attempt in range(attempts):
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            if not is_transient_error(exc):
                logger.error("retry_permanent_error attempt=%s: %s", attempt + 1, exc)
                raise
            if attempt == attempts - 1:
                logger.error("retry_exhausted attempts=%s: %s", attempts, exc)
                raise
            delay = config.delay_for(attempt)
            logger.warning(
                "retry_transient_error attempt=%s/%s delay_s=%.2f: %s",
                attempt + 1,
                attempts,
                delay,
                exc,
            )
            sleep(delay)
            continue
        if attempt > 0:
            logger.info("retry_succeeded attempt=%s", attempt + 1)
        return result
    raise RuntimeError("retry_with_backoff exited without a result")
