"""Retry-with-backoff policy shared by the scrape and email stages.

The delay after failed attempt ``n`` (counting from 1) is ``2 ** n``
seconds: 2s, 4s, 8s ... There is no delay after the final attempt.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


class RetryExhaustedError(RuntimeError):
    """Raised once every attempt of a retried operation has failed."""

    def __init__(self, label: str, attempts: int, last_error: BaseException | None) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{label} failed after {attempts} attempts: {last_error}")


class RetryPolicy:
    """Run an operation up to ``max_attempts`` times with exponential backoff.

    ``sleep`` is handed to tenacity so tests can capture the delays instead
    of waiting them out. A policy keeps no state between calls.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_ATTEMPTS,
        multiplier: float = 2,
        sleep: Callable[[float], Any] = time.sleep,
        label: str = "operation",
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.multiplier = multiplier
        self.label = label
        self._sleep = sleep

    def _log_attempt(self, retry_state: RetryCallState) -> None:
        log.info("%s attempt %d of %d", self.label, retry_state.attempt_number, self.max_attempts)

    def _retrying(self) -> Retrying:
        return Retrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.multiplier, exp_base=2),
            before=self._log_attempt,
            before_sleep=before_sleep_log(log, logging.WARNING),
        )

    def call(self, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return self._retrying()(operation, *args, **kwargs)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            log.error("%s gave up after %d attempts: %s", self.label, self.max_attempts, last)
            raise RetryExhaustedError(self.label, self.max_attempts, last) from last


def with_retry(operation: Callable[..., T], max_attempts: int = DEFAULT_ATTEMPTS, **kwargs: Any) -> T:
    """Call ``operation()`` under a fresh :class:`RetryPolicy`."""
    return RetryPolicy(max_attempts, **kwargs).call(operation)
