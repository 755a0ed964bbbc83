# migrator/execution/retry.py

import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..core.logging import LoggingMixin

T = TypeVar('T')

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_MS = 1000


class RetryExecutor(LoggingMixin):
    """
    Bounded, fixed-delay retry for read-only ledger queries.

    Never wrap a state-changing call: a retried send can duplicate its
    on-chain effect.
    """

    def __init__(self,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 delay_ms: int = DEFAULT_DELAY_MS,
                 sleep: Callable[[float], None] = time.sleep,
                 retry_on: Tuple[Type[BaseException], ...] = (Exception,)):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1: {max_attempts}")
        self.max_attempts = max_attempts
        self.delay_ms = delay_ms
        self.retry_on = retry_on
        self._sleep = sleep

    def run(self,
            operation: Callable[[], T],
            max_attempts: Optional[int] = None,
            delay_ms: Optional[int] = None) -> T:
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        delay = delay_ms if delay_ms is not None else self.delay_ms
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1: {attempts}")

        retrying = Retrying(
            reraise=True,
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(delay / 1000),
            retry=retry_if_exception_type(self.retry_on),
            sleep=self._sleep,
            before_sleep=lambda state: self._log_retry(state, attempts),
        )
        return retrying(operation)

    def _log_retry(self, state: RetryCallState, attempts: int) -> None:
        self.log_warning(f"Operation failed, retrying... (Attempt {state.attempt_number}/{attempts})",
                         attempt=state.attempt_number,
                         error=str(state.outcome.exception()))
