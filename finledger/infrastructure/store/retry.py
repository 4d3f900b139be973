"""
Optimistic-concurrency retry for the layer that owns the store connection

Use cases never retry on their own. The caller wraps the whole operation
(re-fetch included) and, on ConflictError, rolls the unit of work back and
runs it again.
"""
import logging
from typing import Callable, TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finledger.config import get_settings
from finledger.domain.errors import ConflictError
from finledger.infrastructure.store.base import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_on_conflict(
    store: RecordStore,
    operation: Callable[[], T],
    attempts: int | None = None,
    wait_seconds: float | None = None,
) -> T:
    """
    Run operation, retrying it on ConflictError.

    Args:
        store: Store whose unit of work is rolled back between attempts
        operation: Zero-argument callable performing the whole read-modify-write
        attempts: Total attempts (default: CONFLICT_RETRY_ATTEMPTS)
        wait_seconds: Base back-off (default: CONFLICT_RETRY_WAIT_SECONDS)

    Raises:
        ConflictError: if every attempt lost the race

    Example:
        >>> retry_on_conflict(store, lambda: ApplyDebtPaymentUseCase(store).execute(owner, 7, "20"))
    """
    settings = get_settings()
    attempts = attempts or settings.CONFLICT_RETRY_ATTEMPTS
    base_wait = settings.CONFLICT_RETRY_WAIT_SECONDS if wait_seconds is None else wait_seconds

    def _before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "Write conflict (attempt %d/%d): %s - rolling back and retrying",
            state.attempt_number, attempts, exc,
        )
        store.rollback()

    retryer = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base_wait, max=base_wait * 10),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=_before_sleep,
        reraise=True,
    )
    return retryer(operation)
