"""Retry policy for optimistic ledger writes."""

import logging

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from meterline.domains.usage.exceptions import LedgerConflictError

logger = logging.getLogger(__name__)


def _log_conflict(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(f"Ledger write conflict, attempt {retry_state.attempt_number}: {exc}")


def retry_on_conflict(max_attempts: int):
    """Re-run an async read-decide-write unit while it loses CAS races.

    Jittered backoff keeps concurrent writers on the same key from retrying
    in lockstep. The last LedgerConflictError is re-raised unchanged.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_exception_type(LedgerConflictError),
        wait=wait_random_exponential(multiplier=0.005, max=0.1),
        before_sleep=_log_conflict,
        reraise=True,
    )
