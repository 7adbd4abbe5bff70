"""
Database decorators for automatic error handling, rollback and retry.

Provides helpers to run a unit of work in a savepoint of an AsyncSession with
commit on success, rollback on error and re-execution when an optimistic
lock (version column) conflict is detected.
"""

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.config.settings import settings
from mlm_core.utils.exceptions import ConcurrencyConflictError, RETRYABLE_CONFLICTS


T = TypeVar("T")


def _is_failed_result(result: Any) -> bool:
    """Whether a unit returned a failed service result."""
    return getattr(result, "success", True) is False


async def run_in_transaction(
    session: AsyncSession,
    unit: Callable[[], Awaitable[T]],
    *,
    operation: str,
    retry_on: tuple[type[Exception], ...] = RETRYABLE_CONFLICTS,
    max_attempts: int | None = None,
) -> T:
    """
    Run unit of work in a savepoint, commit it, re-run it on conflict.

    Each attempt runs inside `session.begin_nested()`. A conflict or a
    failed service result rolls back only the savepoint, so instances the
    caller loaded before the call stay usable; only rows the unit changed
    are expired. The unit must re-read every record it mutates. Any other
    error rolls back the whole session and propagates.

    Args:
        session: Async database session
        unit: Coroutine factory performing reads, mutations and flushes
        operation: Name used in logs and in the conflict error
        retry_on: Exception types that trigger a retry
        max_attempts: Override for settings.optimistic_lock_max_retries

    Returns:
        Whatever the unit returned

    Raises:
        ConcurrencyConflictError: If every attempt conflicted
    """
    attempts = max_attempts or settings.optimistic_lock_max_retries

    for attempt in range(1, attempts + 1):
        savepoint = await session.begin_nested()
        try:
            result = await unit()
            if _is_failed_result(result):
                await savepoint.rollback()
            else:
                await savepoint.commit()
        except retry_on as e:
            await savepoint.rollback()
            logger.warning(
                "Optimistic lock conflict, retrying unit of work",
                extra={
                    "operation": operation,
                    "attempt": attempt,
                    "max_attempts": attempts,
                    "error": type(e).__name__,
                },
            )
            continue
        except Exception:
            await session.rollback()
            raise

        await session.commit()
        return result

    await session.rollback()
    raise ConcurrencyConflictError(operation, attempts)


def retry_on_stale_data(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Decorator running a service method as a retried unit of work.

    The decorated method must belong to an object exposing `session` and
    must re-read the records it mutates on every call.

    Usage:
        @retry_on_stale_data
        async def credit(self, member_id: int, amount: Decimal):
            wallet = await self.store.get_wallet_for_update(...)
            wallet.balance += amount
            await self.store.save_wallet(wallet)

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
        return await run_in_transaction(
            self.session,
            lambda: func(self, *args, **kwargs),
            operation=func.__qualname__,
        )

    return wrapper
