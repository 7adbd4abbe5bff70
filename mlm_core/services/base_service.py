"""
Base service class.

Provides common functionality for all service classes including session management,
logging, typed results and helper decorators.
"""

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.utils.exceptions import ConcurrencyConflictError, ErrorCode


# Type variable for generic decorator return types
T = TypeVar("T")


@dataclass
class ServiceResult:
    """
    Standard service result container.

    Domain failures travel as results, never as exceptions, so callers can
    decide per failure whether to stop or skip.
    """
    success: bool
    data: Any = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        """Successful result."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error_code: ErrorCode, error: str) -> "ServiceResult":
        """Failed result with error kind and human-readable message."""
        return cls(success=False, error=error, error_code=error_code)


class BaseService:
    """
    Base service class.

    Provides common functionality for all service classes:
    - Session management
    - Logging with bound service context
    - Transaction helpers
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
        """
        self.session = session
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        """
        Commit current transaction.

        Raises:
            Exception: If commit fails
        """
        await self.session.commit()

    async def rollback(self) -> None:
        """
        Rollback current transaction.

        Raises:
            Exception: If rollback fails
        """
        await self.session.rollback()


def service_boundary(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator converting infrastructure exceptions into failed results.

    Store failures roll the session back and become STORE_UNAVAILABLE;
    exhausted optimistic retries become CONCURRENCY_CONFLICT. Domain errors
    are already results and pass through untouched.

    Usage:
        @service_boundary
        async def my_service_method(self, ...) -> ServiceResult:
            ...

    Args:
        func: Async method returning ServiceResult

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            return await func(self, *args, **kwargs)
        except ConcurrencyConflictError as e:
            self.logger.error(
                f"Concurrency conflict in {func.__name__}",
                extra={"function": func.__name__, "attempts": e.attempts},
            )
            return ServiceResult.fail(ErrorCode.CONCURRENCY_CONFLICT, str(e))
        except SQLAlchemyError as e:
            await self.rollback()
            self.logger.opt(exception=e).error(
                f"Store failure in {func.__name__}",
                extra={"function": func.__name__, "error": str(e)},
            )
            return ServiceResult.fail(
                ErrorCode.STORE_UNAVAILABLE, "Ledger store unavailable"
            )

    return wrapper
