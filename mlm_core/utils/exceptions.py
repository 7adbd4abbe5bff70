"""
Exception handling utilities.

Defines error codes returned in service results and categorized exception
types for proper error handling.
"""

from enum import StrEnum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError


class ErrorCode(StrEnum):
    """Error kinds carried by failed service results."""

    NOT_FOUND = "not_found"
    SPONSOR_NOT_FOUND = "sponsor_not_found"
    SPONSOR_NOT_PLACED = "sponsor_not_placed"
    INVALID_INPUT = "invalid_input"
    ALREADY_PLACED = "already_placed"
    POSITION_OCCUPIED = "position_occupied"
    NOT_IN_DOWNLINE = "not_in_downline"
    NO_POSITION_AVAILABLE = "no_position_available"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    INACTIVE_PACKAGE = "inactive_package"
    DUPLICATE_USERNAME = "duplicate_username"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_INACTIVE = "account_inactive"
    CONCURRENCY_CONFLICT = "concurrency_conflict"
    STORE_UNAVAILABLE = "store_unavailable"


class ConcurrencyConflictError(Exception):
    """Raised when a unit of work keeps losing optimistic-lock races."""

    def __init__(self, operation: str, attempts: int) -> None:
        self.operation = operation
        self.attempts = attempts
        super().__init__(
            f"{operation} gave up after {attempts} conflicting attempts"
        )


# Exception categories based on handling strategy

# Retry the whole unit of work - another writer changed the same record
RETRYABLE_CONFLICTS = (
    StaleDataError,
)

# Retry placement - a concurrent registration claimed the same slot
PLACEMENT_CONFLICTS = (
    StaleDataError,
    IntegrityError,
)
