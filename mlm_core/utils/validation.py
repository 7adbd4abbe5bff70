"""Input validation utilities."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from mlm_core.config.business_constants import (
    MONEY_QUANT,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from mlm_core.models.enums import Leg


def is_valid_id(value: Any) -> bool:
    """
    Check that value is a usable record identifier.

    Args:
        value: Candidate ID

    Returns:
        True for positive integers (bool excluded)
    """
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def to_decimal(value: Any) -> Decimal | None:
    """
    Convert value to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Args:
        value: int, str, float or Decimal

    Returns:
        Decimal or None if not convertible / not finite
    """
    if isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def validate_positive_amount(value: Any) -> Decimal | None:
    """
    Validate a monetary amount.

    Args:
        value: Amount to validate

    Returns:
        Decimal amount if strictly positive, None otherwise
    """
    amount = to_decimal(value)
    if amount is None or amount <= 0:
        return None
    return amount


def quantize_money(amount: Decimal) -> Decimal:
    """Round to the MoneyType scale."""
    return amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def parse_leg(value: Any) -> Leg | None:
    """
    Parse explicit placement position.

    Args:
        value: "left" / "right" or Leg

    Returns:
        Leg or None if invalid
    """
    try:
        return Leg(value)
    except ValueError:
        return None


def validate_username(username: str | None) -> str | None:
    """
    Validate username.

    Returns:
        Error message or None if valid
    """
    if not username or len(username.strip()) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} characters"
    if len(username.strip()) > USERNAME_MAX_LENGTH:
        return f"Username cannot exceed {USERNAME_MAX_LENGTH} characters"
    return None


def validate_password(password: str | None) -> str | None:
    """
    Validate password.

    Returns:
        Error message or None if valid
    """
    if not password or not password.strip():
        return "Password cannot be empty or whitespace only"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    return None
