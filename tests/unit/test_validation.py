"""Unit tests for validation utilities."""

from decimal import Decimal

import pytest

from mlm_core.models.enums import Leg
from mlm_core.utils.validation import (
    is_valid_id,
    parse_leg,
    quantize_money,
    to_decimal,
    validate_password,
    validate_positive_amount,
    validate_username,
)


class TestIdValidation:
    """Tests for record identifier validation."""

    @pytest.mark.parametrize("value", [1, 42, 10**9])
    def test_positive_ints_valid(self, value):
        """Positive integers are usable IDs."""
        assert is_valid_id(value)

    @pytest.mark.parametrize("value", [0, -1, None, "1", 1.0, True])
    def test_other_values_invalid(self, value):
        """Zero, negatives, strings, floats and bools are rejected."""
        assert not is_valid_id(value)


class TestAmountValidation:
    """Tests for monetary amount parsing."""

    def test_float_goes_through_str(self):
        """0.1 stays exactly 0.1."""
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", None, "NaN", "Infinity", False])
    def test_unparseable_values(self, value):
        """Non-numeric and non-finite values give None."""
        assert to_decimal(value) is None

    def test_positive_amount(self):
        """Positive amount is returned as Decimal."""
        assert validate_positive_amount("50") == Decimal("50")

    @pytest.mark.parametrize("value", [0, -5, "0.00", "x"])
    def test_non_positive_amount(self, value):
        """Zero, negative and invalid amounts are rejected."""
        assert validate_positive_amount(value) is None

    def test_quantize_money_rounds_half_up(self):
        """Money is rounded to 8 places, half up."""
        assert quantize_money(Decimal("1.000000005")) == Decimal("1.00000001")
        assert quantize_money(Decimal("1.000000004")) == Decimal("1.00000000")


class TestLegParsing:
    """Tests for explicit position parsing."""

    def test_known_positions(self):
        """left / right map to Leg members."""
        assert parse_leg("left") is Leg.LEFT
        assert parse_leg(Leg.RIGHT) is Leg.RIGHT

    @pytest.mark.parametrize("value", ["root", "LEFT", "", None, 1])
    def test_unknown_positions(self, value):
        """Anything else is rejected."""
        assert parse_leg(value) is None


class TestCredentialValidation:
    """Tests for username and password rules."""

    def test_username_too_short(self):
        """Usernames need at least 3 characters."""
        assert validate_username("ab") is not None
        assert validate_username("   ab  ") is not None

    def test_username_too_long(self):
        """Usernames are limited to 30 characters."""
        assert validate_username("a" * 31) is not None

    def test_username_valid(self):
        """Normal username passes."""
        assert validate_username("alice") is None

    def test_password_whitespace_only(self):
        """Whitespace-only password is rejected."""
        assert validate_password("       ") == (
            "Password cannot be empty or whitespace only"
        )

    def test_password_too_short(self):
        """Passwords need at least 6 characters."""
        assert validate_password("abc") == "Password must be at least 6 characters"

    def test_password_valid(self):
        """Normal password passes."""
        assert validate_password("secret123") is None
