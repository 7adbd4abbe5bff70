"""Unit tests for pairing arithmetic."""

from decimal import Decimal

import pytest

from mlm_core.models.enums import Leg
from mlm_core.models.tree_node import TreeNode
from mlm_core.services.commission.pairing import calculate_commission


class TestCalculateCommission:
    """Tests for commission on a paired volume."""

    def test_rate_is_whole_number_percent(self):
        """Rate 10 pays 10% of the weaker leg."""
        assert calculate_commission(Decimal("100"), Decimal("10")) == Decimal("10")

    def test_zero_poolable_pays_nothing(self):
        """Nothing paired, nothing paid."""
        assert calculate_commission(Decimal("0"), Decimal("10")) == Decimal("0")

    def test_zero_rate_pays_nothing(self):
        """A package with rate 0 pays zero."""
        assert calculate_commission(Decimal("500"), Decimal("0")) == Decimal("0")

    def test_fractional_rate(self):
        """Fractional percentages are supported."""
        assert calculate_commission(Decimal("200"), Decimal("7.5")) == Decimal("15")

    def test_result_is_quantized(self):
        """Commission is rounded to money scale."""
        commission = calculate_commission(Decimal("1"), Decimal("33.3333"))
        assert commission == Decimal("0.33333300")
        assert commission.as_tuple().exponent == -8


class TestPoolableVolume:
    """Tests for TreeNode leg helpers."""

    @pytest.mark.parametrize(
        "left,right,expected",
        [
            (Decimal("300"), Decimal("100"), Decimal("100")),
            (Decimal("50"), Decimal("80"), Decimal("50")),
            (Decimal("0"), Decimal("80"), Decimal("0")),
        ],
    )
    def test_poolable_is_weaker_leg(self, left, right, expected):
        """Poolable volume is the minimum of both legs."""
        node = TreeNode(left_leg_volume=left, right_leg_volume=right)
        assert node.poolable_volume == expected

    def test_leg_accessors(self):
        """child_id / leg_volume / open_leg follow the slots."""
        node = TreeNode(
            left_child_id=5,
            right_child_id=None,
            left_leg_volume=Decimal("10"),
            right_leg_volume=Decimal("20"),
        )
        assert node.child_id(Leg.LEFT) == 5
        assert node.child_id("right") is None
        assert node.leg_volume(Leg.RIGHT) == Decimal("20")
        assert node.open_leg() is Leg.RIGHT
