"""
Package model.

Purchasable membership package. The active package of a member decides the
commission rate used when that member's legs are paired.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from mlm_core.models.base import Base
from mlm_core.models.types import MoneyType, RatePercentType


class Package(Base):
    """
    Package entity.

    Attributes:
        id: Primary key
        name: Unique display name
        price: Purchase price (positive)
        commission_rate: Pairing commission in percent units (10 = 10%)
        description: Marketing text
        is_active: Whether the package can be purchased
    """

    __tablename__ = "packages"
    __table_args__ = (
        CheckConstraint("price > 0", name="check_package_price_positive"),
        CheckConstraint(
            "commission_rate >= 0 AND commission_rate <= 100",
            name="check_package_commission_rate_range",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False
    )
    price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(
        RatePercentType,
        nullable=False,
        comment="Pairing commission rate in percent (10.0000 = 10%)",
    )
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Package(id={self.id}, name={self.name}, price={self.price}, "
            f"commission_rate={self.commission_rate})>"
        )
