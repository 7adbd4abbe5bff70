"""
Wallet model.

Every member holds one main and one commission wallet.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from mlm_core.models.base import Base
from mlm_core.models.types import MoneyType


class Wallet(Base):
    """
    Wallet entity.

    main is debited by purchases and credited by deposits; commission is
    credited by pairing payouts and debited by withdrawals. Balance updates
    are guarded by the version column.

    Attributes:
        id: Primary key
        member_id: Owner
        wallet_type: main / commission
        balance: Current non-negative balance
        version: Optimistic lock counter
    """

    __tablename__ = "wallets"
    __table_args__ = (
        UniqueConstraint(
            "member_id", "wallet_type", name="uq_wallets_member_type"
        ),
        CheckConstraint(
            "balance >= 0", name="check_wallet_balance_non_negative"
        ),
        CheckConstraint(
            "wallet_type IN ('main', 'commission')",
            name="check_wallet_type",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    wallet_type: Mapped[str] = mapped_column(String(20), nullable=False)

    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)

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

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Wallet(member_id={self.member_id}, type={self.wallet_type}, "
            f"balance={self.balance})>"
        )
