"""
Transaction model.

Append-only audit record of every wallet balance change.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from mlm_core.models.base import Base
from mlm_core.models.types import MoneyType


class Transaction(Base):
    """
    Transaction entity.

    Attributes:
        id: Primary key
        member_id: Wallet owner
        wallet_type: main / commission
        type: deposit / purchase / commission / withdrawal
        amount: Positive amount moved
        balance_before: Wallet balance before the change
        balance_after: Wallet balance after the change
        description: Free text
        related_member_id: Member whose purchase triggered a commission
        timestamp: When the change happened
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="check_transaction_amount_positive"),
        CheckConstraint(
            "type IN ('deposit', 'purchase', 'commission', 'withdrawal')",
            name="check_transaction_type",
        ),
        Index("idx_transactions_member_type", "member_id", "type"),
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
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    balance_before: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    related_member_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, member_id={self.member_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
