"""
Member model.

Represents a registered member of the membership platform.
"""

from datetime import UTC, datetime

import bcrypt
from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from mlm_core.models.base import Base
from mlm_core.models.enums import MemberStatus


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash plain text password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


class Member(Base):
    """
    Member entity.

    Identity is immutable after registration; only status and the active
    package change over the member's lifetime.

    Attributes:
        id: Primary key
        username: Unique login name
        password_hash: bcrypt hash of the password
        sponsor_id: Recruiting member (may differ from the tree parent)
        status: active / inactive / suspended
        active_package_id: Package purchased most recently
        registration_date: When the member registered
    """

    __tablename__ = "members"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'suspended')",
            name="check_member_status",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Credentials
    username: Mapped[str] = mapped_column(
        String(30), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False
    )

    # Recruiter
    sponsor_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=MemberStatus.ACTIVE.value,
        nullable=False,
        index=True,
    )
    active_package_id: Mapped[int | None] = mapped_column(
        ForeignKey("packages.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timestamps
    registration_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def is_active(self) -> bool:
        """Whether the member account is active."""
        return self.status == MemberStatus.ACTIVE

    def set_password(self, password: str, rounds: int = 10) -> None:
        """
        Set password with bcrypt hashing.

        Args:
            password: Plain text password to hash and store
            rounds: bcrypt cost factor
        """
        self.password_hash = hash_password(password, rounds)

    def verify_password(self, password: str) -> bool:
        """
        Verify password against stored hash.

        Args:
            password: Plain text password to verify

        Returns:
            True if password matches, False otherwise
        """
        if not self.password_hash:
            return False
        return bcrypt.checkpw(
            password.encode(), self.password_hash.encode()
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Member(id={self.id}, username={self.username}, "
            f"status={self.status})>"
        )
