"""
TreeNode model.

Placement of a member in the binary genealogy tree.
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
from mlm_core.models.enums import Leg
from mlm_core.models.types import MoneyType


class TreeNode(Base):
    """
    TreeNode entity (1:1 with Member once placed).

    Structural fields (left_child_id / right_child_id) are written only by
    the placement engine; leg volumes only by the leg-volume accumulator and
    the pairing calculator. Every update is guarded by the version column:
    a flush whose version no longer matches raises StaleDataError.

    Attributes:
        id: Primary key
        member_id: Placed member
        sponsor_id: Tree parent (NULL for a root)
        left_child_id: Member placed in the left slot
        right_child_id: Member placed in the right slot
        position: root / left / right under the parent
        depth: Distance from the root (root = 0)
        left_leg_volume: Unpaired volume from the left subtree
        right_leg_volume: Unpaired volume from the right subtree
        version: Optimistic lock counter
    """

    __tablename__ = "tree_nodes"
    __table_args__ = (
        UniqueConstraint(
            "sponsor_id", "position", name="uq_tree_nodes_parent_slot"
        ),
        CheckConstraint(
            "left_leg_volume >= 0", name="check_tree_left_volume_non_negative"
        ),
        CheckConstraint(
            "right_leg_volume >= 0", name="check_tree_right_volume_non_negative"
        ),
        CheckConstraint("depth >= 0", name="check_tree_depth_non_negative"),
        CheckConstraint(
            "position IN ('root', 'left', 'right')",
            name="check_tree_position",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )

    # Structure
    sponsor_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"), nullable=True, index=True
    )
    left_child_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"), nullable=True, index=True
    )
    right_child_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"), nullable=True, index=True
    )
    position: Mapped[str] = mapped_column(String(10), nullable=False)
    depth: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Leg volumes
    left_leg_volume: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    right_leg_volume: Mapped[Decimal] = mapped_column(
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

    @property
    def is_root(self) -> bool:
        """Whether this node is a tree root."""
        return self.sponsor_id is None

    def child_id(self, leg: Leg | str) -> int | None:
        """Member ID in the given child slot."""
        if leg == Leg.LEFT:
            return self.left_child_id
        return self.right_child_id

    def open_leg(self) -> Leg | None:
        """First open child slot, left before right."""
        if self.left_child_id is None:
            return Leg.LEFT
        if self.right_child_id is None:
            return Leg.RIGHT
        return None

    def leg_volume(self, leg: Leg | str) -> Decimal:
        """Accumulated volume of the given leg."""
        if leg == Leg.LEFT:
            return self.left_leg_volume
        return self.right_leg_volume

    @property
    def poolable_volume(self) -> Decimal:
        """Volume that can be paired right now (weaker leg)."""
        return min(self.left_leg_volume, self.right_leg_volume)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<TreeNode(member_id={self.member_id}, sponsor_id={self.sponsor_id}, "
            f"position={self.position}, depth={self.depth})>"
        )
