"""
Genealogy services.

Binary tree placement, traversal and read-only tree queries.
"""

from mlm_core.services.genealogy.placement import TreePlacementEngine
from mlm_core.services.genealogy.queries import (
    GenealogyService,
    MemberSummary,
    TreeNodeView,
    UplineEntry,
)
from mlm_core.services.genealogy.traversal import OpenSlot

__all__ = [
    "GenealogyService",
    "MemberSummary",
    "OpenSlot",
    "TreeNodeView",
    "TreePlacementEngine",
    "UplineEntry",
]
