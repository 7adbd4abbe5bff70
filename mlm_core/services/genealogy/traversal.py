"""
Genealogy tree traversal.

Iterative walks over the binary placement tree shared by the placement
engine, the leg-volume accumulator, the commission orchestrator and the
genealogy queries. Every walk uses an explicit queue and a visited set.
"""

from collections import deque
from collections.abc import AsyncIterator
from dataclasses import dataclass

from mlm_core.models.enums import Leg
from mlm_core.repositories.tree_node_repository import TreeNodeRepository


@dataclass(frozen=True)
class OpenSlot:
    """Free child slot found by the left-fill search."""

    parent_id: int
    leg: Leg
    depth: int


async def find_open_slot(
    repo: TreeNodeRepository, start_member_id: int
) -> OpenSlot | None:
    """
    Find next placement slot under a sponsor (left-fill BFS).

    Nodes are visited level by level, left child before right child, and
    the first visited node with a free slot wins, left before right. The
    subtree therefore fills one level at a time with no gaps.

    Args:
        repo: Tree node repository
        start_member_id: Sponsor to search under

    Returns:
        OpenSlot or None if the subtree has no reachable free slot
    """
    queue: deque[int] = deque([start_member_id])
    visited: set[int] = set()

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        links = await repo.get_links(current_id)
        if links is None:
            continue

        if links.left_child_id is None:
            return OpenSlot(current_id, Leg.LEFT, links.depth + 1)
        if links.right_child_id is None:
            return OpenSlot(current_id, Leg.RIGHT, links.depth + 1)

        queue.append(links.left_child_id)
        queue.append(links.right_child_id)

    return None


async def is_in_subtree(
    repo: TreeNodeRepository, root_id: int | None, target_id: int
) -> bool:
    """
    Check whether target lies in the subtree rooted at root_id.

    Args:
        repo: Tree node repository
        root_id: Subtree root (None = empty subtree)
        target_id: Member to look for

    Returns:
        True if found
    """
    if root_id is None:
        return False

    queue: deque[int] = deque([root_id])
    visited: set[int] = set()

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        if current_id == target_id:
            return True

        links = await repo.get_links(current_id)
        if links is None:
            continue
        if links.left_child_id is not None:
            queue.append(links.left_child_id)
        if links.right_child_id is not None:
            queue.append(links.right_child_id)

    return False


async def find_leg(
    repo: TreeNodeRepository,
    left_child_id: int | None,
    right_child_id: int | None,
    target_id: int,
) -> Leg | None:
    """
    Determine which leg of a node contains target.

    The left subtree is searched first, then the right one independently.

    Returns:
        Leg or None if target is in neither subtree
    """
    if await is_in_subtree(repo, left_child_id, target_id):
        return Leg.LEFT
    if await is_in_subtree(repo, right_child_id, target_id):
        return Leg.RIGHT
    return None


async def iter_upline(
    repo: TreeNodeRepository, member_id: int
) -> AsyncIterator[int]:
    """
    Yield ancestors of a member, tree parent first, root last.

    Tree parents are fixed once a node is placed, so each hop is read
    before the caller works on the yielded ancestor.

    Args:
        repo: Tree node repository
        member_id: Member whose upline to walk

    Yields:
        Ancestor member IDs
    """
    visited: set[int] = {member_id}
    current_id = await repo.get_parent_id(member_id)

    while current_id is not None and current_id not in visited:
        visited.add(current_id)
        next_id = await repo.get_parent_id(current_id)
        yield current_id
        current_id = next_id


async def collect_downline(
    repo: TreeNodeRepository,
    member_id: int,
    max_depth: int | None = None,
    include_self: bool = False,
) -> list[tuple[int, int]]:
    """
    Collect descendants in BFS order.

    Args:
        repo: Tree node repository
        member_id: Subtree root
        max_depth: Optional limit on levels below member_id
        include_self: Whether to include member_id itself

    Returns:
        List of (member ID, levels below member_id)
    """
    collected: list[tuple[int, int]] = []
    queue: deque[tuple[int, int]] = deque([(member_id, 0)])
    visited: set[int] = set()

    while queue:
        current_id, level = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        links = await repo.get_links(current_id)
        if links is None:
            continue

        if current_id != member_id or include_self:
            collected.append((current_id, level))

        if max_depth is not None and level >= max_depth:
            continue

        if links.left_child_id is not None:
            queue.append((links.left_child_id, level + 1))
        if links.right_child_id is not None:
            queue.append((links.right_child_id, level + 1))

    return collected
