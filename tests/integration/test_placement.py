"""Integration tests for binary tree placement."""

import pytest

from mlm_core.models import Member
from mlm_core.models.enums import Leg, TreePosition
from mlm_core.repositories.member_repository import MemberRepository
from mlm_core.repositories.tree_node_repository import TreeNodeRepository
from mlm_core.services.genealogy.placement import TreePlacementEngine
from mlm_core.services.member_service import MemberService
from mlm_core.utils.exceptions import ErrorCode


async def node_of(session, member_id):
    """Fresh tree node of a member."""
    return await TreeNodeRepository(session).get_by_member_id_for_update(member_id)


class TestRegistrationPlacement:
    """Placement performed as part of registration."""

    @pytest.mark.asyncio
    async def test_first_member_becomes_root(self, session, register):
        """Registration without sponsor creates a depth-0 root."""
        alice = await register("alice")

        node = await node_of(session, alice.id)
        assert node.position == TreePosition.ROOT
        assert node.depth == 0
        assert node.sponsor_id is None
        assert node.is_root

    @pytest.mark.asyncio
    async def test_spillover_to_first_child(self, session, register):
        """B left, C right, D spills under B on the left at depth 2."""
        a = await register("anna")
        b = await register("boris", a.id)
        c = await register("clara", a.id)
        d = await register("david", a.id)

        node_a = await node_of(session, a.id)
        node_b = await node_of(session, b.id)
        node_c = await node_of(session, c.id)
        node_d = await node_of(session, d.id)

        assert (node_b.position, node_b.depth) == (Leg.LEFT, 1)
        assert (node_c.position, node_c.depth) == (Leg.RIGHT, 1)
        assert (node_d.position, node_d.depth) == (Leg.LEFT, 2)
        assert node_a.left_child_id == b.id
        assert node_a.right_child_id == c.id
        assert node_b.left_child_id == d.id

        # Tree parent differs from the recruiter after spillover
        assert node_d.sponsor_id == b.id
        assert d.sponsor_id == a.id

    @pytest.mark.asyncio
    async def test_left_fill_builds_complete_tree(self, session, register):
        """Sequential registrations under the root fill level by level."""
        root = await register("root0")
        members = [root]
        for i in range(1, 15):
            members.append(await register(f"member{i:02d}", root.id))

        for index, member in enumerate(members, start=1):
            node = await node_of(session, member.id)
            assert node.depth == index.bit_length() - 1
            if index == 1:
                continue
            parent = members[index // 2 - 1]
            assert node.sponsor_id == parent.id
            expected = Leg.LEFT if index % 2 == 0 else Leg.RIGHT
            assert node.position == expected

    @pytest.mark.asyncio
    async def test_depth_is_parent_depth_plus_one(self, session, register):
        """Every placed node sits one level below its tree parent."""
        root = await register("rootx")
        sponsors = [root]
        for i in range(9):
            sponsor = sponsors[i // 2]
            sponsors.append(await register(f"user{i}", sponsor.id))

        for member in sponsors[1:]:
            node = await node_of(session, member.id)
            parent = await node_of(session, node.sponsor_id)
            assert node.depth == parent.depth + 1

    @pytest.mark.asyncio
    async def test_explicit_right_position(self, session, register):
        """Explicit position bypasses left-fill for the sponsor's slot."""
        a = await register("alpha")
        b = await register("bravo", a.id, "right")
        c = await register("charlie", a.id)

        node_a = await node_of(session, a.id)
        assert node_a.right_child_id == b.id
        assert node_a.left_child_id == c.id

    @pytest.mark.asyncio
    async def test_explicit_position_occupied(self, session, register):
        """Occupied slot fails and the registration is rolled back."""
        a = await register("alpha")
        await register("bravo", a.id, "left")

        result = await MemberService(session).register_member(
            "charlie", "secret123", a.id, "left"
        )

        assert not result.success
        assert result.error_code == ErrorCode.POSITION_OCCUPIED
        assert result.error == "Left position already occupied"
        assert await MemberRepository(session).get_by_username("charlie") is None

    @pytest.mark.asyncio
    async def test_unknown_sponsor(self, session):
        """Missing sponsor is reported before anything is written."""
        result = await MemberService(session).register_member(
            "orphan", "secret123", 999
        )

        assert result.error_code == ErrorCode.SPONSOR_NOT_FOUND
        assert await MemberRepository(session).get_by_username("orphan") is None


class TestPlacementEngine:
    """Direct calls to TreePlacementEngine."""

    @pytest.fixture
    async def unplaced(self, session):
        """Member row without a tree node."""
        member = Member(username="floating", password_hash="x")
        session.add(member)
        await session.commit()
        return member

    @pytest.mark.asyncio
    async def test_place_member(self, session, register, unplaced):
        """Unplaced member goes into the first open slot."""
        a = await register("alpha")

        result = await TreePlacementEngine(session).place(unplaced.id, a.id)

        assert result.success
        assert result.data.sponsor_id == a.id
        assert result.data.position == Leg.LEFT
        assert (await node_of(session, a.id)).left_child_id == unplaced.id

    @pytest.mark.asyncio
    async def test_place_root(self, session, unplaced):
        """A member without a sponsor starts a new tree."""
        result = await TreePlacementEngine(session).place_root(unplaced.id)

        assert result.success
        assert result.data.position == "root"
        assert result.data.depth == 0
        assert result.data.sponsor_id is None

        again = await TreePlacementEngine(session).place_root(unplaced.id)
        assert again.error_code == ErrorCode.ALREADY_PLACED

    @pytest.mark.asyncio
    async def test_already_placed(self, session, register):
        """A member can be placed only once."""
        a = await register("alpha")
        b = await register("bravo", a.id)

        result = await TreePlacementEngine(session).place(b.id, a.id)

        assert result.error_code == ErrorCode.ALREADY_PLACED
        assert result.error == "Member already in tree"

    @pytest.mark.asyncio
    async def test_sponsor_not_placed(self, session, register, unplaced):
        """Sponsor must have a tree node."""
        newcomer = Member(username="newbie", password_hash="x")
        session.add(newcomer)
        await session.commit()

        result = await TreePlacementEngine(session).place(newcomer.id, unplaced.id)

        assert result.error_code == ErrorCode.SPONSOR_NOT_PLACED

    @pytest.mark.asyncio
    async def test_unknown_member(self, session, register):
        """Member must exist."""
        a = await register("alpha")

        result = await TreePlacementEngine(session).place(12345, a.id)

        assert result.error_code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "member_id,sponsor_id,position",
        [(0, 1, None), (1, -3, None), ("1", 1, None), (1, 2, "middle")],
    )
    async def test_invalid_input(self, session, member_id, sponsor_id, position):
        """Malformed IDs and positions are rejected."""
        result = await TreePlacementEngine(session).place(
            member_id, sponsor_id, position
        )

        assert result.error_code == ErrorCode.INVALID_INPUT
