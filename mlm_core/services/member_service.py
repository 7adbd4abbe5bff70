"""
Member service.

Registration (member, wallets and tree placement in one unit of work),
authentication and member profile management.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.config.settings import settings
from mlm_core.models.enums import Leg, MemberStatus
from mlm_core.models.member import Member, hash_password
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.genealogy.placement import TreePlacementEngine
from mlm_core.utils.db_decorators import run_in_transaction
from mlm_core.utils.exceptions import PLACEMENT_CONFLICTS, ErrorCode
from mlm_core.utils.validation import (
    is_valid_id,
    parse_leg,
    validate_password,
    validate_username,
)


class MemberService(BaseService):
    """Member registration and account operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize member service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)
        self.placement = TreePlacementEngine(session)

    @service_boundary
    async def register_member(
        self,
        username: str,
        password: str,
        sponsor_id: int | None = None,
        position: Leg | str | None = None,
    ) -> ServiceResult:
        """
        Register new member.

        Creates the member, both wallets with zero balance and the tree node
        in a single transaction. Without a sponsor the member becomes the
        root of a new tree.

        Args:
            username: Unique login name (3-30 characters)
            password: Plain text password (hashed with bcrypt)
            sponsor_id: Recruiting member (optional)
            position: Optional explicit "left" / "right" slot on the sponsor

        Returns:
            ServiceResult with created Member as data
        """
        error = validate_username(username)
        if error is not None:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, error)

        error = validate_password(password)
        if error is not None:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, error)

        if sponsor_id is not None and not is_valid_id(sponsor_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid sponsor ID")

        if position is not None:
            if sponsor_id is None:
                return ServiceResult.fail(
                    ErrorCode.INVALID_INPUT, "Position requires a sponsor"
                )
            if parse_leg(position) is None:
                return ServiceResult.fail(
                    ErrorCode.INVALID_INPUT, "Position must be 'left' or 'right'"
                )

        username = username.strip()
        password_hash = hash_password(password, settings.password_salt_rounds)

        result = await run_in_transaction(
            self.session,
            lambda: self._register_in_session(
                username, password_hash, sponsor_id, position
            ),
            operation="member_registration",
            retry_on=PLACEMENT_CONFLICTS,
        )

        if result.success:
            member: Member = result.data
            self.logger.info(
                "Member registered",
                extra={
                    "member_id": member.id,
                    "username": member.username,
                    "sponsor_id": sponsor_id,
                },
            )

        return result

    async def _register_in_session(
        self,
        username: str,
        password_hash: str,
        sponsor_id: int | None,
        position: Leg | str | None,
    ) -> ServiceResult:
        """Create member, wallets and tree node; flush only."""
        if await self.store.members.get_by_username(username) is not None:
            return ServiceResult.fail(
                ErrorCode.DUPLICATE_USERNAME, "Username already exists"
            )

        if sponsor_id is not None:
            if await self.store.get_member(sponsor_id) is None:
                return ServiceResult.fail(
                    ErrorCode.SPONSOR_NOT_FOUND, "Sponsor not found"
                )
            if not await self.store.tree_nodes.is_placed(sponsor_id):
                return ServiceResult.fail(
                    ErrorCode.SPONSOR_NOT_PLACED, "Sponsor not in genealogy tree"
                )

        member = Member(
            username=username,
            password_hash=password_hash,
            sponsor_id=sponsor_id,
            status=MemberStatus.ACTIVE.value,
        )
        await self.store.members.save(member)
        await self.store.wallets.create_member_wallets(member.id)

        if sponsor_id is None:
            placement = await self.placement.place_root_in_session(member.id)
        else:
            placement = await self.placement.place_in_session(
                member.id, sponsor_id, position
            )
        if not placement.success:
            return placement

        return ServiceResult.ok(member)

    @service_boundary
    async def authenticate_member(
        self, username: str, password: str
    ) -> ServiceResult:
        """
        Check credentials and account status.

        Args:
            username: Login name
            password: Plain text password

        Returns:
            ServiceResult with Member as data
        """
        member = await self.store.members.get_by_username((username or "").strip())
        if member is None or not member.verify_password(password or ""):
            return ServiceResult.fail(
                ErrorCode.INVALID_CREDENTIALS, "Invalid credentials"
            )

        if not member.is_active:
            return ServiceResult.fail(
                ErrorCode.ACCOUNT_INACTIVE, "Account is not active"
            )

        return ServiceResult.ok(member)

    @service_boundary
    async def get_member(self, member_id: int) -> ServiceResult:
        """
        Get member by ID.

        Args:
            member_id: Member ID

        Returns:
            ServiceResult with Member as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        member = await self.store.get_member(member_id)
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        return ServiceResult.ok(member)

    @service_boundary
    async def update_status(
        self, member_id: int, status: MemberStatus | str
    ) -> ServiceResult:
        """
        Change account status.

        Args:
            member_id: Member ID
            status: active / inactive / suspended

        Returns:
            ServiceResult with updated Member as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        try:
            new_status = MemberStatus(status)
        except ValueError:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid status")

        member = await self.store.members.update(
            member_id, for_update=True, status=new_status.value
        )
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        await self.commit()

        self.logger.info(
            "Member status updated",
            extra={"member_id": member_id, "status": new_status.value},
        )

        return ServiceResult.ok(member)

    @service_boundary
    async def change_password(
        self, member_id: int, current_password: str, new_password: str
    ) -> ServiceResult:
        """
        Replace password after verifying the current one.

        Args:
            member_id: Member ID
            current_password: Password in use
            new_password: Replacement password

        Returns:
            ServiceResult (no data)
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        if not current_password or not new_password:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT,
                "Current password and new password are required",
            )

        error = validate_password(new_password)
        if error is not None:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, error)

        member = await self.store.get_member(member_id)
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        if not member.verify_password(current_password):
            return ServiceResult.fail(
                ErrorCode.INVALID_CREDENTIALS, "Current password is incorrect"
            )

        member.set_password(new_password, rounds=settings.password_salt_rounds)
        await self.commit()

        self.logger.info("Password changed", extra={"member_id": member_id})

        return ServiceResult.ok()
