"""
Commission orchestrator.

Walks the purchaser's upline and, per ancestor, records leg volume and
pays binary commission.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.models.enums import Leg, TransactionType, WalletType
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.commission.leg_volume import LegVolumeAccumulator
from mlm_core.services.commission.pairing import PairingCalculator, PairingResult
from mlm_core.services.genealogy.traversal import iter_upline
from mlm_core.services.wallet_service import WalletService
from mlm_core.utils.db_decorators import run_in_transaction
from mlm_core.utils.exceptions import ConcurrencyConflictError, ErrorCode
from mlm_core.utils.validation import is_valid_id, validate_positive_amount


@dataclass(frozen=True)
class CommissionResult:
    """Commission credited to one ancestor for one purchase."""

    member_id: int
    amount: Decimal
    from_member_id: int
    package_amount: Decimal
    leg: Leg


class CommissionOrchestrator(BaseService):
    """
    Distributes binary commissions for a package purchase.

    Every ancestor step is its own committed unit of work. A failing step is
    logged and skipped; the walk always continues up to the root.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize commission orchestrator.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)
        self.accumulator = LegVolumeAccumulator(session)
        self.pairing = PairingCalculator(session)
        self.wallets = WalletService(session)

    @service_boundary
    async def distribute_commissions(
        self,
        purchasing_member_id: int,
        package_amount: Decimal,
        package_id: int,
    ) -> ServiceResult:
        """
        Update upline leg volumes and pay commissions for a purchase.

        Args:
            purchasing_member_id: Member who bought the package
            package_amount: Price paid
            package_id: Purchased package (logged only; ancestors pair at
                the rate of their own active package)

        Returns:
            ServiceResult with list[CommissionResult] as data
        """
        if not is_valid_id(purchasing_member_id):
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Invalid purchase member ID"
            )

        amount = validate_positive_amount(package_amount)
        if amount is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Package amount must be positive"
            )

        purchaser = await self.store.get_member(purchasing_member_id)
        if purchaser is None:
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND, "Purchase member not found"
            )

        if not await self.store.tree_nodes.is_placed(purchasing_member_id):
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND, "Purchase member not in tree"
            )

        results: list[CommissionResult] = []

        async for ancestor_id in iter_upline(
            self.store.tree_nodes, purchasing_member_id
        ):
            if await self.store.get_member(ancestor_id) is None:
                break

            commission = await self._process_ancestor(
                ancestor_id, amount, purchasing_member_id
            )
            if commission is not None:
                results.append(commission)

        await self.commit()

        self.logger.info(
            "Commissions distributed",
            extra={
                "purchase_member_id": purchasing_member_id,
                "package_id": package_id,
                "package_amount": str(amount),
                "commissions_count": len(results),
                "total_commission": str(
                    sum((r.amount for r in results), Decimal("0"))
                ),
            },
        )

        return ServiceResult.ok(results)

    async def _process_ancestor(
        self,
        ancestor_id: int,
        amount: Decimal,
        purchasing_member_id: int,
    ) -> CommissionResult | None:
        """
        Leg update, then pairing and credit for one ancestor.

        Returns:
            CommissionResult if a commission was credited, None otherwise
        """
        leg_result = await self.accumulator.apply_purchase(
            ancestor_id, amount, purchasing_member_id
        )
        if not leg_result.success:
            self.logger.warning(
                "Failed to update leg volumes",
                extra={
                    "member_id": ancestor_id,
                    "purchase_member_id": purchasing_member_id,
                    "error": leg_result.error,
                    "error_code": leg_result.error_code,
                },
            )
            return None

        leg: Leg = leg_result.data

        package_id = await self.store.members.get_active_package_id(ancestor_id)
        if package_id is None:
            return None

        try:
            credit_result = await run_in_transaction(
                self.session,
                lambda: self._pair_and_credit(
                    ancestor_id, package_id, purchasing_member_id
                ),
                operation="pair_and_credit",
            )
        except (ConcurrencyConflictError, SQLAlchemyError) as e:
            await self.rollback()
            self.logger.opt(exception=e).error(
                "Commission step failed, continuing with next ancestor",
                extra={
                    "member_id": ancestor_id,
                    "purchase_member_id": purchasing_member_id,
                    "error": str(e),
                },
            )
            return None

        if not credit_result.success:
            self.logger.warning(
                "Commission not credited",
                extra={
                    "member_id": ancestor_id,
                    "error": credit_result.error,
                    "error_code": credit_result.error_code,
                },
            )
            return None

        commission: Decimal = credit_result.data
        if commission <= 0:
            return None

        return CommissionResult(
            member_id=ancestor_id,
            amount=commission,
            from_member_id=purchasing_member_id,
            package_amount=amount,
            leg=leg,
        )

    async def _pair_and_credit(
        self,
        ancestor_id: int,
        package_id: int,
        purchasing_member_id: int,
    ) -> ServiceResult:
        """
        Pair ancestor's legs and credit the commission wallet in one unit.

        A missing commission wallet fails the unit, so the pairing is rolled
        back together with it and the volume stays available.

        Returns:
            ServiceResult with credited commission (may be zero) as data
        """
        pairing_result = await self.pairing.pair_in_session(ancestor_id, package_id)
        if not pairing_result.success:
            return pairing_result

        pairing: PairingResult = pairing_result.data
        if pairing.commission <= 0:
            return ServiceResult.ok(Decimal("0"))

        credit = await self.wallets.post_entry(
            ancestor_id,
            WalletType.COMMISSION,
            TransactionType.COMMISSION,
            pairing.commission,
            f"Binary commission from member {purchasing_member_id}",
            related_member_id=purchasing_member_id,
        )
        if not credit.success:
            return credit

        self.logger.info(
            "Commission credited",
            extra={
                "member_id": ancestor_id,
                "purchase_member_id": purchasing_member_id,
                "amount": str(pairing.commission),
                "balance_after": str(credit.data.balance_after),
            },
        )

        return ServiceResult.ok(pairing.commission)
