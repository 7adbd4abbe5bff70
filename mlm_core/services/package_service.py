"""
Package service.

Package catalogue and package purchase. A purchase debits the main wallet,
activates the package and then hands the amount to the commission
orchestrator.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.config.business_constants import COMMISSION_RATE_MAX
from mlm_core.models.enums import TransactionType, WalletType
from mlm_core.models.package import Package
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.services.commission.orchestrator import CommissionOrchestrator
from mlm_core.services.wallet_service import WalletService
from mlm_core.utils.db_decorators import run_in_transaction
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id, to_decimal, validate_positive_amount


@dataclass(frozen=True)
class PurchaseSummary:
    """Outcome of a package purchase."""

    member_id: int
    package_id: int
    package_name: str
    amount: Decimal
    new_balance: Decimal
    commissions_distributed: int


class PackageService(BaseService):
    """Package catalogue and purchases."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize package service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)
        self.wallets = WalletService(session)
        self.commissions = CommissionOrchestrator(session)

    @service_boundary
    async def create_package(
        self,
        name: str,
        price: Decimal,
        commission_rate: Decimal,
        description: str = "",
    ) -> ServiceResult:
        """
        Add package to the catalogue.

        Args:
            name: Unique package name
            price: Positive price
            commission_rate: Whole-number percentage, 0..100
            description: Optional text

        Returns:
            ServiceResult with created Package as data
        """
        if not name or not name.strip():
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Package name is required")

        value = validate_positive_amount(price)
        if value is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Package price must be positive"
            )

        rate = to_decimal(commission_rate)
        if rate is None or rate < 0 or rate > COMMISSION_RATE_MAX:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT,
                f"Commission rate must be between 0 and {COMMISSION_RATE_MAX}",
            )

        if await self.store.packages.get_by_name(name.strip()) is not None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Package name already exists"
            )

        package = await self.store.packages.create(
            name=name.strip(),
            price=value,
            commission_rate=rate,
            description=description,
            is_active=True,
        )
        await self.commit()

        self.logger.info(
            "Package created",
            extra={"package_id": package.id, "name": package.name},
        )

        return ServiceResult.ok(package)

    @service_boundary
    async def get_available_packages(self) -> ServiceResult:
        """
        List active packages.

        Returns:
            ServiceResult with list[Package]
        """
        return ServiceResult.ok(await self.store.packages.get_active_packages())

    @service_boundary
    async def get_active_package(self, member_id: int) -> ServiceResult:
        """
        Get the package a member holds.

        Returns:
            ServiceResult with Package or None as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        member = await self.store.get_member(member_id)
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        if member.active_package_id is None:
            return ServiceResult.ok(None)

        return ServiceResult.ok(await self.store.get_package(member.active_package_id))

    @service_boundary
    async def purchase_package(
        self, member_id: int, package_id: int
    ) -> ServiceResult:
        """
        Buy a package with main wallet funds.

        The debit and activation commit first. Commission distribution runs
        afterwards; its failure is logged and does not undo the purchase.

        Args:
            member_id: Buyer
            package_id: Package to buy

        Returns:
            ServiceResult with PurchaseSummary as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")
        if not is_valid_id(package_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid package ID")

        result = await run_in_transaction(
            self.session,
            lambda: self._purchase_in_session(member_id, package_id),
            operation="package_purchase",
        )
        if not result.success:
            self.logger.warning(
                "Package purchase rejected",
                extra={
                    "member_id": member_id,
                    "package_id": package_id,
                    "error": result.error,
                },
            )
            return result

        package, new_balance = result.data
        package_id, package_name, price = package.id, package.name, package.price

        self.logger.info(
            "Package purchased",
            extra={
                "member_id": member_id,
                "package_id": package_id,
                "amount": str(price),
            },
        )

        distribution = await self.commissions.distribute_commissions(
            member_id, price, package_id
        )
        if not distribution.success:
            self.logger.error(
                "Commission calculation failed",
                extra={
                    "member_id": member_id,
                    "package_id": package_id,
                    "error": distribution.error,
                    "error_code": distribution.error_code,
                },
            )

        return ServiceResult.ok(
            PurchaseSummary(
                member_id=member_id,
                package_id=package_id,
                package_name=package_name,
                amount=price,
                new_balance=new_balance,
                commissions_distributed=(
                    len(distribution.data) if distribution.success else 0
                ),
            )
        )

    async def _purchase_in_session(
        self, member_id: int, package_id: int
    ) -> ServiceResult:
        """Debit main wallet, record purchase, activate package; flush only."""
        member = await self.store.get_member(member_id)
        if member is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        package: Package | None = await self.store.get_package(package_id)
        if package is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Package not found")
        if not package.is_active:
            return ServiceResult.fail(
                ErrorCode.INACTIVE_PACKAGE, "Package is not active"
            )

        debit = await self.wallets.post_entry(
            member_id,
            WalletType.MAIN,
            TransactionType.PURCHASE,
            package.price,
            f"Package purchase: {package.name}",
        )
        if not debit.success:
            return debit

        await self.store.members.update(member_id, active_package_id=package.id)

        return ServiceResult.ok((package, debit.data.balance_after))
