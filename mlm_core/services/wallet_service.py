"""
Wallet service.

Deposits into the main wallet, withdrawals from the commission wallet,
balances and transaction history.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_core.config.settings import settings
from mlm_core.models.enums import TransactionType, WalletType
from mlm_core.models.transaction import Transaction
from mlm_core.repositories.ledger_store import LedgerStore
from mlm_core.services.base_service import BaseService, ServiceResult, service_boundary
from mlm_core.utils.db_decorators import run_in_transaction
from mlm_core.utils.exceptions import ErrorCode
from mlm_core.utils.validation import is_valid_id, to_decimal, validate_positive_amount


class WalletService(BaseService):
    """Dual-wallet ledger operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize wallet service.

        Args:
            session: Async database session
        """
        super().__init__(session)
        self.store = LedgerStore(session)

    async def post_entry(
        self,
        member_id: int,
        wallet_type: WalletType,
        transaction_type: TransactionType,
        amount: Decimal,
        description: str,
        related_member_id: int | None = None,
    ) -> ServiceResult:
        """
        Change a wallet balance and append the matching ledger record.

        Deposits and commissions credit, purchases and withdrawals debit.
        Runs inside the caller's unit of work.

        Returns:
            ServiceResult with the Transaction as data
        """
        wallet = await self.store.get_wallet_for_update(member_id, wallet_type)
        if wallet is None:
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND,
                f"{wallet_type.value.capitalize()} wallet not found",
            )

        balance_before = wallet.balance
        if transaction_type in (TransactionType.PURCHASE, TransactionType.WITHDRAWAL):
            if balance_before < amount:
                return ServiceResult.fail(
                    ErrorCode.INSUFFICIENT_BALANCE,
                    f"Insufficient balance in {wallet_type.value} wallet",
                )
            wallet.balance = balance_before - amount
        else:
            wallet.balance = balance_before + amount

        await self.store.save_wallet(wallet)

        record = await self.store.append_transaction(
            Transaction(
                member_id=member_id,
                wallet_type=wallet_type.value,
                type=transaction_type.value,
                amount=amount,
                balance_before=balance_before,
                balance_after=wallet.balance,
                description=description,
                related_member_id=related_member_id,
            )
        )
        return ServiceResult.ok(record)

    @service_boundary
    async def deposit(self, member_id: int, amount: Decimal) -> ServiceResult:
        """
        Deposit funds into the main wallet.

        Args:
            member_id: Wallet owner
            amount: Positive amount

        Returns:
            ServiceResult with the deposit Transaction as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        value = validate_positive_amount(amount)
        if value is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Deposit amount must be positive"
            )

        if await self.store.get_member(member_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        result = await run_in_transaction(
            self.session,
            lambda: self.post_entry(
                member_id,
                WalletType.MAIN,
                TransactionType.DEPOSIT,
                value,
                f"Deposit of {value}",
            ),
            operation="wallet_deposit",
        )

        if result.success:
            self.logger.info(
                "Deposit completed",
                extra={"member_id": member_id, "amount": str(value)},
            )
        return result

    @service_boundary
    async def withdraw(
        self,
        member_id: int,
        amount: Decimal,
        min_withdrawal_amount: Decimal | None = None,
    ) -> ServiceResult:
        """
        Withdraw funds from the commission wallet.

        Args:
            member_id: Wallet owner
            amount: Positive amount
            min_withdrawal_amount: Minimum per withdrawal; falls back to
                settings.min_withdrawal_amount

        Returns:
            ServiceResult with the withdrawal Transaction as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        value = validate_positive_amount(amount)
        if value is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT, "Withdrawal amount must be positive"
            )

        minimum = to_decimal(
            min_withdrawal_amount
            if min_withdrawal_amount is not None
            else settings.min_withdrawal_amount
        )
        if minimum is not None and value < minimum:
            return ServiceResult.fail(
                ErrorCode.INVALID_INPUT,
                f"Withdrawal amount must be at least {minimum}",
            )

        if await self.store.get_member(member_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        result = await run_in_transaction(
            self.session,
            lambda: self.post_entry(
                member_id,
                WalletType.COMMISSION,
                TransactionType.WITHDRAWAL,
                value,
                f"Withdrawal of {value}",
            ),
            operation="wallet_withdrawal",
        )

        if result.success:
            self.logger.info(
                "Withdrawal completed",
                extra={"member_id": member_id, "amount": str(value)},
            )
        else:
            self.logger.warning(
                "Withdrawal rejected",
                extra={"member_id": member_id, "error": result.error},
            )
        return result

    @service_boundary
    async def get_balance(
        self, member_id: int, wallet_type: WalletType | str
    ) -> ServiceResult:
        """
        Get balance of one wallet.

        Returns:
            ServiceResult with Decimal balance as data
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        try:
            kind = WalletType(wallet_type)
        except ValueError:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid wallet type")

        wallet = await self.store.get_wallet(member_id, kind)
        if wallet is None:
            return ServiceResult.fail(
                ErrorCode.NOT_FOUND, f"{kind.value.capitalize()} wallet not found"
            )

        return ServiceResult.ok(wallet.balance)

    @service_boundary
    async def get_balances(self, member_id: int) -> ServiceResult:
        """
        Get balances of both wallets.

        Returns:
            ServiceResult with {"main": Decimal, "commission": Decimal}
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        balances: dict[str, Decimal] = {}
        for kind in (WalletType.MAIN, WalletType.COMMISSION):
            wallet = await self.store.get_wallet(member_id, kind)
            if wallet is None:
                return ServiceResult.fail(
                    ErrorCode.NOT_FOUND,
                    f"{kind.value.capitalize()} wallet not found",
                )
            balances[kind.value] = wallet.balance

        return ServiceResult.ok(balances)

    @service_boundary
    async def get_transactions(
        self,
        member_id: int,
        wallet_type: WalletType | str | None = None,
        transaction_type: TransactionType | str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> ServiceResult:
        """
        Get filtered transaction history, newest first.

        Returns:
            ServiceResult with {"transactions": list[Transaction], "total": int}
        """
        if not is_valid_id(member_id):
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid member ID")

        try:
            wallet_filter = WalletType(wallet_type) if wallet_type else None
            type_filter = (
                TransactionType(transaction_type) if transaction_type else None
            )
        except ValueError:
            return ServiceResult.fail(ErrorCode.INVALID_INPUT, "Invalid filter")

        if await self.store.get_member(member_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Member not found")

        transactions, total = await self.store.transactions.find_history(
            member_id,
            wallet_type=wallet_filter,
            transaction_type=type_filter,
            start=start,
            end=end,
            limit=limit,
            offset=offset,
        )

        return ServiceResult.ok({"transactions": transactions, "total": total})
