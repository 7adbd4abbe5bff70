"""Integration tests for registration, wallets and package purchases."""

from decimal import Decimal

import pytest

from mlm_core.models.enums import MemberStatus, TransactionType, WalletType
from mlm_core.repositories.wallet_repository import WalletRepository
from mlm_core.services.commission.statistics import CommissionStatisticsService
from mlm_core.services.member_service import MemberService
from mlm_core.services.package_service import PackageService
from mlm_core.services.wallet_service import WalletService
from mlm_core.utils.exceptions import ErrorCode

DEFAULT_PASSWORD = "secret123"


class TestMemberService:
    """Registration and authentication."""

    @pytest.mark.asyncio
    async def test_registration_creates_both_wallets(self, session, register):
        """New members get main and commission wallets at zero."""
        alice = await register("alice")

        wallets = await WalletRepository(session).get_member_wallets(alice.id)

        assert sorted(w.wallet_type for w in wallets) == ["commission", "main"]
        assert all(w.balance == Decimal("0") for w in wallets)
        assert alice.status == MemberStatus.ACTIVE
        assert alice.password_hash != DEFAULT_PASSWORD

    @pytest.mark.asyncio
    async def test_duplicate_username(self, session, register):
        await register("alice")

        result = await MemberService(session).register_member("alice", "another1")

        assert result.error_code == ErrorCode.DUPLICATE_USERNAME
        assert result.error == "Username already exists"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username,password",
        [("al", "secret123"), ("alice", "abc"), ("alice", "      ")],
    )
    async def test_invalid_credentials_rejected(self, session, username, password):
        result = await MemberService(session).register_member(username, password)

        assert result.error_code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_authenticate(self, session, register):
        """Correct password and active status authenticate."""
        alice = await register("alice")
        service = MemberService(session)

        ok = await service.authenticate_member("alice", DEFAULT_PASSWORD)
        wrong = await service.authenticate_member("alice", "wrong-password")
        unknown = await service.authenticate_member("nobody", DEFAULT_PASSWORD)

        assert ok.success and ok.data.id == alice.id
        assert wrong.error_code == ErrorCode.INVALID_CREDENTIALS
        assert unknown.error_code == ErrorCode.INVALID_CREDENTIALS
        assert wrong.error == unknown.error == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_suspended_member_cannot_authenticate(self, session, register):
        alice = await register("alice")
        service = MemberService(session)

        updated = await service.update_status(alice.id, "suspended")
        result = await service.authenticate_member("alice", DEFAULT_PASSWORD)

        assert updated.success
        assert result.error_code == ErrorCode.ACCOUNT_INACTIVE

    @pytest.mark.asyncio
    async def test_change_password(self, session, register):
        alice = await register("alice")
        service = MemberService(session)

        bad = await service.change_password(alice.id, "wrong-one", "newsecret")
        good = await service.change_password(alice.id, DEFAULT_PASSWORD, "newsecret")

        assert bad.error_code == ErrorCode.INVALID_CREDENTIALS
        assert good.success
        assert (await service.authenticate_member("alice", "newsecret")).success

    @pytest.mark.asyncio
    async def test_get_member(self, session, register):
        alice = await register("alice")
        service = MemberService(session)

        assert (await service.get_member(alice.id)).data.username == "alice"
        assert (await service.get_member(555)).error_code == ErrorCode.NOT_FOUND


class TestWalletService:
    """Deposits, withdrawals and history."""

    @pytest.mark.asyncio
    async def test_deposit_records_transaction(self, session, register):
        alice = await register("alice")
        service = WalletService(session)

        result = await service.deposit(alice.id, Decimal("250"))

        assert result.success
        record = result.data
        assert record.type == TransactionType.DEPOSIT
        assert record.wallet_type == WalletType.MAIN
        assert record.balance_before == Decimal("0")
        assert record.balance_after == Decimal("250")
        assert (await service.get_balance(alice.id, "main")).data == Decimal("250")

    @pytest.mark.asyncio
    async def test_deposit_validation(self, session, register):
        alice = await register("alice")
        service = WalletService(session)

        assert (
            await service.deposit(alice.id, Decimal("-1"))
        ).error_code == ErrorCode.INVALID_INPUT
        assert (
            await service.deposit(999, Decimal("10"))
        ).error_code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_withdraw_from_commission_wallet(self, session, register):
        """Withdrawals debit the commission wallet only."""
        alice_id = (await register("alice")).id
        await WalletService(session).deposit(alice_id, Decimal("100"))
        wallet = await WalletRepository(session).get_wallet_for_update(
            alice_id, WalletType.COMMISSION
        )
        wallet.balance = Decimal("40")
        await session.commit()
        service = WalletService(session)

        too_much = await service.withdraw(alice_id, Decimal("50"))
        below_min = await service.withdraw(
            alice_id, Decimal("5"), min_withdrawal_amount=Decimal("10")
        )
        ok = await service.withdraw(alice_id, Decimal("15"))

        assert too_much.error_code == ErrorCode.INSUFFICIENT_BALANCE
        assert below_min.error_code == ErrorCode.INVALID_INPUT
        assert ok.success
        balances = (await service.get_balances(alice_id)).data
        assert balances == {"main": Decimal("100"), "commission": Decimal("25")}

    @pytest.mark.asyncio
    async def test_transaction_history_filters(self, session, register):
        alice = await register("alice")
        service = WalletService(session)
        for amount in ("10", "20", "30"):
            await service.deposit(alice.id, Decimal(amount))

        history = await service.get_transactions(alice.id, limit=2)
        withdrawals = await service.get_transactions(
            alice.id, transaction_type="withdrawal"
        )

        assert history.data["total"] == 3
        assert [t.amount for t in history.data["transactions"]] == [
            Decimal("30"),
            Decimal("20"),
        ]
        assert withdrawals.data["total"] == 0
        assert (
            await service.get_transactions(alice.id, wallet_type="savings")
        ).error_code == ErrorCode.INVALID_INPUT


class TestPackageService:
    """Catalogue and purchases."""

    @pytest.mark.asyncio
    async def test_create_package_validation(self, session):
        service = PackageService(session)

        assert (
            await service.create_package("Bad", Decimal("0"), Decimal("10"))
        ).error_code == ErrorCode.INVALID_INPUT
        assert (
            await service.create_package("Bad", Decimal("10"), Decimal("150"))
        ).error_code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_purchase_debits_and_activates(
        self, session, register, create_package, fund
    ):
        """Purchase debits main wallet and sets the active package."""
        package = await create_package("Gold", Decimal("150"), Decimal("12"))
        alice = await register("alice")
        await fund(alice.id, Decimal("200"))
        service = PackageService(session)

        result = await service.purchase_package(alice.id, package.id)

        assert result.success
        summary = result.data
        assert summary.amount == Decimal("150")
        assert summary.new_balance == Decimal("50")
        assert summary.package_name == "Gold"
        assert summary.commissions_distributed == 0
        active = await service.get_active_package(alice.id)
        assert active.data.id == package.id

    @pytest.mark.asyncio
    async def test_purchase_pays_upline(
        self, session, register, create_package, fund
    ):
        """A sponsor holding a package earns once both legs have volume."""
        package = await create_package(price=Decimal("100"), commission_rate=Decimal("10"))
        sponsor = await register("sponsor")
        left = await register("lefty", sponsor.id)
        right = await register("righty", sponsor.id)
        service = PackageService(session)
        for member in (sponsor, left, right):
            await fund(member.id, Decimal("100"))

        await service.purchase_package(sponsor.id, package.id)
        first = await service.purchase_package(left.id, package.id)
        second = await service.purchase_package(right.id, package.id)

        assert first.data.commissions_distributed == 0
        assert second.data.commissions_distributed == 1
        balance = await WalletService(session).get_balance(sponsor.id, "commission")
        assert balance.data == Decimal("10")

    @pytest.mark.asyncio
    async def test_purchase_survives_failed_commission_step(
        self, session, register, create_package, fund, activate_package, set_legs
    ):
        """A rolled-back ancestor credit does not fail the committed purchase."""
        package = await create_package(price=Decimal("100"), commission_rate=Decimal("10"))
        sponsor = await register("sponsor")
        buyer = await register("buyer", sponsor.id)
        await activate_package(sponsor.id, package.id)
        await set_legs(sponsor.id, Decimal("0"), Decimal("100"))
        wallet = await WalletRepository(session).get_wallet(
            sponsor.id, WalletType.COMMISSION
        )
        await session.delete(wallet)
        await session.commit()
        await fund(buyer.id, Decimal("150"))

        result = await PackageService(session).purchase_package(buyer.id, package.id)

        assert result.success, result.error
        assert result.data.package_name == "Starter"
        assert result.data.amount == Decimal("100")
        assert result.data.new_balance == Decimal("50")
        assert result.data.commissions_distributed == 0
        # Instances loaded before the call are still readable
        assert package.name == "Starter"
        assert buyer.username == "buyer"
        volumes = await CommissionStatisticsService(session).get_leg_volumes(sponsor.id)
        assert volumes.data == {"left": Decimal("100"), "right": Decimal("100")}

    @pytest.mark.asyncio
    async def test_rejected_withdrawal_keeps_loaded_member(self, session, register):
        """Domain failures leave the caller's loaded instances intact."""
        alice = await register("alice")

        result = await WalletService(session).withdraw(alice.id, Decimal("10"))

        assert result.error_code == ErrorCode.INSUFFICIENT_BALANCE
        assert alice.username == "alice"
        assert (await WalletService(session).get_balance(alice.id, "main")).data == 0

    @pytest.mark.asyncio
    async def test_purchase_rejections(self, session, register, create_package):
        package_id = (await create_package()).id
        alice_id = (await register("alice")).id
        service = PackageService(session)

        broke = await service.purchase_package(alice_id, package_id)
        missing = await service.purchase_package(alice_id, 404)

        assert broke.error_code == ErrorCode.INSUFFICIENT_BALANCE
        assert missing.error_code == ErrorCode.NOT_FOUND
        assert (await service.get_active_package(alice_id)).data is None

    @pytest.mark.asyncio
    async def test_inactive_package(self, session, register, create_package, fund):
        package = await create_package()
        package.is_active = False
        await session.commit()
        alice = await register("alice")
        await fund(alice.id, Decimal("500"))

        result = await PackageService(session).purchase_package(alice.id, package.id)

        assert result.error_code == ErrorCode.INACTIVE_PACKAGE
        assert (await PackageService(session).get_available_packages()).data == []
