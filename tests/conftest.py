"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for tests (set before mlm_core settings are imported)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_mlm.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FILE", "")
# Cheap bcrypt hashing and enough retries for concurrent writers
os.environ.setdefault("PASSWORD_SALT_ROUNDS", "4")
os.environ.setdefault("OPTIMISTIC_LOCK_MAX_RETRIES", "20")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy import update

from mlm_core.config.database import build_engine, build_session_maker, close_db, init_db
from mlm_core.models import Member, Package, TreeNode
from mlm_core.services.member_service import MemberService
from mlm_core.services.package_service import PackageService
from mlm_core.services.wallet_service import WalletService

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.begin_nested = AsyncMock(return_value=AsyncMock())
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with a fresh schema per test."""
    db_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    await init_db(db_engine)
    yield db_engine
    await close_db(db_engine)


@pytest.fixture
def session_maker(engine):
    """Session factory bound to the test engine."""
    return build_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    """Async session for one test."""
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def register(session):
    """Register a member through MemberService and return it."""
    service = MemberService(session)

    async def _register(
        username: str,
        sponsor_id: int | None = None,
        position: str | None = None,
    ) -> Member:
        result = await service.register_member(
            username, DEFAULT_PASSWORD, sponsor_id, position
        )
        assert result.success, result.error
        return result.data

    return _register


@pytest.fixture
def create_package(session):
    """Create an active package and return it."""
    service = PackageService(session)

    async def _create(
        name: str = "Starter",
        price: Decimal = Decimal("100"),
        commission_rate: Decimal = Decimal("10"),
    ) -> Package:
        result = await service.create_package(name, price, commission_rate)
        assert result.success, result.error
        return result.data

    return _create


@pytest.fixture
def fund(session):
    """Deposit into a member's main wallet."""
    service = WalletService(session)

    async def _fund(member_id: int, amount: Decimal) -> None:
        result = await service.deposit(member_id, amount)
        assert result.success, result.error

    return _fund


@pytest.fixture
def set_legs(session):
    """Overwrite a member's leg volumes."""

    async def _set(member_id: int, left: Decimal, right: Decimal) -> None:
        await session.execute(
            update(TreeNode)
            .where(TreeNode.member_id == member_id)
            .values(
                left_leg_volume=left,
                right_leg_volume=right,
                version=TreeNode.version + 1,
            )
        )
        await session.commit()

    return _set


@pytest.fixture
def activate_package(session):
    """Give a member an active package without a purchase."""

    async def _activate(member_id: int, package_id: int) -> None:
        await session.execute(
            update(Member)
            .where(Member.id == member_id)
            .values(active_package_id=package_id)
        )
        await session.commit()

    return _activate
