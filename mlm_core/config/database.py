"""
Database configuration.

Async engine and session factory for the ledger store.
"""

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mlm_core.config.settings import settings
from mlm_core.models import Base


def configure_sqlite_locking(engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction take the write lock up front.

    pysqlite defers BEGIN until the first DML statement, so two connections
    can both read and then deadlock upgrading to the write lock. Emitting
    BEGIN IMMEDIATE serializes writers through the busy timeout instead.
    Read-only transactions take the lock as well; SQLite is only used for
    development and tests.

    Args:
        engine: Async engine bound to a sqlite+aiosqlite URL
    """
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """
    Create async engine for the given URL (defaults from settings).

    Args:
        database_url: Override for settings.database_url
        echo: Override for settings.database_echo

    Returns:
        Configured AsyncEngine
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            echo=settings.database_echo if echo is None else echo,
            connect_args={"timeout": settings.sqlite_busy_timeout},
        )
        configure_sqlite_locking(engine)
    else:
        engine = create_async_engine(
            url,
            echo=settings.database_echo if echo is None else echo,
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
        )

    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine()
async_session_maker = build_session_maker(engine)


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Create all tables (checkfirst).

    Args:
        target: Engine to use (defaults to module engine)
    """
    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    logger.info("Database tables created")


async def close_db(target: AsyncEngine | None = None) -> None:
    """Dispose engine connections."""
    await (target or engine).dispose()
    logger.info("Database connections closed")
