"""
Engine and session lifecycle for the roster database.

SQLite (aiosqlite) is the default; any async SQLAlchemy URL works via
DATABASE_URL. init_db() must run before get_db_session() is used.
"""
from typing import Optional
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from app.db.models import Base
from app.config import settings
import logging

logger = logging.getLogger(__name__)

# Set by init_db(), cleared by close_db()
engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


SQLITE_BUSY_TIMEOUT = 30  # seconds a writer waits for another connection's lock


def is_memory_database(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def _build_engine(database_url: str) -> AsyncEngine:
    if is_memory_database(database_url):
        # In-memory databases only exist per connection, so every session shares one
        return create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        # A connection per session; SQLite locking plus the unique slot_id
        # constraint arbitrate concurrent intakes
        return create_async_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        )
    return create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


async def init_db(database_url: Optional[str] = None):
    """
    Create the engine and session factory, then create missing tables.

    Args:
        database_url: Overrides settings.database_url (tests, CLI --database-url)
    """
    global engine, async_session_maker

    database_url = database_url or settings.database_url
    logger.info(f"Initializing database: {database_url.split('://')[0]}")

    engine = _build_engine(database_url)
    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("✅ Database ready")


async def get_db_session() -> AsyncSession:
    """
    Request-scoped session for FastAPI's Depends().

    Whatever is still pending when the endpoint returns is committed; an
    exception rolls it back. Intake commits its own steps through the unit
    of work, so the closing commit usually has nothing to do.
    """
    if async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with async_session_maker() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        else:
            await session.commit()


async def close_db():
    """Dispose the engine; init_db() may be called again afterwards."""
    global engine, async_session_maker
    if engine is None:
        return
    await engine.dispose()
    engine = None
    async_session_maker = None
    logger.info("Database connection closed")
