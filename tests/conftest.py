"""
Pytest configuration and shared fixtures.
"""
import pytest_asyncio
from app.db import connection
from app.db.connection import init_db, close_db
from app.domain.unit_of_work import SQLAlchemyUnitOfWork
from tests.factories import TEST_AVATAR

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function", autouse=True)
async def clean_database():
    """
    Fresh in-memory database for each test.

    This fixture runs before each test function to ensure a clean state.
    """
    await init_db(TEST_DATABASE_URL)

    yield

    await close_db()


@pytest_asyncio.fixture
async def uow():
    """Unit of Work over its own session (closed after the test)"""
    async with connection.async_session_maker() as session:
        yield SQLAlchemyUnitOfWork(session)


@pytest_asyncio.fixture
async def roster(uow):
    """Six open slots"""
    slots = await uow.slots.initialize(TEST_AVATAR)
    await uow.commit()
    return slots
