"""
Unit of Work pattern for transaction management.

The Unit of Work gives services:
1. Repository access (slots, applications) over one session
2. Explicit commit/rollback, so a saga can commit each step on its own
3. Proper resource cleanup when used as an async context manager
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.domain.entities import StorageError

if TYPE_CHECKING:
    from app.core.interfaces import ISlotRepository, IApplicationRepository

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """
    Abstract Unit of Work for transaction management.

    Provides:
    - Transaction boundaries (commit/rollback)
    - Repository access (slots, applications)
    """

    slots: 'ISlotRepository'
    applications: 'IApplicationRepository'

    async def __aenter__(self):
        """Enter async context"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """
        Exit async context.

        On success: commits
        On exception: rolls back
        """
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            await self.close()

    @abstractmethod
    async def commit(self):
        """Commit transaction"""
        pass

    @abstractmethod
    async def rollback(self):
        """Rollback transaction"""
        pass

    @abstractmethod
    async def close(self):
        """Close resources"""
        pass


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """SQLAlchemy implementation of Unit of Work"""

    def __init__(self, session: AsyncSession):
        """
        Initialize Unit of Work.

        Args:
            session: SQLAlchemy async session
        """
        self._session = session

        # Import here to avoid circular dependencies
        from app.repositories.slot_repository import SlotRepository
        from app.repositories.application_repository import ApplicationRepository

        self.slots = SlotRepository(session)
        self.applications = ApplicationRepository(session)

    async def commit(self):
        """
        Commit transaction.

        Raises:
            StorageError: If the database rejects the commit
        """
        try:
            await self._session.commit()
            logger.debug("✅ Transaction committed")
        except SQLAlchemyError as e:
            logger.error(f"❌ Commit failed: {e}")
            await self._session.rollback()
            raise StorageError(f"Commit failed: {e}") from e

    async def rollback(self):
        """Rollback transaction - discards all pending changes."""
        await self._session.rollback()
        logger.debug("↩️  Transaction rolled back")

    async def close(self):
        """Close session and release resources"""
        await self._session.close()


def get_unit_of_work(session: AsyncSession) -> AbstractUnitOfWork:
    """
    Factory function for Unit of Work.

    Args:
        session: SQLAlchemy async session

    Returns:
        Configured Unit of Work instance

    Usage in FastAPI:
        async def endpoint(db: AsyncSession = Depends(get_db_session)):
            service = IntakeService(get_unit_of_work(db))
            ...
    """
    return SQLAlchemyUnitOfWork(session)
