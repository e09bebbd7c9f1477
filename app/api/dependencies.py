"""FastAPI dependencies shared by the roster routes."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.connection import get_db_session
from app.domain.unit_of_work import AbstractUnitOfWork, get_unit_of_work


async def get_uow(db: AsyncSession = Depends(get_db_session)) -> AbstractUnitOfWork:
    """Unit of Work bound to the request's database session"""
    return get_unit_of_work(db)
