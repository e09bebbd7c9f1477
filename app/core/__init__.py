"""Core module containing interfaces."""

from app.core.interfaces import ISlotRepository, IApplicationRepository

__all__ = ["ISlotRepository", "IApplicationRepository"]
