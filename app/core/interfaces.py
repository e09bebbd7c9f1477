"""
Core interfaces for the event roster.

Repositories return domain entities from app/domain/entities.py and raise
domain errors; services depend only on these interfaces.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.entities import Slot, Application


class ISlotRepository(ABC):
    """
    Interface for the fixed roster of slots.

    Implementations must handle:
    - One-shot initialization (never a duplicate or partial roster)
    - Lowest-position-first claim selection
    - Conditional fill (open -> filled exactly once per slot)
    """

    @abstractmethod
    async def initialize(self, default_avatar: str) -> List['Slot']:
        """
        Create the six open slots.

        Raises:
            AlreadyInitializedError: If any slot already exists
        """
        pass

    @abstractmethod
    async def list_all(self) -> List['Slot']:
        """All slots ordered by position ascending"""
        pass

    @abstractmethod
    async def get_by_id(self, slot_id: int) -> Optional['Slot']:
        """Get slot by ID"""
        pass

    @abstractmethod
    async def claim_next_open(self) -> 'Slot':
        """
        Select the open slot with the lowest position (no mutation).

        Raises:
            NoOpenSlotsError: If every slot is filled
        """
        pass

    @abstractmethod
    async def fill(
        self,
        slot_id: int,
        occupant_name: str,
        occupant_role: str,
        avatar_reference: str
    ) -> 'Slot':
        """
        Transition a slot from open to filled.

        Raises:
            SlotNotFoundError: If slot doesn't exist
            SlotAlreadyFilledError: If the slot is no longer open
        """
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[str, int]:
        """Number of slots per status value"""
        pass


class IApplicationRepository(ABC):
    """Interface for application storage and retrieval"""

    @abstractmethod
    async def create(
        self,
        name: str,
        email: str,
        whatsapp_number: str,
        profile_image: str,
        slot_id: Optional[int],
        bio: Optional[str] = None
    ) -> 'Application':
        """
        Insert a pending application.

        Raises:
            ValidationError: If a required field is empty after trimming
            SlotAlreadyFilledError: If another application references slot_id
        """
        pass

    @abstractmethod
    async def get_by_id(self, application_id: int) -> Optional['Application']:
        """Get application by ID"""
        pass

    @abstractmethod
    async def get_by_slot_id(self, slot_id: int) -> Optional['Application']:
        """Get the application that claimed a slot"""
        pass

    @abstractmethod
    async def list_all(
        self,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List['Application']:
        """Applications ordered by creation time, newest first"""
        pass

    @abstractmethod
    async def update_status(self, application_id: int, new_status: str) -> 'Application':
        """
        Set application status and refresh updated_at.

        Raises:
            ApplicationNotFoundError: If application doesn't exist
            InvalidStatusError: If new_status is not a valid status
        """
        pass

    @abstractmethod
    async def delete(self, application_id: int) -> bool:
        """Hard delete (compensation only). Returns True if a row was removed."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Total number of applications"""
        pass
