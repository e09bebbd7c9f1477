"""
Slot repository - the fixed roster of six Leader/Co-Leader slots.

Concurrency:
- initialize() relies on the unique constraint on slots.position, so two
  concurrent initializers can never produce a duplicate or partial roster.
- fill() is a conditional UPDATE ... WHERE status = 'open' (compare-and-swap
  on status). Zero affected rows means another intake won the slot.
"""

from typing import Dict, List, Optional
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.interfaces import ISlotRepository
from app.db.models import SlotModel, ApplicationModel
from app.domain.entities import (
    Slot,
    utc_now,
    AlreadyInitializedError,
    NoOpenSlotsError,
    SlotAlreadyFilledError,
    SlotNotFoundError,
    StorageError,
)
from app.domain.value_objects import ROSTER_SIZE, SlotStatus

logger = logging.getLogger(__name__)


class SlotRepository(ISlotRepository):
    """SQLAlchemy implementation of ISlotRepository"""

    def __init__(self, db_session: AsyncSession):
        self._db = db_session

    async def initialize(self, default_avatar: str) -> List[Slot]:
        """
        Create six open slots with positions 1..6.

        Args:
            default_avatar: Placeholder avatar URL for open slots

        Returns:
            Created slots ordered by position

        Raises:
            AlreadyInitializedError: If any slot already exists
        """
        existing = await self._count()
        if existing:
            logger.warning(f"Roster already initialized ({existing} slots)")
            raise AlreadyInitializedError(existing)

        now = utc_now()
        self._db.add_all([
            SlotModel(
                position=position,
                status=SlotStatus.OPEN.value,
                avatar_reference=default_avatar,
                created_at=now,
                updated_at=now,
            )
            for position in range(1, ROSTER_SIZE + 1)
        ])

        try:
            await self._db.flush()
        except IntegrityError as e:
            # A concurrent initializer inserted positions first - discard our rows
            await self._db.rollback()
            logger.warning("Roster initialization lost race to a concurrent initializer")
            raise AlreadyInitializedError(await self._count()) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize roster: {e}")
            raise StorageError(f"Failed to initialize roster: {e}") from e

        slots = await self.list_all()
        logger.info(f"🪑 Initialized roster with {len(slots)} open slots")
        return slots

    async def list_all(self) -> List[Slot]:
        try:
            result = await self._db.execute(
                select(SlotModel).order_by(SlotModel.position.asc())
            )
            return [self._from_orm(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list slots: {e}")
            raise StorageError(f"Failed to list slots: {e}") from e

    async def get_by_id(self, slot_id: int) -> Optional[Slot]:
        try:
            result = await self._db.execute(
                select(SlotModel)
                .where(SlotModel.id == slot_id)
                .execution_options(populate_existing=True)  # another session may have filled it
            )
            db_slot = result.scalar_one_or_none()
            return self._from_orm(db_slot) if db_slot else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve slot {slot_id}: {e}")
            raise StorageError(f"Failed to retrieve slot {slot_id}: {e}") from e

    async def claim_next_open(self) -> Slot:
        """
        Select the open slot with the lowest position.

        Selection only - the slot stays open until fill() succeeds. Open slots
        already referenced by an application belong to an intake still in
        flight and are skipped.

        Raises:
            NoOpenSlotsError: If every slot is filled
        """
        try:
            result = await self._db.execute(
                select(SlotModel)
                .outerjoin(ApplicationModel, ApplicationModel.slot_id == SlotModel.id)
                .where(
                    SlotModel.status == SlotStatus.OPEN.value,
                    ApplicationModel.id.is_(None),
                )
                .order_by(SlotModel.position.asc())
                .limit(1)
            )
            db_slot = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to select open slot: {e}")
            raise StorageError(f"Failed to select open slot: {e}") from e

        if db_slot is None:
            raise NoOpenSlotsError()

        slot = self._from_orm(db_slot)
        logger.debug(f"🎯 Claimed slot {slot.id} (position {slot.position})")
        return slot

    async def fill(
        self,
        slot_id: int,
        occupant_name: str,
        occupant_role: str,
        avatar_reference: str
    ) -> Slot:
        """
        Transition a slot from open to filled and brand it with its occupant.

        Raises:
            SlotNotFoundError: If slot doesn't exist
            SlotAlreadyFilledError: If the slot was filled by someone else first
        """
        try:
            result = await self._db.execute(
                update(SlotModel)
                .where(
                    SlotModel.id == slot_id,
                    SlotModel.status == SlotStatus.OPEN.value,
                )
                .values(
                    status=SlotStatus.FILLED.value,
                    occupant_name=occupant_name,
                    occupant_role=occupant_role,
                    avatar_reference=avatar_reference,
                    updated_at=utc_now(),
                )
                .execution_options(synchronize_session="evaluate")
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to fill slot {slot_id}: {e}")
            raise StorageError(f"Failed to fill slot {slot_id}: {e}") from e

        if result.rowcount == 0:
            existing = await self.get_by_id(slot_id)
            if existing is None:
                raise SlotNotFoundError(slot_id)
            logger.warning(f"Slot {slot_id} (position {existing.position}) was already filled")
            raise SlotAlreadyFilledError(slot_id)

        slot = await self.get_by_id(slot_id)
        logger.info(f"✅ Slot {slot.id} (position {slot.position}) filled as {occupant_role}")
        return slot

    async def count_by_status(self) -> Dict[str, int]:
        try:
            result = await self._db.execute(
                select(SlotModel.status, func.count(SlotModel.id)).group_by(SlotModel.status)
            )
            counts = {status.value: 0 for status in SlotStatus}
            for status, count in result.all():
                counts[status] = count
            return counts
        except SQLAlchemyError as e:
            logger.error(f"Failed to count slots: {e}")
            raise StorageError(f"Failed to count slots: {e}") from e

    async def _count(self) -> int:
        try:
            result = await self._db.execute(select(func.count(SlotModel.id)))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to count slots: {e}")
            raise StorageError(f"Failed to count slots: {e}") from e

    # ORM → domain conversion

    def _from_orm(self, db_slot: SlotModel) -> Slot:
        return Slot(
            id=db_slot.id,
            position=db_slot.position,
            status=SlotStatus(db_slot.status),
            occupant_name=db_slot.occupant_name,
            occupant_role=db_slot.occupant_role,
            avatar_reference=db_slot.avatar_reference,
            created_at=db_slot.created_at,
            updated_at=db_slot.updated_at,
        )
