"""
Application repository - submitted applications and their review status.

Inputs are sanitized here as well as in the intake service (trim, lower-case
e-mail), so whatever reaches the table obeys the stored-field rules.
"""

from typing import List, Optional
from sqlalchemy import select, delete, desc, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.core.interfaces import IApplicationRepository
from app.db.models import ApplicationModel
from app.domain.entities import (
    Application,
    utc_now,
    ApplicationNotFoundError,
    InvalidStatusError,
    SlotAlreadyFilledError,
    StorageError,
    ValidationError,
)
from app.domain.value_objects import ApplicationStatus

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# (field, error code, human readable name) in validation order
REQUIRED_FIELDS = (
    ("name", "MISSING_NAME", "Name"),
    ("email", "MISSING_EMAIL", "Email"),
    ("whatsapp_number", "MISSING_WHATSAPP", "WhatsApp"),
)


def clean_text(value) -> Optional[str]:
    """Trim a text value; None and blank strings become None."""
    if value is None or not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def check_required_fields(**fields) -> None:
    """
    Raise ValidationError for the first required field that is missing or blank.

    Example:
        check_required_fields(name=" Ada ", email="", whatsapp_number="123")
        -> ValidationError(code="MISSING_EMAIL")
    """
    for field, code, label in REQUIRED_FIELDS:
        if clean_text(fields.get(field)) is None:
            raise ValidationError(f"{label} is required", code=code)


def normalize_page(limit: Optional[int], offset: Optional[int]) -> tuple:
    """
    Apply paging defaults and bounds.

    limit defaults to 20 and is capped at 100; offset defaults to 0.

    Raises:
        ValidationError: INVALID_PAGINATION if limit < 1 or offset < 0
    """
    limit = DEFAULT_PAGE_SIZE if limit is None else limit
    offset = 0 if offset is None else offset
    if limit < 1:
        raise ValidationError("limit must be at least 1", code="INVALID_PAGINATION")
    if offset < 0:
        raise ValidationError("offset must not be negative", code="INVALID_PAGINATION")
    return min(limit, MAX_PAGE_SIZE), offset


class ApplicationRepository(IApplicationRepository):
    """SQLAlchemy implementation of IApplicationRepository"""

    def __init__(self, db_session: AsyncSession):
        self._db = db_session

    async def create(
        self,
        name: str,
        email: str,
        whatsapp_number: str,
        profile_image: str,
        slot_id: Optional[int],
        bio: Optional[str] = None
    ) -> Application:
        """
        Insert a new pending application.

        Raises:
            ValidationError: If name, email or whatsapp_number is blank
            SlotAlreadyFilledError: If another application already references slot_id
        """
        check_required_fields(name=name, email=email, whatsapp_number=whatsapp_number)
        if not profile_image:
            raise ValidationError("Profile image is required", code="MISSING_IMAGE")

        now = utc_now()
        db_application = ApplicationModel(
            name=clean_text(name),
            email=clean_text(email).lower(),
            whatsapp_number=clean_text(whatsapp_number),
            bio=clean_text(bio),
            profile_image=profile_image,
            status=ApplicationStatus.PENDING.value,
            slot_id=slot_id,
            created_at=now,
            updated_at=now,
        )
        self._db.add(db_application)

        try:
            await self._db.flush()
        except IntegrityError as e:
            # slot_id is unique - another intake referenced this slot first
            await self._db.rollback()
            logger.warning(f"Slot {slot_id} already referenced by another application")
            raise SlotAlreadyFilledError(slot_id) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to create application for slot {slot_id}: {e}")
            raise StorageError(f"Failed to create application: {e}") from e

        application = self._from_orm(db_application)
        logger.info(f"💾 Created application {application.id} for slot {slot_id}")
        return application

    async def get_by_id(self, application_id: int) -> Optional[Application]:
        db_application = await self._get_model(application_id)
        return self._from_orm(db_application) if db_application else None

    async def get_by_slot_id(self, slot_id: int) -> Optional[Application]:
        try:
            result = await self._db.execute(
                select(ApplicationModel).where(ApplicationModel.slot_id == slot_id)
            )
            db_application = result.scalar_one_or_none()
            return self._from_orm(db_application) if db_application else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve application for slot {slot_id}: {e}")
            raise StorageError(f"Failed to retrieve application for slot {slot_id}: {e}") from e

    async def list_all(
        self,
        status: Optional[str] = None,
        limit: Optional[int] = DEFAULT_PAGE_SIZE,
        offset: Optional[int] = 0
    ) -> List[Application]:
        """
        List applications, newest first.

        Args:
            status: Optional status filter
            limit: Page size (default 20, capped at 100)
            offset: Rows to skip (>= 0)
        """
        limit, offset = normalize_page(limit, offset)

        stmt = select(ApplicationModel)
        if status:
            stmt = stmt.where(ApplicationModel.status == status)
        stmt = (
            stmt.order_by(desc(ApplicationModel.created_at), desc(ApplicationModel.id))
            .limit(limit)
            .offset(offset)
        )

        try:
            result = await self._db.execute(stmt)
            return [self._from_orm(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list applications: {e}")
            raise StorageError(f"Failed to list applications: {e}") from e

    async def update_status(self, application_id: int, new_status: str) -> Application:
        """
        Set status and refresh updated_at, even when the status is unchanged.

        Raises:
            ApplicationNotFoundError: If application doesn't exist
            InvalidStatusError: If new_status is not pending/approved/rejected
        """
        db_application = await self._get_model(application_id)
        if db_application is None:
            raise ApplicationNotFoundError(application_id)

        if not ApplicationStatus.is_valid(new_status):
            raise InvalidStatusError(new_status)

        previous = db_application.status
        db_application.status = ApplicationStatus(new_status).value
        db_application.updated_at = utc_now()

        try:
            await self._db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update application {application_id}: {e}")
            raise StorageError(f"Failed to update application {application_id}: {e}") from e

        logger.info(f"📝 Application {application_id} status: {previous} → {db_application.status}")
        return self._from_orm(db_application)

    async def delete(self, application_id: int) -> bool:
        try:
            result = await self._db.execute(
                delete(ApplicationModel).where(ApplicationModel.id == application_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete application {application_id}: {e}")
            raise StorageError(f"Failed to delete application {application_id}: {e}") from e

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"🗑️  Deleted application {application_id}")
        return deleted

    async def count(self) -> int:
        try:
            result = await self._db.execute(select(func.count(ApplicationModel.id)))
            return result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to count applications: {e}")
            raise StorageError(f"Failed to count applications: {e}") from e

    async def _get_model(self, application_id: int) -> Optional[ApplicationModel]:
        try:
            result = await self._db.execute(
                select(ApplicationModel).where(ApplicationModel.id == application_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Failed to retrieve application {application_id}: {e}")
            raise StorageError(f"Failed to retrieve application {application_id}: {e}") from e

    # ORM → domain conversion

    def _from_orm(self, db_application: ApplicationModel) -> Application:
        return Application(
            id=db_application.id,
            name=db_application.name,
            email=db_application.email,
            whatsapp_number=db_application.whatsapp_number,
            bio=db_application.bio,
            profile_image=db_application.profile_image,
            status=ApplicationStatus(db_application.status),
            slot_id=db_application.slot_id,
            created_at=db_application.created_at,
            updated_at=db_application.updated_at,
        )
