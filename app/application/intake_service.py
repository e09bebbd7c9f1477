"""
Intake Service - validates a submission and assigns it the next open slot.

Workflow (a two-step saga, each step committed on its own):
1. Validate the submission (short-circuits on the first failure)
2. Claim the lowest open slot and derive its role from the position
3. Create the pending application referencing the slot
4. Brand the slot with the applicant's name, role and avatar
5. If branding fails, delete the application again (compensation)

A slot lost to a concurrent intake (SlotAlreadyFilledError) is retried by
reselecting; any other branding failure surfaces as SlotUpdateFailedError.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from app.config import settings
from app.domain.entities import (
    Application,
    Slot,
    NoOpenSlotsError,
    SlotAlreadyFilledError,
    SlotUpdateFailedError,
    StorageError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from app.domain.unit_of_work import AbstractUnitOfWork
from app.domain.value_objects import (
    ProfileImage,
    ROSTER_SIZE,
    canonical_image_type,
    role_for_position,
)
from app.repositories.application_repository import check_required_fields, clean_text

logger = logging.getLogger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"


@dataclass
class ImageUpload:
    """Uploaded file as received from the client (declared type + raw bytes)"""
    content_type: Optional[str]
    data: bytes
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ApplicationSubmission:
    """Raw application submission, independent of the web framework"""
    content_type: Optional[str]
    name: Optional[str] = None
    email: Optional[str] = None
    whatsapp_number: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[ImageUpload] = None


@dataclass(frozen=True)
class ValidatedSubmission:
    """Sanitized submission: trimmed fields, lower-cased e-mail, encoded-ready image"""
    name: str
    email: str
    whatsapp_number: str
    bio: Optional[str]
    image: ProfileImage


def validate_submission(
    submission: ApplicationSubmission,
    max_image_bytes: Optional[int] = None
) -> ValidatedSubmission:
    """
    Validate a submission in a fixed order, failing on the first problem.

    Order: content type, name, email, whatsapp, image presence, image type,
    image size.

    Raises:
        UnsupportedMediaTypeError: Not a multipart/form-data submission
        ValidationError: MISSING_NAME, MISSING_EMAIL, MISSING_WHATSAPP,
            MISSING_IMAGE, INVALID_IMAGE_TYPE or IMAGE_TOO_LARGE
    """
    if max_image_bytes is None:
        max_image_bytes = settings.max_image_bytes

    content_type = submission.content_type or ""
    if MULTIPART_FORM_DATA not in content_type.lower():
        raise UnsupportedMediaTypeError(submission.content_type)

    check_required_fields(
        name=submission.name,
        email=submission.email,
        whatsapp_number=submission.whatsapp_number,
    )

    image = submission.image
    if image is None:
        raise ValidationError("Profile image is required", code="MISSING_IMAGE")

    media_type = canonical_image_type(image.content_type)
    if not media_type:
        raise ValidationError("Profile image must be JPG, JPEG, or PNG", code="INVALID_IMAGE_TYPE")

    if image.size > max_image_bytes:
        raise ValidationError(
            f"Profile image must be smaller than {max_image_bytes // (1024 * 1024)} MB",
            code="IMAGE_TOO_LARGE",
        )

    return ValidatedSubmission(
        name=clean_text(submission.name),
        email=clean_text(submission.email).lower(),
        whatsapp_number=clean_text(submission.whatsapp_number),
        bio=clean_text(submission.bio),
        image=ProfileImage(media_type=media_type, data=image.data),
    )


class IntakeService:
    """
    Application intake orchestration.

    Usage:
        service = IntakeService(get_unit_of_work(db))
        application = await service.submit(submission)
    """

    def __init__(
        self,
        uow: AbstractUnitOfWork,
        max_image_bytes: Optional[int] = None,
        max_attempts: int = ROSTER_SIZE
    ):
        self._uow = uow
        self._max_image_bytes = max_image_bytes
        self._max_attempts = max(1, max_attempts)

    async def submit(self, submission: ApplicationSubmission) -> Application:
        """
        Validate a submission and assign it the lowest open slot.

        Returns:
            The created (pending) application

        Raises:
            ValidationError: Submission rejected (nothing persisted)
            NoOpenSlotsError: Every slot is filled (nothing persisted)
            SlotUpdateFailedError: Slot branding failed; application removed again
            SlotAlreadyFilledError: Lost the race for a slot on every attempt
        """
        validated = validate_submission(submission, self._max_image_bytes)
        avatar = validated.image.to_data_url()

        conflict = None
        for attempt in range(1, self._max_attempts + 1):
            slot = await self._claim()
            role = role_for_position(slot.position)

            try:
                application = await self._uow.applications.create(
                    name=validated.name,
                    email=validated.email,
                    whatsapp_number=validated.whatsapp_number,
                    bio=validated.bio,
                    profile_image=avatar,
                    slot_id=slot.id,
                )
                await self._uow.commit()
            except SlotAlreadyFilledError as e:
                logger.info(f"🔁 Slot {slot.id} taken by a concurrent intake (attempt {attempt}), reselecting")
                conflict = e
                continue

            try:
                await self._uow.slots.fill(
                    slot.id,
                    occupant_name=validated.name,
                    occupant_role=role.value,
                    avatar_reference=avatar,
                )
                await self._uow.commit()
            except SlotAlreadyFilledError as e:
                logger.info(f"🔁 Slot {slot.id} filled by a concurrent intake (attempt {attempt}), reselecting")
                await self._compensate(application, slot, e)
                conflict = e
                continue
            except Exception as e:
                await self._compensate(application, slot, e)
                raise SlotUpdateFailedError(slot.id, application.id) from e

            logger.info(
                f"✅ Application {application.id} accepted: slot {slot.id} "
                f"(position {slot.position}) as {role.value}"
            )
            return application

        logger.warning(f"Gave up after {self._max_attempts} contested slot claims")
        raise conflict

    async def _claim(self) -> Slot:
        try:
            return await self._uow.slots.claim_next_open()
        except NoOpenSlotsError:
            logger.info("🚫 Submission rejected: all slots are filled")
            raise

    async def _compensate(self, application: Application, slot: Slot, cause: Exception) -> None:
        """
        Delete the application whose slot could not be branded.

        Raises:
            SlotUpdateFailedError: If the delete itself fails (compensated=False)
        """
        if not isinstance(cause, SlotAlreadyFilledError):
            logger.error(
                f"❌ Failed to update slot {slot.id} (position {slot.position}) "
                f"for application {application.id}: {cause}"
            )

        try:
            await self._uow.rollback()
            await self._uow.applications.delete(application.id)
            await self._uow.commit()
        except Exception as e:
            logger.critical(
                f"🚨 Compensation failed - manual reconciliation required: "
                f"application_id={application.id} slot_id={slot.id} "
                f"position={slot.position} created_at={application.created_at.isoformat()} "
                f"fill_error={cause!r} delete_error={e!r}"
            )
            raise SlotUpdateFailedError(slot.id, application.id, compensated=False) from e

        logger.warning(f"↩️  Compensated: deleted application {application.id} (slot {slot.id})")

        # The fill may have reached the database before failing (e.g. lost commit ack)
        try:
            current = await self._uow.slots.get_by_id(slot.id)
        except StorageError as e:
            logger.error(f"Could not verify slot {slot.id} after compensation: {e}")
            return

        if current is not None and not current.is_open and not isinstance(cause, SlotAlreadyFilledError):
            logger.error(
                f"🚨 Inconsistent roster: slot {slot.id} (position {slot.position}) is "
                f"{current.status.value} but application {application.id} was deleted"
            )
