"""
Review Service - admin read paths and application status transitions.

Status transitions are unrestricted: any of pending/approved/rejected may
follow any other, including approved -> pending. There are no automatic
transitions; set_application_status() is the only writer.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from app.config import settings
from app.domain.entities import (
    Application,
    Slot,
    InvalidStatusError,
    ValidationError,
)
from app.domain.unit_of_work import AbstractUnitOfWork
from app.domain.value_objects import ApplicationStatus, ROSTER_SIZE, SlotStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotSummary:
    """Roster occupancy"""
    total: int
    filled: int
    open: int


@dataclass(frozen=True)
class RosterIssue:
    """One detected inconsistency between slots and applications"""
    kind: str
    detail: str
    slot_id: Optional[int] = None
    application_id: Optional[int] = None


class ReviewService:
    """Admin-facing use cases over the slot and application stores"""

    def __init__(self, uow: AbstractUnitOfWork):
        self._uow = uow

    async def list_applications(
        self,
        status: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None
    ) -> List[Application]:
        """
        List applications newest first.

        Raises:
            InvalidStatusError: If status filter is not a valid status
            ValidationError: INVALID_PAGINATION for limit < 1 or offset < 0
        """
        if status and not ApplicationStatus.is_valid(status):
            raise InvalidStatusError(status)
        return await self._uow.applications.list_all(status=status or None, limit=limit, offset=offset)

    async def list_slots(self) -> List[Slot]:
        return await self._uow.slots.list_all()

    async def slot_summary(self) -> SlotSummary:
        counts = await self._uow.slots.count_by_status()
        filled = counts.get(SlotStatus.FILLED.value, 0)
        return SlotSummary(total=ROSTER_SIZE, filled=filled, open=ROSTER_SIZE - filled)

    async def initialize_slots(self, default_avatar: Optional[str] = None) -> List[Slot]:
        """
        Create the six open slots.

        Raises:
            AlreadyInitializedError: If any slot already exists
        """
        slots = await self._uow.slots.initialize(default_avatar or settings.default_avatar_url)
        await self._uow.commit()
        return slots

    async def set_application_status(self, application_id: int, status: Any) -> Application:
        """
        Move an application to pending, approved or rejected.

        Setting the current status again is allowed and refreshes updated_at.

        Raises:
            ValidationError: MISSING_STATUS if status is empty
            InvalidStatusError: If status is not a valid status
            ApplicationNotFoundError: If application doesn't exist
        """
        if status is None or (isinstance(status, str) and not status.strip()):
            raise ValidationError("Status field is required", code="MISSING_STATUS")
        if not ApplicationStatus.is_valid(status):
            raise InvalidStatusError(status)

        application = await self._uow.applications.update_status(application_id, status)
        await self._uow.commit()
        return application

    async def audit_roster(self) -> List[RosterIssue]:
        """
        Check the slot/application invariants.

        Reports:
        - roster size other than six
        - filled slot with no application
        - application pointing at an open or missing slot
        """
        issues: List[RosterIssue] = []
        slots = await self._uow.slots.list_all()
        slots_by_id: Dict[int, Slot] = {slot.id: slot for slot in slots}

        if len(slots) != ROSTER_SIZE:
            issues.append(RosterIssue(
                kind="roster_size",
                detail=f"Expected {ROSTER_SIZE} slots, found {len(slots)}",
            ))

        for slot in slots:
            application = await self._uow.applications.get_by_slot_id(slot.id)
            if not slot.is_open and application is None:
                issues.append(RosterIssue(
                    kind="filled_without_application",
                    detail=f"Slot at position {slot.position} is filled but no application references it",
                    slot_id=slot.id,
                ))
            elif slot.is_open and application is not None:
                issues.append(RosterIssue(
                    kind="application_on_open_slot",
                    detail=f"Application {application.id} references open slot at position {slot.position}",
                    slot_id=slot.id,
                    application_id=application.id,
                ))

        offset = 0
        while True:
            page = await self._uow.applications.list_all(limit=100, offset=offset)
            for application in page:
                if application.slot_id is None or application.slot_id not in slots_by_id:
                    issues.append(RosterIssue(
                        kind="missing_slot",
                        detail=f"Application {application.id} references missing slot {application.slot_id}",
                        application_id=application.id,
                    ))
            if len(page) < 100:
                break
            offset += 100

        for issue in issues:
            logger.warning(f"⚠️  Roster issue [{issue.kind}]: {issue.detail}")
        return issues
