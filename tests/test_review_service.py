"""
Tests for the review use cases: listings, occupancy, status changes, audit.
"""
import asyncio
import pytest

from app.application.intake_service import IntakeService
from app.application.review_service import ReviewService, SlotSummary
from app.domain.entities import (
    AlreadyInitializedError,
    ApplicationNotFoundError,
    InvalidStatusError,
    ValidationError,
)
from app.domain.value_objects import ApplicationStatus
from tests.factories import make_submission


async def submit(uow, count):
    service = IntakeService(uow)
    return [await service.submit(make_submission(index=i)) for i in range(1, count + 1)]


@pytest.mark.asyncio
async def test_initialize_slots_uses_configured_placeholder(uow):
    slots = await ReviewService(uow).initialize_slots(default_avatar="https://example.com/blank.svg")

    assert len(slots) == 6
    assert {slot.avatar_reference for slot in slots} == {"https://example.com/blank.svg"}


@pytest.mark.asyncio
async def test_initialize_slots_twice(uow, roster):
    with pytest.raises(AlreadyInitializedError):
        await ReviewService(uow).initialize_slots()


@pytest.mark.asyncio
async def test_slot_summary(uow, roster):
    review = ReviewService(uow)
    assert await review.slot_summary() == SlotSummary(total=6, filled=0, open=6)

    await submit(uow, 4)

    assert await review.slot_summary() == SlotSummary(total=6, filled=4, open=2)


@pytest.mark.asyncio
async def test_list_slots_reflects_occupancy(uow, roster):
    await submit(uow, 2)

    slots = await ReviewService(uow).list_slots()

    assert [slot.occupant_name for slot in slots[:3]] == ["Applicant 1", "Applicant 2", None]


@pytest.mark.asyncio
async def test_list_applications_with_filter(uow, roster):
    first, second, third = await submit(uow, 3)
    review = ReviewService(uow)
    await review.set_application_status(second.id, "approved")

    assert [a.id for a in await review.list_applications()] == [third.id, second.id, first.id]
    assert [a.id for a in await review.list_applications(status="approved")] == [second.id]
    assert [a.id for a in await review.list_applications(status="pending", limit=1)] == [third.id]
    assert [a.id for a in await review.list_applications(offset=2)] == [first.id]


@pytest.mark.asyncio
async def test_list_applications_rejects_unknown_status_filter(uow):
    with pytest.raises(InvalidStatusError):
        await ReviewService(uow).list_applications(status="archived")


@pytest.mark.asyncio
async def test_set_application_status(uow, roster):
    (application,) = await submit(uow, 1)

    updated = await ReviewService(uow).set_application_status(application.id, "approved")

    assert updated.status == ApplicationStatus.APPROVED
    assert updated.slot_id == application.slot_id


@pytest.mark.asyncio
async def test_status_reversal_is_permitted(uow, roster):
    """approved -> pending has no guard; this is the documented behavior"""
    (application,) = await submit(uow, 1)
    review = ReviewService(uow)

    await review.set_application_status(application.id, "approved")
    reverted = await review.set_application_status(application.id, "pending")
    rejected = await review.set_application_status(application.id, "rejected")

    assert reverted.status == ApplicationStatus.PENDING
    assert rejected.status == ApplicationStatus.REJECTED


@pytest.mark.asyncio
async def test_repeated_status_is_idempotent_and_refreshes_timestamp(uow, roster):
    (application,) = await submit(uow, 1)
    review = ReviewService(uow)

    first = await review.set_application_status(application.id, "rejected")
    await asyncio.sleep(0.01)
    second = await review.set_application_status(application.id, "rejected")

    assert second.status == first.status == ApplicationStatus.REJECTED
    assert second.updated_at > first.updated_at


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [None, "", "  "])
async def test_missing_status(uow, status):
    with pytest.raises(ValidationError) as exc_info:
        await ReviewService(uow).set_application_status(1, status)
    assert exc_info.value.code == "MISSING_STATUS"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["archived", "APPROVED", "filled", 5, ["approved"]])
async def test_invalid_status(uow, roster, status):
    (application,) = await submit(uow, 1)

    with pytest.raises(InvalidStatusError) as exc_info:
        await ReviewService(uow).set_application_status(application.id, status)
    assert exc_info.value.code == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_invalid_status_checked_before_lookup(uow):
    with pytest.raises(InvalidStatusError):
        await ReviewService(uow).set_application_status(424242, "archived")


@pytest.mark.asyncio
async def test_status_change_for_unknown_application(uow):
    with pytest.raises(ApplicationNotFoundError):
        await ReviewService(uow).set_application_status(424242, "approved")


@pytest.mark.asyncio
async def test_audit_consistent_roster(uow, roster):
    await submit(uow, 3)
    assert await ReviewService(uow).audit_roster() == []


@pytest.mark.asyncio
async def test_audit_uninitialized_roster(uow):
    issues = await ReviewService(uow).audit_roster()
    assert [issue.kind for issue in issues] == ["roster_size"]


@pytest.mark.asyncio
async def test_audit_reports_filled_slot_without_application(uow, roster):
    await uow.slots.fill(roster[1].id, "Orphan", "Leader", "data:image/png;base64,AAAA")
    await uow.commit()

    issues = await ReviewService(uow).audit_roster()

    assert [(issue.kind, issue.slot_id) for issue in issues] == [("filled_without_application", roster[1].id)]


@pytest.mark.asyncio
async def test_audit_reports_application_on_open_slot(uow, roster):
    application = await uow.applications.create(
        name="Stuck",
        email="stuck@example.com",
        whatsapp_number="123",
        profile_image="data:image/png;base64,AAAA",
        slot_id=roster[4].id,
    )
    await uow.commit()

    issues = await ReviewService(uow).audit_roster()

    assert [(issue.kind, issue.application_id) for issue in issues] == [
        ("application_on_open_slot", application.id)
    ]


@pytest.mark.asyncio
async def test_audit_reports_application_without_slot(uow, roster):
    application = await uow.applications.create(
        name="Detached",
        email="detached@example.com",
        whatsapp_number="123",
        profile_image="data:image/png;base64,AAAA",
        slot_id=None,
    )
    await uow.commit()

    issues = await ReviewService(uow).audit_roster()

    assert [(issue.kind, issue.application_id) for issue in issues] == [("missing_slot", application.id)]
