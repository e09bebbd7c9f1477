"""
Integration tests for ApplicationRepository.

These tests verify the repository works correctly with a real database.
"""
import asyncio
import pytest

from app.domain.entities import (
    ApplicationNotFoundError,
    InvalidStatusError,
    SlotAlreadyFilledError,
    ValidationError,
)
from app.domain.value_objects import ApplicationStatus

IMAGE = "data:image/png;base64,iVBORw0KGgo="


async def create(uow, index=1, slot_id=None, **overrides):
    fields = dict(
        name=f"Applicant {index}",
        email=f"applicant{index}@example.com",
        whatsapp_number="+62 812 0000 0000",
        profile_image=IMAGE,
        slot_id=slot_id,
    )
    fields.update(overrides)
    application = await uow.applications.create(**fields)
    await uow.commit()
    return application


@pytest.mark.asyncio
async def test_create_sanitizes_fields(uow, roster):
    application = await create(
        uow,
        slot_id=roster[0].id,
        name=" Ada ",
        email="ADA@X.COM",
        whatsapp_number="  +44 20 7946 0000 ",
        bio="   ",
    )

    assert application.name == "Ada"
    assert application.email == "ada@x.com"
    assert application.whatsapp_number == "+44 20 7946 0000"
    assert application.bio is None
    assert application.status == ApplicationStatus.PENDING
    assert application.slot_id == roster[0].id
    assert application.created_at == application.updated_at

    stored = await uow.applications.get_by_id(application.id)
    assert stored.name == "Ada"
    assert stored.email == "ada@x.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("field,code", [
    ("name", "MISSING_NAME"),
    ("email", "MISSING_EMAIL"),
    ("whatsapp_number", "MISSING_WHATSAPP"),
])
async def test_create_rejects_blank_required_field(uow, field, code):
    with pytest.raises(ValidationError) as exc_info:
        await create(uow, **{field: "   "})

    assert exc_info.value.code == code
    assert await uow.applications.count() == 0


@pytest.mark.asyncio
async def test_create_rejects_second_application_for_same_slot(uow, roster):
    await create(uow, index=1, slot_id=roster[0].id)

    with pytest.raises(SlotAlreadyFilledError) as exc_info:
        await create(uow, index=2, slot_id=roster[0].id)

    assert exc_info.value.slot_id == roster[0].id
    assert await uow.applications.count() == 1


@pytest.mark.asyncio
async def test_get_by_slot_id(uow, roster):
    application = await create(uow, slot_id=roster[2].id)

    assert (await uow.applications.get_by_slot_id(roster[2].id)).id == application.id
    assert await uow.applications.get_by_slot_id(roster[3].id) is None


@pytest.mark.asyncio
async def test_get_nonexistent_application(uow):
    assert await uow.applications.get_by_id(12345) is None


@pytest.mark.asyncio
async def test_list_all_newest_first(uow):
    created = [await create(uow, index=i) for i in range(1, 4)]

    listed = await uow.applications.list_all()

    assert [a.id for a in listed] == [a.id for a in reversed(created)]


@pytest.mark.asyncio
async def test_list_all_filters_by_status(uow):
    first = await create(uow, index=1)
    await create(uow, index=2)
    await uow.applications.update_status(first.id, "approved")
    await uow.commit()

    approved = await uow.applications.list_all(status="approved")
    pending = await uow.applications.list_all(status="pending")

    assert [a.id for a in approved] == [first.id]
    assert len(pending) == 1


@pytest.mark.asyncio
async def test_list_all_paging(uow):
    created = [await create(uow, index=i) for i in range(1, 6)]
    newest_first = [a.id for a in reversed(created)]

    page = await uow.applications.list_all(limit=2, offset=1)

    assert [a.id for a in page] == newest_first[1:3]


@pytest.mark.asyncio
async def test_list_all_defaults_to_twenty_and_caps_at_hundred(uow):
    for i in range(1, 106):
        await uow.applications.create(
            name=f"Applicant {i}",
            email=f"applicant{i}@example.com",
            whatsapp_number="123",
            profile_image=IMAGE,
            slot_id=None,
        )
    await uow.commit()

    assert len(await uow.applications.list_all()) == 20
    assert len(await uow.applications.list_all(limit=500)) == 100


@pytest.mark.asyncio
@pytest.mark.parametrize("limit,offset", [(0, 0), (-5, 0), (10, -1)])
async def test_list_all_rejects_invalid_paging(uow, limit, offset):
    with pytest.raises(ValidationError) as exc_info:
        await uow.applications.list_all(limit=limit, offset=offset)
    assert exc_info.value.code == "INVALID_PAGINATION"


@pytest.mark.asyncio
async def test_update_status(uow):
    application = await create(uow)

    updated = await uow.applications.update_status(application.id, "rejected")
    await uow.commit()

    assert updated.status == ApplicationStatus.REJECTED
    assert updated.updated_at >= application.updated_at
    assert (await uow.applications.get_by_id(application.id)).status == ApplicationStatus.REJECTED


@pytest.mark.asyncio
async def test_update_status_same_value_refreshes_timestamp(uow):
    application = await create(uow)
    first = await uow.applications.update_status(application.id, "approved")
    await uow.commit()

    await asyncio.sleep(0.01)
    second = await uow.applications.update_status(application.id, "approved")
    await uow.commit()

    assert second.status == ApplicationStatus.APPROVED
    assert second.updated_at > first.updated_at


@pytest.mark.asyncio
async def test_update_status_unknown_application(uow):
    with pytest.raises(ApplicationNotFoundError) as exc_info:
        await uow.applications.update_status(999, "approved")
    assert exc_info.value.code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_update_status_invalid_value(uow):
    application = await create(uow)

    with pytest.raises(InvalidStatusError) as exc_info:
        await uow.applications.update_status(application.id, "archived")

    assert exc_info.value.code == "INVALID_STATUS"
    assert (await uow.applications.get_by_id(application.id)).status == ApplicationStatus.PENDING


@pytest.mark.asyncio
async def test_delete(uow):
    application = await create(uow)

    assert await uow.applications.delete(application.id) is True
    await uow.commit()

    assert await uow.applications.get_by_id(application.id) is None
    assert await uow.applications.delete(application.id) is False
