"""
Integration tests for SlotRepository.

These tests verify the roster store works correctly with a real database.
"""
import pytest

from app.domain.entities import (
    AlreadyInitializedError,
    NoOpenSlotsError,
    SlotAlreadyFilledError,
    SlotNotFoundError,
)
from app.domain.value_objects import SlotStatus
from tests.factories import TEST_AVATAR


async def fill_position(uow, slot, name="Occupant"):
    return await uow.slots.fill(slot.id, name, "Leader", "data:image/png;base64,AAAA")


@pytest.mark.asyncio
async def test_initialize_creates_six_open_slots(uow):
    slots = await uow.slots.initialize(TEST_AVATAR)
    await uow.commit()

    assert [slot.position for slot in slots] == [1, 2, 3, 4, 5, 6]
    assert all(slot.status == SlotStatus.OPEN for slot in slots)
    assert all(slot.avatar_reference == TEST_AVATAR for slot in slots)
    assert all(slot.occupant_name is None and slot.occupant_role is None for slot in slots)
    assert len({slot.id for slot in slots}) == 6


@pytest.mark.asyncio
async def test_initialize_twice_fails_without_duplicates(uow, roster):
    with pytest.raises(AlreadyInitializedError) as exc_info:
        await uow.slots.initialize(TEST_AVATAR)

    assert exc_info.value.code == "ALREADY_INITIALIZED"
    assert exc_info.value.existing == 6
    assert len(await uow.slots.list_all()) == 6


@pytest.mark.asyncio
async def test_list_all_orders_by_position(uow, roster):
    slots = await uow.slots.list_all()
    assert [slot.position for slot in slots] == [1, 2, 3, 4, 5, 6]


@pytest.mark.asyncio
async def test_claim_next_open_picks_lowest_position(uow, roster):
    claimed = await uow.slots.claim_next_open()
    assert claimed.position == 1

    await fill_position(uow, claimed)
    await uow.commit()

    assert (await uow.slots.claim_next_open()).position == 2


@pytest.mark.asyncio
async def test_claim_does_not_mutate(uow, roster):
    first = await uow.slots.claim_next_open()
    second = await uow.slots.claim_next_open()

    assert first.id == second.id
    assert (await uow.slots.get_by_id(first.id)).status == SlotStatus.OPEN


@pytest.mark.asyncio
async def test_claim_skips_slot_referenced_by_in_flight_application(uow, roster):
    """An open slot that already has an application belongs to another intake"""
    await uow.applications.create(
        name="In Flight",
        email="inflight@example.com",
        whatsapp_number="123",
        profile_image="data:image/png;base64,AAAA",
        slot_id=roster[0].id,
    )
    await uow.commit()

    assert (await uow.slots.claim_next_open()).position == 2


@pytest.mark.asyncio
async def test_claim_with_all_slots_filled_raises(uow, roster):
    for slot in roster:
        await fill_position(uow, slot)
    await uow.commit()

    with pytest.raises(NoOpenSlotsError) as exc_info:
        await uow.slots.claim_next_open()
    assert exc_info.value.code == "NO_OPEN_SLOTS"


@pytest.mark.asyncio
async def test_claim_before_initialization_raises(uow):
    with pytest.raises(NoOpenSlotsError):
        await uow.slots.claim_next_open()


@pytest.mark.asyncio
async def test_fill_sets_occupant_fields(uow, roster):
    slot = roster[3]
    filled = await uow.slots.fill(slot.id, "Ada", "Co-Leader", "data:image/png;base64,AAAA")
    await uow.commit()

    assert filled.status == SlotStatus.FILLED
    assert filled.occupant_name == "Ada"
    assert filled.occupant_role == "Co-Leader"
    assert filled.avatar_reference == "data:image/png;base64,AAAA"
    assert filled.updated_at >= slot.updated_at
    assert filled.created_at == slot.created_at

    reloaded = await uow.slots.get_by_id(slot.id)
    assert reloaded.status == SlotStatus.FILLED
    assert reloaded.occupant_name == "Ada"


@pytest.mark.asyncio
async def test_fill_twice_raises_already_filled(uow, roster):
    slot = roster[0]
    await fill_position(uow, slot, name="First")
    await uow.commit()

    with pytest.raises(SlotAlreadyFilledError) as exc_info:
        await fill_position(uow, slot, name="Second")

    assert exc_info.value.slot_id == slot.id
    assert (await uow.slots.get_by_id(slot.id)).occupant_name == "First"


@pytest.mark.asyncio
async def test_fill_unknown_slot_raises_not_found(uow, roster):
    with pytest.raises(SlotNotFoundError) as exc_info:
        await uow.slots.fill(9999, "Ghost", "Leader", TEST_AVATAR)
    assert exc_info.value.code == "SLOT_NOT_FOUND"


@pytest.mark.asyncio
async def test_count_by_status(uow, roster):
    assert await uow.slots.count_by_status() == {"open": 6, "filled": 0}

    await fill_position(uow, roster[0])
    await fill_position(uow, roster[1])
    await uow.commit()

    assert await uow.slots.count_by_status() == {"open": 4, "filled": 2}
