"""
Roster API - Slot Endpoints

Read paths for the landing page (slot list, occupancy) and one-shot roster
initialization for the admin.
"""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List, Optional
import logging

from app.api.dependencies import get_uow
from app.application.review_service import ReviewService
from app.domain.unit_of_work import AbstractUnitOfWork
from app.domain.value_objects import SlotStatus

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class SlotResponse(BaseModel):
    """One roster slot (camelCase on the wire)"""
    id: int
    position: int
    status: SlotStatus
    occupant_name: Optional[str] = None
    occupant_role: Optional[str] = None
    avatar_reference: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class SlotSummaryResponse(BaseModel):
    """Roster occupancy: filled + open == total"""
    total: int
    filled: int
    open: int

    class Config:
        from_attributes = True


# ============================================
# Endpoints
# ============================================

@router.get("/slots", response_model=List[SlotResponse])
async def list_slots(uow: AbstractUnitOfWork = Depends(get_uow)):
    """List all slots ordered by position (1-3 Leader, 4-6 Co-Leader)."""
    slots = await ReviewService(uow).list_slots()
    return [SlotResponse.model_validate(slot) for slot in slots]


@router.get("/slots/summary", response_model=SlotSummaryResponse)
async def slot_summary(uow: AbstractUnitOfWork = Depends(get_uow)):
    """Occupancy counts for the admin view."""
    summary = await ReviewService(uow).slot_summary()
    return SlotSummaryResponse.model_validate(summary)


@router.post("/slots/initialize", response_model=List[SlotResponse], status_code=status.HTTP_201_CREATED)
async def initialize_slots(uow: AbstractUnitOfWork = Depends(get_uow)):
    """
    Create the six open slots.

    Returns 400 ALREADY_INITIALIZED if any slot exists.
    """
    slots = await ReviewService(uow).initialize_slots()
    logger.info(f"✅ Roster initialized via API ({len(slots)} slots)")
    return [SlotResponse.model_validate(slot) for slot in slots]
