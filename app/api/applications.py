"""
Roster API - Application Endpoints

- POST /applications: multipart submission from the landing page
- GET /applications: admin listing (status filter + paging)
- PATCH /applications/{id}: admin status change
"""
from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from starlette.datastructures import UploadFile
from datetime import datetime
from typing import Any, List, Optional
import logging

from app.api.dependencies import get_uow
from app.application.intake_service import ApplicationSubmission, ImageUpload, IntakeService
from app.application.review_service import ReviewService
from app.domain.entities import ValidationError
from app.domain.unit_of_work import AbstractUnitOfWork
from app.domain.value_objects import ApplicationStatus

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Pydantic Models
# ============================================

class ApplicationResponse(BaseModel):
    """Application record (camelCase on the wire)"""
    id: int
    name: str
    email: str
    whatsapp_number: str
    bio: Optional[str] = None
    profile_image: str
    status: ApplicationStatus
    slot_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class UpdateStatusRequest(BaseModel):
    """Body of PATCH /applications/{id}"""
    status: Optional[Any] = None  # any JSON value; ReviewService classifies it


# ============================================
# Request parsing
# ============================================

def _form_text(form, *keys: str) -> Optional[str]:
    """First plain-text value among keys (file parts are ignored)."""
    for key in keys:
        value = form.get(key)
        if isinstance(value, str):
            return value
    return None


async def read_submission(request: Request) -> ApplicationSubmission:
    """
    Build an ApplicationSubmission from the raw request.

    Non-multipart requests are not parsed; the intake service rejects them
    with UNSUPPORTED_MEDIA_TYPE.
    """
    content_type = request.headers.get("content-type")
    if not content_type or "multipart/form-data" not in content_type.lower():
        return ApplicationSubmission(content_type=content_type)

    form = await request.form()

    image = None
    upload = form.get("profileImage")
    if isinstance(upload, UploadFile) and (upload.filename or upload.size):
        data = await upload.read()
        image = ImageUpload(content_type=upload.content_type, data=data, filename=upload.filename)

    return ApplicationSubmission(
        content_type=content_type,
        name=_form_text(form, "name"),
        email=_form_text(form, "email"),
        whatsapp_number=_form_text(form, "whatsappNumber", "whatsapp"),
        bio=_form_text(form, "bio"),
        image=image,
    )


def parse_application_id(raw: str) -> int:
    """
    Parse a path id; must be a positive integer.

    Raises:
        ValidationError: INVALID_ID
    """
    try:
        application_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Valid ID is required", code="INVALID_ID")
    if application_id <= 0:
        raise ValidationError("Valid ID is required", code="INVALID_ID")
    return application_id


# ============================================
# Endpoints
# ============================================

@router.post("/applications", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(request: Request, uow: AbstractUnitOfWork = Depends(get_uow)):
    """
    Submit an application for the next open slot.

    Form fields: name, email, whatsappNumber (or whatsapp), bio (optional),
    profileImage (JPEG/PNG file, max 2 MB).
    """
    submission = await read_submission(request)
    application = await IntakeService(uow).submit(submission)
    return ApplicationResponse.model_validate(application)


@router.get("/applications", response_model=List[ApplicationResponse])
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
    uow: AbstractUnitOfWork = Depends(get_uow)
):
    """List applications newest first (limit default 20, max 100)."""
    applications = await ReviewService(uow).list_applications(
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    return [ApplicationResponse.model_validate(application) for application in applications]


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    body: UpdateStatusRequest,
    uow: AbstractUnitOfWork = Depends(get_uow)
):
    """Set status to pending, approved or rejected (any direction)."""
    parsed_id = parse_application_id(application_id)
    application = await ReviewService(uow).set_application_status(parsed_id, body.status)
    return ApplicationResponse.model_validate(application)
