"""
Domain Entities - roster slots and applications.

Entities have identity (tracked by ID) and mutable state. Repositories
convert between these dataclasses and the ORM models in app/db/models.py.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .value_objects import ApplicationStatus, SlotStatus, ROSTER_SIZE


def utc_now() -> datetime:
    """Naive UTC timestamp (SQLite DateTime columns drop tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass
class Slot:
    """
    One of the six roster positions.

    Invariants:
    1. position is within 1..ROSTER_SIZE and never changes
    2. occupant fields are set only when status is filled
    """

    id: int
    position: int
    status: SlotStatus
    avatar_reference: str
    created_at: datetime
    updated_at: datetime
    occupant_name: Optional[str] = None
    occupant_role: Optional[str] = None

    def __post_init__(self):
        self.status = SlotStatus(self.status)
        if self.position < 1 or self.position > ROSTER_SIZE:
            raise ValueError(f"Invalid slot position: {self.position}")

    @property
    def is_open(self) -> bool:
        return self.status == SlotStatus.OPEN

    def __repr__(self) -> str:
        return f"Slot(id={self.id}, position={self.position}, status={self.status.value})"


@dataclass
class Application:
    """
    A submitted application.

    slot_id is set once at creation and never reassigned.
    """

    id: int
    name: str
    email: str
    whatsapp_number: str
    profile_image: str
    status: ApplicationStatus
    slot_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    bio: Optional[str] = None

    def __post_init__(self):
        self.status = ApplicationStatus(self.status)

    def __repr__(self) -> str:
        return f"Application(id={self.id}, slot_id={self.slot_id}, status={self.status.value})"


# ============================================
# Domain Exceptions
# ============================================

class DomainError(Exception):
    """Base exception for domain errors. code is the machine-readable error code."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Client sent missing, empty or malformed data"""

    code = "VALIDATION_ERROR"


class UnsupportedMediaTypeError(ValidationError):
    """Submission was not sent as multipart/form-data"""

    code = "UNSUPPORTED_MEDIA_TYPE"

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__("Content-Type must be multipart/form-data")


class InvalidStatusError(ValidationError):
    """Status value outside pending/approved/rejected"""

    code = "INVALID_STATUS"

    def __init__(self, status):
        self.status = status
        super().__init__(f"Status must be one of: {', '.join(ApplicationStatus.values())}")


class NotFoundError(DomainError):
    """Referenced entity doesn't exist"""

    code = "NOT_FOUND"


class ApplicationNotFoundError(NotFoundError):
    """Raised when application doesn't exist"""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(f"Application {application_id} not found")


class SlotNotFoundError(NotFoundError):
    """Raised when slot doesn't exist"""

    code = "SLOT_NOT_FOUND"

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        super().__init__(f"Slot {slot_id} not found")


class CapacityError(DomainError):
    """The roster cannot take more applications"""

    code = "CAPACITY_ERROR"


class NoOpenSlotsError(CapacityError):
    """All slots are filled"""

    code = "NO_OPEN_SLOTS"

    def __init__(self):
        super().__init__("All leader slots are filled")


class ConflictError(DomainError):
    """State changed underneath the caller"""

    code = "CONFLICT"


class SlotAlreadyFilledError(ConflictError):
    """Another intake filled (or referenced) the slot first"""

    code = "SLOT_ALREADY_FILLED"

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        super().__init__(f"Slot {slot_id} is already filled")


class AlreadyInitializedError(ConflictError):
    """Roster initialization requested while slots already exist"""

    code = "ALREADY_INITIALIZED"

    def __init__(self, existing: int):
        self.existing = existing
        super().__init__(f"Slots already exist ({existing}). Cannot initialize again.")


class ConsistencyError(DomainError):
    """A multi-step write left (or nearly left) the roster inconsistent"""

    code = "CONSISTENCY_ERROR"


class SlotUpdateFailedError(ConsistencyError):
    """Slot branding failed after the application was created"""

    code = "SLOT_UPDATE_FAILED"

    def __init__(self, slot_id: int, application_id: Optional[int], compensated: bool = True):
        self.slot_id = slot_id
        self.application_id = application_id
        self.compensated = compensated
        super().__init__("Failed to update leader slot")


class StorageError(DomainError):
    """Unexpected persistence failure"""

    code = "STORAGE_ERROR"
