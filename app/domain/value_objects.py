"""
Value Objects for the event roster.

Value objects are immutable and self-validating. They keep the roster rules
(six positions, position decides role) and the inline image encoding in one
place instead of scattering string literals across services and routes.
"""

import base64
import enum
from dataclasses import dataclass

# The roster is fixed: positions 1..ROSTER_SIZE, the first LEADER_SEATS are Leaders.
ROSTER_SIZE = 6
LEADER_SEATS = 3


class SlotStatus(str, enum.Enum):
    """Slot occupancy status"""
    OPEN = "open"
    FILLED = "filled"


class ApplicationStatus(str, enum.Enum):
    """Application review status"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]

    @classmethod
    def is_valid(cls, value) -> bool:
        return value in cls.values()


class SlotRole(str, enum.Enum):
    """Role a slot grants to its occupant"""
    LEADER = "Leader"
    CO_LEADER = "Co-Leader"


def role_for_position(position: int) -> SlotRole:
    """
    Derive the role granted by a roster position.

    Positions 1-3 are Leaders, 4-6 are Co-Leaders. The role is never
    user-supplied.

    Raises:
        ValueError: If position is outside 1..ROSTER_SIZE
    """
    if not isinstance(position, int) or isinstance(position, bool):
        raise ValueError(f"Slot position must be an integer, got {position!r}")
    if position < 1 or position > ROSTER_SIZE:
        raise ValueError(f"Slot position must be between 1 and {ROSTER_SIZE}, got {position}")
    return SlotRole.LEADER if position <= LEADER_SEATS else SlotRole.CO_LEADER


# Declared media types accepted for profile pictures, mapped to their canonical form.
# image/jpg is not registered but browsers and older clients still send it.
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/png": "image/png",
}


def canonical_image_type(content_type) -> str:
    """
    Return the canonical media type for a declared upload type, or "" if not allowed.

    Parameters such as "; charset=..." are ignored. The bytes are never sniffed.
    """
    if not content_type:
        return ""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return ALLOWED_IMAGE_TYPES.get(media_type, "")


@dataclass(frozen=True)
class ProfileImage:
    """
    Profile picture stored inline as a data URL.

    Format: data:<media type>;base64,<payload>
    Example: data:image/png;base64,iVBORw0KGgo...

    The same value is written to applications.profile_image and to the
    avatar of the slot the applicant fills.
    """

    media_type: str
    data: bytes

    def __post_init__(self):
        if self.media_type not in ALLOWED_IMAGE_TYPES.values():
            raise ValueError(
                f"Invalid media_type: {self.media_type}. "
                f"Must be one of {sorted(set(ALLOWED_IMAGE_TYPES.values()))}"
            )

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_url(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.media_type};base64,{payload}"

    def __repr__(self) -> str:
        return f"ProfileImage(media_type='{self.media_type}', size={self.size})"
