"""
SQLAlchemy ORM models for database tables.

Two tables only: the fixed roster of slots and the applications that claim them.
"""
from sqlalchemy import Column, String, Text, DateTime, Index, ForeignKey, Integer
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SlotModel(Base):
    """
    Slots table - the six Leader/Co-Leader positions.

    Rows are created once by roster initialization and never deleted.
    Only the fill operation mutates them (open -> filled).
    """
    __tablename__ = "slots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    position = Column(Integer, unique=True, nullable=False)  # 1..6, unique constraint blocks duplicate rosters
    status = Column(String(10), nullable=False, default='open', server_default='open')  # 'open' or 'filled'
    occupant_name = Column(String(200), nullable=True)
    occupant_role = Column(String(20), nullable=True)  # 'Leader' or 'Co-Leader'
    avatar_reference = Column(Text, nullable=False)  # Placeholder URL while open, data URL once filled
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_slots_status_position', 'status', 'position'),
    )


class ApplicationModel(Base):
    """
    Applications table - one row per accepted submission.

    slot_id is unique: a slot can be referenced by at most one application,
    which also stops two concurrent intakes from claiming the same slot.
    """
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    whatsapp_number = Column(String(50), nullable=False)
    bio = Column(Text, nullable=True)
    profile_image = Column(Text, nullable=False)  # data:<media type>;base64,<payload>
    status = Column(String(10), nullable=False, default='pending', server_default='pending')
    slot_id = Column(Integer, ForeignKey('slots.id'), unique=True, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_applications_status_created', 'status', 'created_at'),
        Index('idx_applications_created_at', 'created_at'),
    )
