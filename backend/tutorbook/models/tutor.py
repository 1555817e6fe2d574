# backend/tutorbook/models/tutor.py
"""
Tutor profile and subject catalog models.

Hourly rates are stored in integer cents of the platform currency.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

tutor_subjects = Table(
    "tutor_subjects",
    Base.metadata,
    Column(
        "tutor_id",
        String(26),
        ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "subject_id",
        String(26),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)

    tutors = relationship("TutorProfile", secondary=tutor_subjects, back_populates="subjects")

    def __repr__(self) -> str:
        return f"<Subject {self.name}>"


class TutorProfile(Base):
    """A tutor's public profile; ``id`` is the tutor id used by bookings."""

    __tablename__ = "tutor_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    bio = Column(Text, nullable=True)
    hourly_rate_cents = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="tutor_profile")
    subjects = relationship("Subject", secondary=tutor_subjects, back_populates="tutors")
    availability_windows = relationship(
        "AvailabilityWindowRecord",
        back_populates="tutor",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "hourly_rate_cents IS NULL OR hourly_rate_cents >= 0",
            name="ck_tutor_profiles_rate_non_negative",
        ),
    )

    def __repr__(self) -> str:
        return f"<TutorProfile {self.id} verified={self.is_verified}>"
