# backend/tutorbook/models/session.py
"""
Tutoring session model.

Sessions store their interval as UTC instants. ``ends_at`` is denormalized
from ``scheduled_at + duration_minutes`` so the overlap test and the
PostgreSQL exclusion constraint can use it directly.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import SessionStatus
from ..database import Base


class TutoringSession(Base):
    __tablename__ = "tutoring_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("tutor_profiles.id"), nullable=False)
    subject_id = Column(String(26), ForeignKey("subjects.id"), nullable=False)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=60)

    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value, index=True)
    price_cents = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    meeting_link = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("TutorProfile", foreign_keys=[tutor_id])
    subject = relationship("Subject")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'scheduled', 'in_progress', 'completed', 'cancelled')",
            name="ck_tutoring_sessions_status",
        ),
        CheckConstraint("duration_minutes > 0", name="check_duration_positive"),
        CheckConstraint("price_cents >= 0", name="check_price_non_negative"),
        CheckConstraint("scheduled_at < ends_at", name="check_interval_order"),
        Index("ix_tutoring_sessions_tutor_window", "tutor_id", "scheduled_at", "ends_at"),
    )

    def __repr__(self) -> str:
        return f"<TutoringSession {self.id} tutor={self.tutor_id} at={self.scheduled_at}>"
