# backend/tutorbook/models/availability.py
"""
Availability window storage.

A row is either a recurring weekly window (``weekday`` set, 0 = Monday)
or a one-off exception for ``specific_date``. Times are minutes of the
platform-local day; ``end_minute`` may be 1440 for end of day.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class AvailabilityWindowRecord(Base):
    __tablename__ = "availability_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    tutor_id = Column(
        String(26),
        ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    weekday = Column(Integer, nullable=True)
    specific_date = Column(Date, nullable=True)
    start_minute = Column(Integer, nullable=False)
    end_minute = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tutor = relationship("TutorProfile", back_populates="availability_windows")

    __table_args__ = (
        CheckConstraint(
            "(weekday IS NULL) <> (specific_date IS NULL)",
            name="ck_availability_weekday_xor_date",
        ),
        CheckConstraint(
            "weekday IS NULL OR (weekday >= 0 AND weekday <= 6)",
            name="ck_availability_weekday_range",
        ),
        CheckConstraint(
            "start_minute >= 0 AND end_minute <= 1440 AND start_minute < end_minute",
            name="ck_availability_minutes",
        ),
        Index("ix_availability_tutor_weekday", "tutor_id", "weekday"),
        Index("ix_availability_tutor_date", "tutor_id", "specific_date"),
    )

    def __repr__(self) -> str:
        day = self.specific_date.isoformat() if self.specific_date else f"weekday={self.weekday}"
        return f"<AvailabilityWindow {self.tutor_id} {day} {self.start_minute}-{self.end_minute}>"
