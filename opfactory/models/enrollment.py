"""Enrollment ORM: an attendee's seat in one training session.

Invariants:
    - (attendee_id, session_id) is unique
    - status is one of EnrollmentStatus values
    - updated_at moves on every write

Design Decisions:
    - attendee_id / session_id are plain integers: attendees and sessions live
      in an external system, only their ids are referenced here
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from opfactory.core.domain_types import EnrollmentStatus
from opfactory.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Enrollment(Base):
    """Enrollment entity, keyed by (attendee_id, session_id)."""
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("attendee_id", "session_id", name="uq_enrollment_attendee_session"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attendee_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    session_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ENROLLED.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    def to_dict(self) -> dict:
        return {
            "attendee_id": self.attendee_id,
            "session_id": self.session_id,
            "status": self.status,
            "notes": self.notes,
        }
