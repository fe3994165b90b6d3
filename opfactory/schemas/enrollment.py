"""Enrollment Payload Schemas: per-action payload validation for enrollment handlers.

Invariants:
    - Unknown payload keys are rejected (extra="forbid")
    - Ids are positive integers
    - EnrollmentUpdate carries at least one change
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from opfactory.core.domain_types import EnrollmentStatus


class EnrollmentKey(BaseModel):
    """Identifies one enrollment; used as-is by delete."""
    model_config = ConfigDict(extra="forbid")

    attendee_id: int = Field(gt=0)
    session_id: int = Field(gt=0)


class EnrollmentCreate(EnrollmentKey):
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    notes: str | None = Field(None, max_length=2000)


class EnrollmentUpdate(EnrollmentKey):
    notes: str | None = Field(None, max_length=2000)
    new_session_id: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def require_change(self) -> "EnrollmentUpdate":
        if self.notes is None and self.new_session_id is None:
            raise ValueError("update requires 'notes' or 'new_session_id'")
        return self


class EnrollmentTransition(EnrollmentKey):
    to_status: EnrollmentStatus


class EnrollmentRosterEntry(BaseModel):
    """Roster row as returned by GET /enrollments."""
    attendee_id: int
    session_id: int
    status: EnrollmentStatus
    notes: str | None = None
