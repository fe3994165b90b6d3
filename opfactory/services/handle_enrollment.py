"""Enrollment Handlers: create, delete, update and transition enrollments (4 methods).

Invariants:
    - Every handler takes the stripped payload dict and returns one result entry
    - Payloads are parsed with pydantic; bad payloads raise PayloadValidationError
    - Live handlers commit their own unit of work; earlier operations stay committed
    - Dry-run handlers run every read and rule check but never mutate ORM objects

Design Decisions:
    - Raise typed errors instead of returning error dicts: the dispatcher turns the
      first raise into the batch abort message
    - Dry-run never touches ORM attributes so autoflush cannot leak a write
"""

from typing import TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opfactory.core.domain_types import EnrollmentStatus
from opfactory.core.enrollment_rules import check_transition
from opfactory.core.errors import (
    EnrollmentConflictError,
    EnrollmentNotFoundError,
    PayloadValidationError,
)
from opfactory.models.enrollment import Enrollment
from opfactory.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentKey,
    EnrollmentTransition,
    EnrollmentUpdate,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

DRY_RUN_SUFFIX = " [dry run]"


def parse_payload(model: type[ModelT], payload: dict) -> ModelT:
    """Validate a handler payload, mapping pydantic errors to PayloadValidationError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        fields = [".".join(str(loc) for loc in err["loc"]) or "payload" for err in errors]
        details = "; ".join(
            f"{name}: {err['msg']}" for name, err in zip(fields, errors)
        )
        raise PayloadValidationError(f"Invalid payload ({details})", fields) from e


class EnrollmentHandlers:
    """Enrollment operations against the enrollments table."""

    def __init__(self, db: AsyncSession, dry_run: bool = False):
        self.db = db
        self.dry_run = dry_run

    async def create(self, payload: dict) -> str:
        """Enroll an attendee in a session."""
        data = parse_payload(EnrollmentCreate, payload)
        if await self._find(data.attendee_id, data.session_id) is not None:
            raise EnrollmentConflictError(data.attendee_id, data.session_id)
        if not self.dry_run:
            self.db.add(Enrollment(
                attendee_id=data.attendee_id,
                session_id=data.session_id,
                status=data.status.value,
                notes=data.notes,
            ))
            await self.db.commit()
        return self._entry(
            f"Enrolled attendee {data.attendee_id} in session {data.session_id} "
            f"({data.status.value})"
        )

    async def delete(self, payload: dict) -> str:
        """Remove an attendee's enrollment."""
        data = parse_payload(EnrollmentKey, payload)
        enrollment = await self._get_or_raise(data.attendee_id, data.session_id)
        if not self.dry_run:
            await self.db.delete(enrollment)
            await self.db.commit()
        return self._entry(
            f"Removed attendee {data.attendee_id} from session {data.session_id}"
        )

    async def update(self, payload: dict) -> str:
        """Change notes and/or move the enrollment to another session."""
        data = parse_payload(EnrollmentUpdate, payload)
        enrollment = await self._get_or_raise(data.attendee_id, data.session_id)

        changes = []
        moving = (
            data.new_session_id is not None
            and data.new_session_id != data.session_id
        )
        if moving:
            if await self._find(data.attendee_id, data.new_session_id) is not None:
                raise EnrollmentConflictError(data.attendee_id, data.new_session_id)
            changes.append(f"session {data.session_id} -> {data.new_session_id}")
        if data.notes is not None:
            changes.append("notes")

        if not self.dry_run:
            if moving:
                enrollment.session_id = data.new_session_id
            if data.notes is not None:
                enrollment.notes = data.notes
            await self.db.commit()

        summary = ", ".join(changes) if changes else "no changes"
        return self._entry(
            f"Updated attendee {data.attendee_id} in session {data.session_id}: {summary}"
        )

    async def transition(self, payload: dict) -> str:
        """Move the enrollment along the status machine."""
        data = parse_payload(EnrollmentTransition, payload)
        enrollment = await self._get_or_raise(data.attendee_id, data.session_id)
        current = EnrollmentStatus(enrollment.status)
        check_transition(current, data.to_status)
        if not self.dry_run:
            enrollment.status = data.to_status.value
            await self.db.commit()
        return self._entry(
            f"Attendee {data.attendee_id} in session {data.session_id}: "
            f"{current.value} -> {data.to_status.value}"
        )

    async def _find(self, attendee_id: int, session_id: int) -> Enrollment | None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.attendee_id == attendee_id,
                Enrollment.session_id == session_id,
            ),
        )
        return result.scalar_one_or_none()

    async def _get_or_raise(self, attendee_id: int, session_id: int) -> Enrollment:
        enrollment = await self._find(attendee_id, session_id)
        if enrollment is None:
            raise EnrollmentNotFoundError(attendee_id, session_id)
        return enrollment

    def _entry(self, text: str) -> str:
        return text + DRY_RUN_SUFFIX if self.dry_run else text
