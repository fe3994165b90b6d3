"""Enrollments: read-only roster lookup backed by the roster cache.

Invariants:
    - Rosters are ordered by attendee_id
    - A warm cache entry is served without touching the database
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opfactory.infrastructure.database import get_db
from opfactory.infrastructure.roster_cache import roster_cache
from opfactory.models.enrollment import Enrollment
from opfactory.schemas.enrollment import EnrollmentRosterEntry

router = APIRouter(prefix="/api/v1/enrollments", tags=["enrollments"])


@router.get("", response_model=list[EnrollmentRosterEntry])
async def get_roster(
    session_id: int = Query(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Enrollments of one training session."""
    cached = roster_cache.get(session_id)
    if cached is not None:
        return cached
    result = await db.execute(
        select(Enrollment)
        .where(Enrollment.session_id == session_id)
        .order_by(Enrollment.attendee_id),
    )
    roster = [enrollment.to_dict() for enrollment in result.scalars().all()]
    roster_cache.put(session_id, roster)
    return roster
