"""Enrollments Routes: tests for the cached roster lookup.

Tests cover:
    - Roster lists a session's enrollments ordered by attendee
    - A warm cache is served without hitting the database
    - Running an operation batch invalidates the cache
"""

from opfactory.infrastructure.roster_cache import roster_cache
from opfactory.models.enrollment import Enrollment


async def _seed(db, *attendee_ids, session_id=9):
    for attendee_id in attendee_ids:
        db.add(Enrollment(attendee_id=attendee_id, session_id=session_id, status="enrolled"))
    await db.commit()


async def test_roster_lists_session_enrollments(client, test_db):
    await _seed(test_db, 3, 1)
    await _seed(test_db, 2, session_id=10)
    res = await client.get("/api/v1/enrollments", params={"session_id": 9})
    assert res.status_code == 200
    assert [row["attendee_id"] for row in res.json()] == [1, 3]


async def test_roster_served_from_warm_cache(client):
    roster_cache.put(9, [{
        "attendee_id": 42, "session_id": 9, "status": "waitlisted", "notes": None,
    }])
    res = await client.get("/api/v1/enrollments", params={"session_id": 9})
    assert [row["attendee_id"] for row in res.json()] == [42]


async def test_operation_batch_invalidates_roster(client, test_db):
    await _seed(test_db, 1)
    first = await client.get("/api/v1/enrollments", params={"session_id": 9})
    assert len(first.json()) == 1
    assert len(roster_cache) == 1

    await client.post("/api/v1/operations/enrollment", json={"operations": [
        {"type": "enrollment", "action": "create", "attendee_id": 2, "session_id": 9},
    ]})
    assert len(roster_cache) == 0

    second = await client.get("/api/v1/enrollments", params={"session_id": 9})
    assert [row["attendee_id"] for row in second.json()] == [1, 2]


async def test_roster_requires_positive_session_id(client):
    res = await client.get("/api/v1/enrollments", params={"session_id": 0})
    assert res.status_code == 400
