"""Enrollment Rules: pure status-machine checks for enrollment transitions.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - COMPLETED is terminal
    - A transition to the current status is never allowed
"""

from opfactory.core.domain_types import EnrollmentStatus
from opfactory.core.errors import InvalidTransitionError

S = EnrollmentStatus

ALLOWED_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    S.WAITLISTED: frozenset({S.ENROLLED, S.WITHDRAWN}),
    S.ENROLLED: frozenset({S.ATTENDED, S.NO_SHOW, S.WAITLISTED, S.WITHDRAWN}),
    S.ATTENDED: frozenset({S.COMPLETED}),
    S.NO_SHOW: frozenset({S.ENROLLED}),
    S.WITHDRAWN: frozenset({S.ENROLLED, S.WAITLISTED}),
    S.COMPLETED: frozenset(),
}


def can_transition(from_status: EnrollmentStatus, to_status: EnrollmentStatus) -> bool:
    return to_status in ALLOWED_TRANSITIONS[from_status]


def check_transition(from_status: EnrollmentStatus, to_status: EnrollmentStatus) -> None:
    """Raise InvalidTransitionError when the status machine forbids the move."""
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status.value, to_status.value)


def is_terminal(status: EnrollmentStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]
