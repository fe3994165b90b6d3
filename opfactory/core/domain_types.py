"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - HandlerId wraps the derived handler name (e.g. "enrollment_create")
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

HandlerId = NewType("HandlerId", str)


# ─── Enums ───────────────────────────────────────────────────────

class OperationType(str, Enum):
    """Operation types understood by the bundled families."""
    ENROLLMENT = "enrollment"


class OperationAction(str, Enum):
    """Operation actions understood by the bundled families."""
    CREATE = "create"
    DELETE = "delete"
    TRANSITION = "transition"
    UPDATE = "update"


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle states, maps to DB `status` column."""
    WAITLISTED = "waitlisted"
    ENROLLED = "enrolled"
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


# Request keys consumed by the dispatcher; everything else is handler payload.
REQUEST_TYPE_KEY = "type"
REQUEST_ACTION_KEY = "action"
