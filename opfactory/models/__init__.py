"""ORM Models: SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from opfactory.models.enrollment import Enrollment  # noqa: F401
from opfactory.models.operation_call import OperationCall  # noqa: F401
