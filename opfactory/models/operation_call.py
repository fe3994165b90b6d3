"""OperationCall ORM: audit table for operations executed by a dispatcher.

Invariants:
    - One row per executed operation (success or the one that aborted its batch)
    - Rows from the same batch share batch_id

Design Decisions:
    - Logging table, not enforcement: no business logic reads it
    - JSON columns for payload/result: payload shape varies per handler
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from opfactory.db.base import Base


class OperationCall(Base):
    """OperationCall log entry."""
    __tablename__ = "operation_calls"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    batch_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False, index=True,
    )
    family: Mapped[str] = mapped_column(String(50), nullable=False)
    handler_id: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    result: Mapped[list | None] = mapped_column(JSON, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
