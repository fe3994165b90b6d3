"""Operation Batch Schemas: HTTP body for batch submission.

Invariants:
    - operations items are left loosely typed; the dispatcher validates them
    - dry_run None means "use the configured default"
"""

from typing import Any

from pydantic import BaseModel, Field


class OperationBatchRequest(BaseModel):
    """Batch submission body."""
    operations: list[Any] = Field(default_factory=list)
    dry_run: bool | None = None
    flatten: bool = False
