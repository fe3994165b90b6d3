"""Operations: submit a batch of typed operations to one operation family.

Invariants:
    - The response is always 200 with {..buckets, "errors": [...]} once the family exists;
      validation and execution failures are reported inside "errors"
    - Unknown family -> 404, oversized batch -> 400 (before any operation runs)
    - dry_run omitted -> operations_default_dry_run setting
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from opfactory.config import get_settings
from opfactory.core.errors import PayloadValidationError
from opfactory.infrastructure.database import get_db
from opfactory.schemas.operations import OperationBatchRequest
from opfactory.services.operation_families import build_dispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/operations", tags=["operations"])


@router.post("/{family}")
async def submit_operations(
    family: str,
    body: OperationBatchRequest,
    db: AsyncSession = Depends(get_db),
):
    """Validate, resolve and run the batch; returns grouped (or flattened) results."""
    settings = get_settings()
    if len(body.operations) > settings.operations_max_batch_size:
        raise PayloadValidationError(
            f"Batch has {len(body.operations)} operations, "
            f"limit is {settings.operations_max_batch_size}",
            ["operations"],
        )
    dry_run = (
        settings.operations_default_dry_run if body.dry_run is None else body.dry_run
    )
    dispatcher = build_dispatcher(family, db, dry_run=dry_run)
    logger.info(
        f"Batch of {len(body.operations)} submitted to {family}"
        f"{' (dry run)' if dry_run else ''}",
        extra={"family": family, "operation_count": len(body.operations)},
    )
    if body.flatten:
        return await dispatcher.run_flat(body.operations)
    return await dispatcher.run(body.operations)
