"""Enrollment Dispatch: the enrollment operation family.

Invariants:
    - Vocabulary: type "enrollment"; actions create, delete, transition, update
    - Every handler id below equals derive_handler_id(type, action)
    - Audit rows are skipped in dry-run and never abort a batch
    - A failed audit write is rolled back before the next operation runs
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from opfactory.core.domain_types import OperationAction, OperationType
from opfactory.core.operation_batch import BatchContext
from opfactory.core.operation_contract import CacheInvalidator
from opfactory.models.operation_call import OperationCall
from opfactory.services.handle_enrollment import EnrollmentHandlers
from opfactory.services.operation_dispatch import OperationDispatcher

logger = logging.getLogger(__name__)


class EnrollmentDispatch(OperationDispatcher):
    """Routes enrollment_* handler ids to EnrollmentHandlers."""

    name = "enrollment"
    valid_types = frozenset({OperationType.ENROLLMENT.value})
    valid_actions = frozenset({
        OperationAction.CREATE.value,
        OperationAction.DELETE.value,
        OperationAction.TRANSITION.value,
        OperationAction.UPDATE.value,
    })

    def __init__(
        self, db: AsyncSession, cache_invalidator: CacheInvalidator,
        dry_run: bool = False,
    ):
        super().__init__(cache_invalidator, dry_run=dry_run)
        self._db = db
        enrollment = EnrollmentHandlers(db, dry_run=dry_run)

        # Adding an action requires editing this dict
        self._handlers = {
            "enrollment_create": enrollment.create,
            "enrollment_delete": enrollment.delete,
            "enrollment_transition": enrollment.transition,
            "enrollment_update": enrollment.update,
        }

    async def _record_call(
        self,
        batch: BatchContext,
        handler_id: str,
        payload: dict,
        entries: list | None = None,
        error: str | None = None,
    ) -> None:
        """Persist an OperationCall row. Failures are logged, never raised."""
        if batch.dry_run:
            return
        try:
            if error is not None:
                # discard whatever the failed handler left pending
                await self._db.rollback()
            self._db.add(OperationCall(
                batch_id=batch.batch_id,
                family=self.name,
                handler_id=handler_id,
                payload=payload,
                result=entries,
                error_message=error,
            ))
            await self._db.commit()
        except Exception as e:
            logger.warning(
                f"Failed to record operation call '{handler_id}': {e}",
                extra={"handler_id": handler_id, "batch_id": str(batch.batch_id)},
            )
            await self._reset_session(batch)

    async def _reset_session(self, batch: BatchContext) -> None:
        """Clear a failed audit flush so the next operation gets a usable session."""
        try:
            await self._db.rollback()
        except Exception as e:
            logger.warning(
                f"Rollback after audit failure failed: {e}",
                extra={"batch_id": str(batch.batch_id)},
            )
