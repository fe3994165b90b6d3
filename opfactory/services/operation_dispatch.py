"""Operation Dispatch: validate, resolve and run a batch of typed operation requests.

Invariants:
    - Every (type, action) -> handler mapping is an explicit dict entry, no getattr discovery
    - Load-phase rejections append exactly one error each and never stop loading
    - Execution is sequential in submission order; the first failure aborts the rest
    - Results hold only operations that finished (handler + cache invalidation) before a failure
    - execute() never raises: every failure path ends up in the returned "errors" list
    - Dry-run is exposed to handlers; the dispatcher's control flow ignores it

Design Decisions:
    - Explicit dict over getattr: every runnable pair is visible in the family's __init__
    - BatchContext returned from load(), not stored: dispatchers are reusable across batches
    - Cache invalidation injected as a callable: the core knows nothing about the cache
    - Audit recording is a hook that never crashes the batch
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Iterable

from opfactory.core.domain_types import REQUEST_ACTION_KEY, REQUEST_TYPE_KEY
from opfactory.core.errors import OperationFailure
from opfactory.core.operation_batch import (
    BatchContext,
    ResolvedOperation,
    derive_handler_id,
    flatten_results,
    normalize_token,
)
from opfactory.core.operation_contract import CacheInvalidator, OperationHandler

logger = logging.getLogger(__name__)


def _describe(value: Any) -> str:
    """Render a request field for error messages."""
    if value is None:
        return "(missing)"
    return str(value)


def _as_entries(result: Any) -> list[Any]:
    """Handlers may return one entry, a list of entries, or nothing."""
    if result is None:
        return []
    if isinstance(result, (list, tuple)):
        return list(result)
    return [result]


class OperationDispatcher:
    """Base dispatcher. Subclasses declare a vocabulary and fill self._handlers."""

    name: str = "operation"
    valid_types: frozenset[str] = frozenset()
    valid_actions: frozenset[str] = frozenset()

    def __init__(self, cache_invalidator: CacheInvalidator, dry_run: bool = False):
        self._cache_invalidator = cache_invalidator
        self._dry_run = dry_run
        self._handlers: dict[str, OperationHandler] = {}

    @property
    def is_dry_run(self) -> bool:
        return self._dry_run

    @property
    def handler_ids(self) -> frozenset[str]:
        return frozenset(self._handlers)

    # ─── Load phase ──────────────────────────────────────────────

    def load(self, requests: Iterable[Any] | None) -> BatchContext:
        """Validate and resolve raw requests into a fresh BatchContext."""
        batch = BatchContext(dry_run=self._dry_run)
        for request in requests or ():
            operation = self._resolve(batch, request)
            if operation is not None:
                batch.add_operation(operation)
        logger.info(
            f"Loaded {len(batch.operations)} {self.name} operation(s), "
            f"{len(batch.errors)} rejected",
            extra={
                "family": self.name,
                "batch_id": str(batch.batch_id),
                "operation_count": len(batch.operations),
            },
        )
        return batch

    def _resolve(self, batch: BatchContext, request: Any) -> ResolvedOperation | None:
        if not isinstance(request, Mapping):
            self._reject(
                batch,
                f"Invalid operation request: expected a mapping, got {type(request).__name__}",
            )
            return None

        op_type = request.get(REQUEST_TYPE_KEY)
        if not self._in_vocabulary(op_type, self.valid_types):
            self._reject(batch, f"Invalid operation-type: {_describe(op_type)}")
            return None

        op_action = request.get(REQUEST_ACTION_KEY)
        if not self._in_vocabulary(op_action, self.valid_actions):
            self._reject(batch, f"Invalid operation-action: {_describe(op_action)}")
            return None

        handler_id = derive_handler_id(op_type, op_action)
        handler = self._handlers.get(handler_id)
        if handler is None:
            self._reject(
                batch,
                f"Unsupported operation: {op_type}/{op_action} "
                f"(no handler '{handler_id}' in {self.name})",
            )
            return None

        payload = {
            key: value for key, value in request.items()
            if key not in (REQUEST_TYPE_KEY, REQUEST_ACTION_KEY)
        }
        return ResolvedOperation(handler_id, handler, payload)

    @staticmethod
    def _in_vocabulary(value: Any, vocabulary: frozenset[str]) -> bool:
        if not isinstance(value, str):
            return False
        return normalize_token(value) in {normalize_token(v) for v in vocabulary}

    def _reject(self, batch: BatchContext, message: str) -> None:
        batch.record_error(message)
        logger.warning(
            message, extra={"family": self.name, "batch_id": str(batch.batch_id)},
        )

    # ─── Execution phase ─────────────────────────────────────────

    async def execute(self, batch: BatchContext) -> dict:
        """Run loaded operations in order. Returns buckets plus "errors"."""
        if not batch.can_execute:
            return batch.to_response()

        try:
            for operation in batch.operations:
                entries = await self._run_operation(operation)
                batch.record_results(operation.handler_id, entries)
                await self._record_call(
                    batch, operation.handler_id, operation.payload, entries=entries,
                )
        except OperationFailure as failure:
            failure.context.family = self.name
            failure.context.batch_id = str(batch.batch_id)
            batch.record_error(failure.summary())
            logger.error(
                f"Batch aborted: {failure.summary()}",
                extra={
                    "family": self.name,
                    "batch_id": str(batch.batch_id),
                    "handler_id": failure.handler_id,
                    "error_code": failure.code,
                },
            )
            await self._record_call(
                batch, failure.handler_id, failure.payload, error=failure.message,
            )
        return batch.to_response()

    async def run(self, requests: Iterable[Any] | None) -> dict:
        """Load then execute in one call."""
        return await self.execute(self.load(requests))

    async def run_flat(self, requests: Iterable[Any] | None) -> dict:
        """Like run(), but results come back as one linear log."""
        response = await self.run(requests)
        errors = response.pop("errors")
        return {"log": flatten_results(response), "errors": errors}

    async def _run_operation(self, operation: ResolvedOperation) -> list[Any]:
        try:
            result = await operation.handler(operation.payload)
            await self._invalidate_caches()
        except Exception as e:
            raise OperationFailure.wrap(
                operation.handler_id, operation.payload, e,
            ) from e
        return _as_entries(result)

    async def _invalidate_caches(self) -> None:
        outcome = self._cache_invalidator()
        if inspect.isawaitable(outcome):
            await outcome

    async def _record_call(
        self,
        batch: BatchContext,
        handler_id: str,
        payload: dict,
        entries: list[Any] | None = None,
        error: str | None = None,
    ) -> None:
        """Audit hook, called once per executed operation. No-op by default."""
        return None
