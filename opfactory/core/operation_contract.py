"""Operation Contract: what a concrete operation family must expose.

Invariants:
    - valid_types / valid_actions are closed vocabularies
    - The contract declares the outer vocabulary only; whether a (type, action)
      pair is runnable is decided by the family's handler table

Design Decisions:
    - Protocol over ABC: structural subtyping, families need no shared base to satisfy it
"""

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from opfactory.core.operation_batch import BatchContext

# A handler receives the stripped payload and returns one entry or a list of entries.
OperationHandler = Callable[[dict], Awaitable[Any]]

# Zero-argument side effect run after every successful operation.
CacheInvalidator = Callable[[], Awaitable[None] | None]


@runtime_checkable
class OperationFamily(Protocol):
    """Structural contract for a concrete dispatcher type."""

    name: str
    valid_types: frozenset[str]
    valid_actions: frozenset[str]

    def load(self, requests: list[Any]) -> BatchContext: ...

    async def execute(self, batch: BatchContext) -> dict: ...
