"""Operation Batch: handler-id derivation and the per-batch execution context.

Invariants:
    - derive_handler_id is deterministic and case/separator-insensitive
    - BatchContext.operations preserves submission order
    - BatchContext.results preserves the order in which handlers first completed
    - A BatchContext belongs to exactly one batch and is never reset

Design Decisions:
    - Context object returned by load() instead of mutable fields on the dispatcher:
      one dispatcher can serve several batches, each batch is testable on its own
    - Handler ids are snake_case tokens so they double as readable result keys
"""

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable
from uuid import UUID, uuid4

from opfactory.core.domain_types import HandlerId

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")

ERRORS_KEY = "errors"


def split_words(value: str) -> list[str]:
    """Split on non-alphanumeric separators, lowercased. Letter case never splits."""
    return [word.lower() for word in _SEPARATORS.split(value) if word]


def normalize_token(value: str) -> str:
    """'Enrollment', 'ENROLLMENT', ' enrollment ' all normalize to 'enrollment'."""
    return "_".join(split_words(value))


def derive_handler_id(operation_type: str, operation_action: str) -> HandlerId:
    """Canonical handler name for a (type, action) pair, e.g. 'enrollment_create'."""
    return HandlerId("_".join(
        split_words(operation_type) + split_words(operation_action),
    ))


@dataclass(frozen=True)
class ResolvedOperation:
    """A validated request bound to its handler; type/action already stripped."""
    handler_id: HandlerId
    handler: Callable[[dict], Awaitable[Any]]
    payload: dict


@dataclass
class BatchContext:
    """Accumulation state for one batch, threaded through load and execute."""

    dry_run: bool = False
    batch_id: UUID = field(default_factory=uuid4)
    operations: list[ResolvedOperation] = field(default_factory=list)
    results: dict[str, list[Any]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def can_execute(self) -> bool:
        return bool(self.operations)

    def add_operation(self, operation: ResolvedOperation) -> None:
        self.operations.append(operation)

    def record_error(self, message: str) -> None:
        self.errors.append(message)

    def record_results(self, handler_id: str, entries: list[Any]) -> None:
        """Append entries to the handler's bucket, creating it on first use."""
        self.results.setdefault(handler_id, []).extend(entries)

    def to_response(self) -> dict:
        """Grouped result buckets plus the ordered error list."""
        response: dict[str, list[Any]] = {
            key: list(entries) for key, entries in self.results.items()
        }
        response[ERRORS_KEY] = list(self.errors)
        return response


def flatten_results(results: dict[str, list[Any]]) -> list[Any]:
    """Interleave each handler id with its entries: [id1, *e1, id2, *e2, ...]."""
    flat: list[Any] = []
    for handler_id, entries in results.items():
        if handler_id == ERRORS_KEY:
            continue
        flat.append(handler_id)
        flat.extend(entries)
    return flat
