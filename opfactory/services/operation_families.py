"""Operation Families: explicit family-name -> dispatcher table.

Invariants:
    - Every family is listed here; nothing is discovered at runtime
    - Unknown family names raise UnknownFamilyError (404 at the HTTP layer)
"""

from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from opfactory.core.errors import UnknownFamilyError
from opfactory.core.operation_batch import normalize_token
from opfactory.core.operation_contract import CacheInvalidator
from opfactory.infrastructure.roster_cache import roster_cache
from opfactory.services.enrollment_dispatch import EnrollmentDispatch
from opfactory.services.operation_dispatch import OperationDispatcher

FAMILIES: dict[str, Callable[..., OperationDispatcher]] = {
    EnrollmentDispatch.name: EnrollmentDispatch,
}


def build_dispatcher(
    family: str,
    db: AsyncSession,
    dry_run: bool = False,
    cache_invalidator: CacheInvalidator | None = None,
) -> OperationDispatcher:
    """Instantiate the dispatcher for `family`, wired to the roster cache by default."""
    dispatcher_cls = FAMILIES.get(normalize_token(family))
    if dispatcher_cls is None:
        raise UnknownFamilyError(family)
    return dispatcher_cls(
        db, cache_invalidator or roster_cache.invalidate, dry_run=dry_run,
    )
