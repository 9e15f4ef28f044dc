"""
BulkStatusUpdateCoordinator -- apply many independent status changes in one call.

Contract:
    ``execute_bulk_update(updates, caller)`` checks the caller's bulk-update
    capability, resolves their branch scope once, then applies each entry
    through ``StatusUpdateService.apply()`` and reports one result per entry
    in input order.

Architecture: tracking_batch/services.  Uses the kernel's
    StatusUpdateService (validation + write + event) and the territory /
    authorization provider protocols.  Writes directly, not through
    BatchRecordWriter.

Invariants enforced:
    - 1..max_updates entries per call, checked before anything is touched.
    - Authorization gate: without ``status:bulk_update`` the call raises
      ForbiddenError and nothing is read or written.
    - Territory gate: with a ``none`` scope every entry fails FORBIDDEN and
      storage is never touched.
    - Per-entry isolation: each entry runs in its own SAVEPOINT; one entry's
      failure, including an unexpected exception, never stops the others.
    - results preserve input order; successful + failed == len(updates).
"""

from __future__ import annotations

import time
from typing import Sequence

from sqlalchemy.orm import Session

from tracking_kernel.domain.clock import Clock
from tracking_kernel.domain.dtos import BranchScope, BranchScopeKind, CallerContext
from tracking_kernel.domain.outcome import Failure, Outcome
from tracking_kernel.domain.providers import AuthorizationProvider, TerritoryProvider
from tracking_kernel.domain.workflow import StatusWorkflow
from tracking_kernel.exceptions import BulkUpdateSizeError, ForbiddenError
from tracking_kernel.logging_config import LogContext, get_logger
from tracking_kernel.services.status_update_service import (
    CLIENT_ACCESS_DENIED_MESSAGE,
    FORBIDDEN,
    STATUS_RESOURCE,
    StatusUpdateService,
)
from tracking_kernel.services.status_validator import StatusTransitionValidator

from tracking_batch.domain.types import (
    BulkStatusUpdateItem,
    BulkUpdateItemResult,
    BulkUpdateReport,
)

logger = get_logger("batch.bulk_update")

BULK_UPDATE_ACTION = "bulk_update"
DEFAULT_MAX_UPDATES = 100
UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"


class BulkStatusUpdateCoordinator:
    """Applies a user-submitted batch of status changes.

    Contract:
        - Raises ``BulkUpdateSizeError`` or ``ForbiddenError`` for
          call-level preconditions.
        - Otherwise returns a ``BulkUpdateReport``; per-entry problems are
          reported in its results.

    Non-goals:
        - Does NOT commit; the caller owns the transaction.
        - Does NOT serialize concurrent calls on the same period key; the
          unique period-key constraint fails a racing create for that entry.
    """

    def __init__(
        self,
        session: Session,
        authorization: AuthorizationProvider,
        territory: TerritoryProvider,
        validator: StatusTransitionValidator | None = None,
        workflow: StatusWorkflow | None = None,
        clock: Clock | None = None,
        max_updates: int = DEFAULT_MAX_UPDATES,
    ):
        self._session = session
        self._authorization = authorization
        self._territory = territory
        self._updates = StatusUpdateService(
            session, validator=validator, workflow=workflow, clock=clock,
        )
        self._max_updates = max_updates

    def execute_bulk_update(
        self,
        updates: Sequence[BulkStatusUpdateItem],
        caller: CallerContext,
    ) -> BulkUpdateReport:
        """
        Apply every entry independently.

        Raises:
            BulkUpdateSizeError: No entries, or more than ``max_updates``.
            ForbiddenError: Caller lacks ``status:bulk_update``.
        """
        updates = list(updates)
        if not 1 <= len(updates) <= self._max_updates:
            raise BulkUpdateSizeError(len(updates), self._max_updates)

        with LogContext.bind(
            actor_id=caller.user_id,
            org_id=caller.org_id,
            correlation_id=caller.correlation_id,
        ):
            start = time.monotonic()

            if not self._authorization.has_permission(
                caller.user_id, caller.org_id, STATUS_RESOURCE, BULK_UPDATE_ACTION,
            ):
                logger.warning(
                    "bulk_update_forbidden",
                    extra={"total": len(updates)},
                )
                raise ForbiddenError(
                    "You do not have permission to bulk update client status",
                    user_id=str(caller.user_id),
                    resource=STATUS_RESOURCE,
                    action=BULK_UPDATE_ACTION,
                )

            scope = self._territory.get_branch_scope(caller.user_id, caller.org_id)

            if scope.scope == BranchScopeKind.NONE:
                results = tuple(
                    BulkUpdateItemResult(
                        client_id=update.client_id,
                        success=False,
                        error=CLIENT_ACCESS_DENIED_MESSAGE,
                        error_code=FORBIDDEN,
                    )
                    for update in updates
                )
                logger.info(
                    "bulk_update_no_territory",
                    extra={"total": len(updates)},
                )
                return BulkUpdateReport(
                    successful=0, failed=len(updates), results=results,
                )

            results = []
            for update in updates:
                outcome = self._apply_one(update, scope, caller)
                results.append(
                    BulkUpdateItemResult(
                        client_id=update.client_id,
                        success=outcome.ok,
                        error=None if outcome.ok else outcome.message,
                        error_code=None if outcome.ok else outcome.code,
                    )
                )

            successful = sum(1 for r in results if r.success)
            failed = len(results) - successful

            logger.info(
                "bulk_update_completed",
                extra={
                    "total": len(updates),
                    "successful": successful,
                    "failed": failed,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )

            return BulkUpdateReport(
                successful=successful,
                failed=failed,
                results=tuple(results),
            )

    def _apply_one(
        self,
        update: BulkStatusUpdateItem,
        scope: BranchScope,
        caller: CallerContext,
    ) -> Outcome:
        with LogContext.bind(client_id=update.client_id):
            try:
                return self._updates.apply(update, scope, caller.user_id)
            except Exception as exc:
                logger.error(
                    "bulk_update_entry_failed",
                    extra={"error_code": UNHANDLED_EXCEPTION},
                    exc_info=True,
                )
                return Failure(UNHANDLED_EXCEPTION, str(exc))
