"""
StatusUpdateService -- apply one status change to a client's period status.

Responsibility:
    The per-record write step shared by the single-client update path and
    the bulk coordinator: resolve the client and its company, check the
    caller's branch scope, validate the change, then update (or lazily
    create) the ClientPeriodStatus row and append a StatusEvent.

Architecture position:
    Kernel > Services -- imperative shell.  Reads through ``LookupSelector``
    and ``StatusSelector``; validates through ``StatusTransitionValidator``.
    Called by ``tracking_batch.services.bulk_update`` once per entry.

Invariants enforced:
    - One SAVEPOINT per record covers the status write and its event, so a
      record is either fully applied or not at all.
    - update_count is 1 on a lazily created row and grows by one on every
      later mutation; is_terminal is recomputed each time.
    - event_sequence is max(existing) + 1 per ClientPeriodStatus.
    - All timestamps on StatusEvent come from the injected Clock.
    - Flush-only: never commits the outer transaction.

Failure modes:
    ``apply()`` returns ``Failure`` for business violations:
    NOT_FOUND (client / product), FORBIDDEN (out of territory),
    INVALID_PERIOD_KEY, or the validator's code.  Infrastructure errors
    roll the SAVEPOINT back and propagate.

    ``update_status()`` raises the matching typed exception instead.

Audit relevance:
    Every successful mutation logs ``status_updated`` and writes exactly
    one StatusEvent carrying the actor.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from tracking_kernel.domain.clock import Clock, SystemClock
from tracking_kernel.domain.dtos import (
    BranchScope,
    BranchScopeKind,
    CallerContext,
    ClientPeriodStatusInfo,
    StatusChangeRequest,
    StatusUpdateInput,
)
from tracking_kernel.domain.outcome import Failure, Outcome, Success
from tracking_kernel.domain.providers import AuthorizationProvider, TerritoryProvider
from tracking_kernel.domain.workflow import StatusWorkflow
from tracking_kernel.exceptions import (
    ClientNotFoundError,
    ForbiddenError,
    InvalidPeriodKeyError,
    ProductNotFoundError,
    StatusValidationError,
)
from tracking_kernel.logging_config import LogContext, get_logger
from tracking_kernel.models.period_status import ClientPeriodStatus, StatusEvent
from tracking_kernel.selectors.lookup_selector import LookupSelector
from tracking_kernel.selectors.status_selector import StatusSelector
from tracking_kernel.services.base import BaseService
from tracking_kernel.services.status_validator import StatusTransitionValidator

logger = get_logger("services.status_update")

STATUS_RESOURCE = "status"
UPDATE_ACTION = "update"

FORBIDDEN = "FORBIDDEN"
NOT_FOUND = "NOT_FOUND"
INVALID_PERIOD_KEY = InvalidPeriodKeyError.code

CLIENT_NOT_FOUND_MESSAGE = "Client not found"
PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
CLIENT_ACCESS_DENIED_MESSAGE = "You do not have permission to access this client"


class StatusUpdateService(BaseService[ClientPeriodStatus]):
    """
    Applies status changes, one record per SAVEPOINT.

    Contract:
        ``apply()`` is the shared per-record step; it returns an
        ``Outcome`` and never raises for business violations.
        ``update_status()`` is the single-client entry point; it checks
        capability and territory and raises typed errors.

    Non-goals:
        - Does NOT commit; the caller owns the transaction.
        - Does NOT enforce the bulk request size; the coordinator does.
    """

    def __init__(
        self,
        session: Session,
        validator: StatusTransitionValidator | None = None,
        workflow: StatusWorkflow | None = None,
        clock: Clock | None = None,
        authorization: AuthorizationProvider | None = None,
        territory: TerritoryProvider | None = None,
    ):
        super().__init__(session)
        self._lookups = LookupSelector(session)
        self._statuses = StatusSelector(session)
        self._validator = validator or StatusTransitionValidator(
            self._lookups, workflow,
        )
        self._clock = clock or SystemClock()
        self._authorization = authorization
        self._territory = territory

    @property
    def validator(self) -> StatusTransitionValidator:
        return self._validator

    # -------------------------------------------------------------------------
    # Single-client path
    # -------------------------------------------------------------------------

    def update_status(
        self,
        update: StatusChangeRequest,
        caller: CallerContext,
    ) -> ClientPeriodStatusInfo:
        """
        Apply one change for one client.

        Raises:
            ValueError: If the service was built without access providers.
            ForbiddenError: Missing ``status:update`` or out of territory.
            ClientNotFoundError / ProductNotFoundError: Lookup miss.
            InvalidPeriodKeyError: Malformed period fields.
            StatusValidationError: Validator rejected the change.
        """
        if self._authorization is None or self._territory is None:
            raise ValueError(
                "update_status requires authorization and territory providers"
            )

        with LogContext.bind(
            actor_id=caller.user_id,
            org_id=caller.org_id,
            correlation_id=caller.correlation_id,
        ):
            if not self._authorization.has_permission(
                caller.user_id, caller.org_id, STATUS_RESOURCE, UPDATE_ACTION,
            ):
                raise ForbiddenError(
                    "You do not have permission to update client status",
                    user_id=str(caller.user_id),
                    resource=STATUS_RESOURCE,
                    action=UPDATE_ACTION,
                )

            scope = self._territory.get_branch_scope(caller.user_id, caller.org_id)
            if scope.scope == BranchScopeKind.NONE:
                raise ForbiddenError(
                    CLIENT_ACCESS_DENIED_MESSAGE,
                    user_id=str(caller.user_id),
                    resource=STATUS_RESOURCE,
                    action=UPDATE_ACTION,
                )

            outcome = self.apply(update, scope, caller.user_id)

        if outcome.ok:
            return outcome.value

        self._raise_for(outcome, update, caller)

    def _raise_for(
        self,
        failure: Failure,
        update: StatusChangeRequest,
        caller: CallerContext,
    ) -> None:
        if failure.code == FORBIDDEN:
            raise ForbiddenError(
                failure.message,
                user_id=str(caller.user_id),
                resource=STATUS_RESOURCE,
                action=UPDATE_ACTION,
            )
        if failure.code == NOT_FOUND:
            if failure.message == PRODUCT_NOT_FOUND_MESSAGE:
                raise ProductNotFoundError(str(failure.details.get("product_id")))
            raise ClientNotFoundError(str(update.client_id))
        if failure.code == INVALID_PERIOD_KEY:
            raise InvalidPeriodKeyError(
                failure.details.get("reason", failure.message),
                period_type=str(update.period_type),
                period_year=update.period_year,
                period_month=update.period_month,
                period_quarter=update.period_quarter,
            )
        raise StatusValidationError(failure.code, failure.message, failure.details)

    # -------------------------------------------------------------------------
    # Shared per-record step
    # -------------------------------------------------------------------------

    def apply(
        self,
        update: StatusChangeRequest,
        scope: BranchScope,
        actor_id: UUID | None,
    ) -> Outcome[ClientPeriodStatusInfo]:
        """
        Validate and write one change inside its own SAVEPOINT.

        The SAVEPOINT is released on success and rolled back on a
        ``Failure`` or an exception; exceptions are re-raised.
        """
        savepoint = self.session.begin_nested()
        try:
            outcome = self._apply(update, scope, actor_id)
        except Exception:
            savepoint.rollback()
            raise

        if outcome.ok:
            savepoint.commit()
        else:
            savepoint.rollback()
            logger.warning(
                "status_update_rejected",
                extra={
                    "client_id": update.client_id,
                    "error_code": outcome.code,
                    "error_message": outcome.message,
                },
            )
        return outcome

    def _apply(
        self,
        update: StatusChangeRequest,
        scope: BranchScope,
        actor_id: UUID | None,
    ) -> Outcome[ClientPeriodStatusInfo]:
        client = self._lookups.get_client(update.client_id)
        if client is None or client.deleted_at is not None:
            return Failure(
                NOT_FOUND,
                CLIENT_NOT_FOUND_MESSAGE,
                {"client_id": update.client_id},
            )

        if not scope.allows(client.branch_id):
            return Failure(
                FORBIDDEN,
                CLIENT_ACCESS_DENIED_MESSAGE,
                {"client_id": update.client_id, "branch_id": client.branch_id},
            )

        product = self._lookups.get_product(client.product_id)
        if product is None or product.company_id is None:
            return Failure(
                NOT_FOUND,
                PRODUCT_NOT_FOUND_MESSAGE,
                {"product_id": client.product_id},
            )

        try:
            period = update.period_key()
        except InvalidPeriodKeyError as exc:
            return Failure(INVALID_PERIOD_KEY, str(exc), {"reason": exc.reason})

        current = self.session.execute(
            select(ClientPeriodStatus).where(
                ClientPeriodStatus.client_id == client.id,
                *ClientPeriodStatus.period_filter(period),
            )
        ).scalar_one_or_none()

        result = self._validator.validate_status_update(
            StatusUpdateInput(
                to_status_id=update.status_id,
                company_id=product.company_id,
                client_period_status_id=current.id if current else None,
                from_status_id=current.status_type_id if current else None,
                reason_id=update.reason_id,
                remarks=update.remarks,
                updated_by=actor_id,
            )
        )
        if not result.is_valid:
            error = result.error
            return Failure(error.code.value, error.message, dict(error.details))

        is_terminal = self._is_terminal(update)

        if current is not None:
            row = current
            row.status_type_id = update.status_id
            row.reason_id = update.reason_id
            row.remarks = update.remarks
            row.has_payment = update.has_payment
            row.update_count = (row.update_count or 0) + 1
            row.is_terminal = is_terminal
            row.updated_by_id = actor_id
        else:
            row = ClientPeriodStatus.for_period(
                client.id,
                period,
                status_type_id=update.status_id,
                reason_id=update.reason_id,
                remarks=update.remarks,
                has_payment=update.has_payment,
                update_count=1,
                is_terminal=is_terminal,
                updated_by_id=actor_id,
            )
            self.session.add(row)
        self.session.flush()

        event = self._record_event(row, actor_id)

        logger.info(
            "status_updated",
            extra={
                "client_id": client.id,
                "client_period_status_id": row.id,
                "period": period.label,
                "status_type_id": update.status_id,
                "update_count": row.update_count,
                "event_sequence": event.event_sequence,
                "row_created": current is None,
            },
        )
        return Success(row.to_dto())

    def _is_terminal(self, update: StatusChangeRequest) -> bool:
        if self._validator.is_terminal_status(update.status_id):
            return True
        if update.reason_id is None:
            return False
        reason = self._lookups.get_reason(update.reason_id)
        return bool(reason and reason.is_terminal)

    def _record_event(
        self,
        row: ClientPeriodStatus,
        actor_id: UUID | None,
    ) -> StatusEvent:
        event = StatusEvent(
            client_period_status_id=row.id,
            status_type_id=row.status_type_id,
            reason_id=row.reason_id,
            remarks=row.remarks,
            has_payment=row.has_payment,
            event_sequence=self._statuses.get_next_event_sequence(row.id),
            created_by_id=actor_id,
            created_at=self._clock.now(),
        )
        self.session.add(event)
        self.session.flush()
        return event
