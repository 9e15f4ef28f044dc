"""
StatusTransitionValidator -- business rules for a single status change.

Responsibility:
    Decides whether a client may move from one status to another for a
    given company, whether a reason belongs to the target status, and
    whether remarks are mandatory.  Composes those checks into
    ``validate_status_update`` for the single and bulk update paths.

Architecture position:
    Kernel > Services.  Reads lookup data through a ``LookupProvider`` and
    the graph through an injected ``StatusWorkflow``; performs no writes.

Invariants enforced:
    - Hard-terminal statuses admit no outgoing and no incoming transition
      inside the workflow.
    - Gated statuses (VISITED) are reachable only for companies whose code
      the workflow lists for them.
    - Only edges in the workflow graph are allowed, never backward by
      ordinal.
    - A reason must belong to its target status; remarks are required when
      any reason under the target status requires them.

Failure modes:
    Business violations return ``ValidationResult.fail(code, ...)``; nothing
    raises for them.  Unexpected errors from the lookup provider are logged
    and returned as VALIDATION_ERROR.  The boolean helpers return False on
    lookup failure.
"""

from uuid import UUID

from tracking_kernel.domain.dtos import (
    StatusUpdateInput,
    ValidationErrorCode,
    ValidationResult,
)
from tracking_kernel.domain.providers import LookupProvider
from tracking_kernel.domain.workflow import VISITED, StatusWorkflow
from tracking_kernel.logging_config import get_logger

logger = get_logger("services.status_validator")


class StatusTransitionValidator:
    """
    Validates status changes against the workflow and lookup data.

    Contract:
        Every ``validate_*`` method returns a ``ValidationResult``.  Checks
        run in a fixed order and stop at the first failure.

    Non-goals:
        - Does NOT check authorization or territory; the update paths do.
        - Does NOT persist anything.
    """

    def __init__(
        self,
        lookups: LookupProvider,
        workflow: StatusWorkflow | None = None,
    ):
        self._lookups = lookups
        self._workflow = workflow or StatusWorkflow.standard()

    @property
    def workflow(self) -> StatusWorkflow:
        return self._workflow

    def validate_status_transition(
        self,
        from_code: str,
        to_code: str,
        company_id: UUID,
    ) -> ValidationResult:
        """
        Check one move in the status graph for a company.

        Order: terminal source, terminal target, tenant gate, adjacency,
        backward ordinal.
        """
        try:
            company = self._lookups.get_company(company_id)
            company_code = company.code if company else None
            workflow = self._workflow

            if workflow.is_hard_terminal(from_code):
                return ValidationResult.fail(
                    ValidationErrorCode.TERMINAL_STATUS,
                    f"Cannot transition from terminal status: {from_code}",
                    from_status=from_code,
                )

            if workflow.is_hard_terminal(to_code):
                return ValidationResult.fail(
                    ValidationErrorCode.TERMINAL_STATUS,
                    f"Cannot transition to terminal status: {to_code}",
                    to_status=to_code,
                )

            if not workflow.allows_company(to_code, company_code):
                allowed = sorted(workflow.gated_statuses[to_code])
                return ValidationResult.fail(
                    ValidationErrorCode.VISITED_NOT_ALLOWED,
                    f"{to_code} status is only allowed for "
                    f"{', '.join(allowed)} company",
                    to_status=to_code,
                    company_code=company_code,
                )

            if not workflow.is_edge(from_code, to_code):
                return ValidationResult.fail(
                    ValidationErrorCode.INVALID_TRANSITION,
                    f"Invalid status transition from {from_code} to {to_code}",
                    from_status=from_code,
                    to_status=to_code,
                    allowed_transitions=sorted(workflow.allowed_targets(from_code)),
                )

            if workflow.is_backward(from_code, to_code):
                return ValidationResult.fail(
                    ValidationErrorCode.BACKWARD_TRANSITION,
                    "Cannot transition backward in status workflow",
                    from_status=from_code,
                    to_status=to_code,
                )

            return ValidationResult.ok()

        except Exception as exc:
            logger.error(
                "status_transition_validation_failed",
                extra={
                    "from_status": from_code,
                    "to_status": to_code,
                    "company_id": company_id,
                },
                exc_info=True,
            )
            return ValidationResult.fail(
                ValidationErrorCode.VALIDATION_ERROR,
                "Failed to validate status transition",
                error=str(exc),
            )

    def is_status_allowed_for_company(
        self, status_code: str, company_id: UUID,
    ) -> bool:
        """True when the status is ungated or the company may use it."""
        if not self._workflow.is_gated(status_code):
            return True
        try:
            company = self._lookups.get_company(company_id)
        except Exception:
            logger.warning(
                "company_lookup_failed",
                extra={"company_id": company_id, "status_code": status_code},
                exc_info=True,
            )
            return False
        if company is None:
            return False
        return self._workflow.allows_company(status_code, company.code)

    def is_visited_status_allowed(self, company_id: UUID) -> bool:
        """True iff the company carries the tenant code that unlocks VISITED."""
        return self.is_status_allowed_for_company(VISITED, company_id)

    def validate_reason_for_status(
        self, status_id: UUID, reason_id: UUID,
    ) -> ValidationResult:
        try:
            status = self._lookups.get_status_type(status_id)
            if status is None:
                return ValidationResult.fail(
                    ValidationErrorCode.STATUS_NOT_FOUND,
                    "Status type not found",
                    status_id=status_id,
                )

            reason = self._lookups.get_reason(reason_id)
            if reason is None:
                return ValidationResult.fail(
                    ValidationErrorCode.REASON_NOT_FOUND,
                    "Status reason not found",
                    reason_id=reason_id,
                )

            if reason.status_type_id != status_id:
                return ValidationResult.fail(
                    ValidationErrorCode.INVALID_REASON_FOR_STATUS,
                    f'Reason "{reason.name}" is not valid for status "{status.code}"',
                    reason_id=reason_id,
                    status_id=status_id,
                    reason_status_id=reason.status_type_id,
                )

            return ValidationResult.ok()

        except Exception as exc:
            logger.error(
                "reason_validation_failed",
                extra={"status_id": status_id, "reason_id": reason_id},
                exc_info=True,
            )
            return ValidationResult.fail(
                ValidationErrorCode.VALIDATION_ERROR,
                "Failed to validate reason for status",
                error=str(exc),
            )

    def validate_remarks_required(
        self, status_id: UUID, remarks: str | None = None,
    ) -> ValidationResult:
        try:
            status = self._lookups.get_status_type(status_id)
            if status is None:
                return ValidationResult.fail(
                    ValidationErrorCode.STATUS_NOT_FOUND,
                    "Status type not found",
                    status_id=status_id,
                )

            reasons = self._lookups.get_reasons_for_status(status_id)
            needs_remarks = any(r.requires_remarks for r in reasons)
            if needs_remarks and not (remarks and remarks.strip()):
                return ValidationResult.fail(
                    ValidationErrorCode.REMARKS_REQUIRED,
                    "Remarks are required for this status",
                    status_id=status_id,
                    status_code=status.code,
                )

            return ValidationResult.ok()

        except Exception as exc:
            logger.error(
                "remarks_validation_failed",
                extra={"status_id": status_id},
                exc_info=True,
            )
            return ValidationResult.fail(
                ValidationErrorCode.VALIDATION_ERROR,
                "Failed to validate remarks requirement",
                error=str(exc),
            )

    def is_terminal_status(self, status_id: UUID) -> bool:
        """Hard-terminal membership of the status code; False when missing."""
        try:
            status = self._lookups.get_status_type(status_id)
        except Exception:
            logger.warning(
                "status_lookup_failed",
                extra={"status_id": status_id},
                exc_info=True,
            )
            return False
        if status is None:
            return False
        return self._workflow.is_hard_terminal(status.code)

    def validate_status_update(self, update: StatusUpdateInput) -> ValidationResult:
        """
        Full check for one update: transition, then reason, then remarks.

        The source status defaults to the workflow's initial status when no
        prior status id is given or it does not resolve.
        """
        try:
            from_code = self._workflow.initial_status
            if update.from_status_id is not None:
                from_status = self._lookups.get_status_type(update.from_status_id)
                if from_status is not None:
                    from_code = from_status.code

            to_status = self._lookups.get_status_type(update.to_status_id)
            if to_status is None:
                return ValidationResult.fail(
                    ValidationErrorCode.STATUS_NOT_FOUND,
                    "Target status not found",
                    status_id=update.to_status_id,
                )
        except Exception as exc:
            logger.error(
                "status_update_validation_failed",
                extra={
                    "to_status_id": update.to_status_id,
                    "company_id": update.company_id,
                },
                exc_info=True,
            )
            return ValidationResult.fail(
                ValidationErrorCode.VALIDATION_ERROR,
                "Failed to validate status update",
                error=str(exc),
            )

        result = self.validate_status_transition(
            from_code, to_status.code, update.company_id,
        )
        if not result.is_valid:
            return result

        if update.reason_id is not None:
            result = self.validate_reason_for_status(
                update.to_status_id, update.reason_id,
            )
            if not result.is_valid:
                return result

        result = self.validate_remarks_required(update.to_status_id, update.remarks)
        if not result.is_valid:
            return result

        logger.debug(
            "status_update_validated",
            extra={
                "from_status": from_code,
                "to_status": to_status.code,
                "company_id": update.company_id,
            },
        )
        return ValidationResult.ok()
