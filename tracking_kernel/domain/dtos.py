"""
Domain DTOs -- frozen data transfer objects for the tracking kernel.

Responsibility:
    Immutable value objects passed between selectors, services and the
    batch layer: validation results and their error codes, status change
    requests, caller identity and territory scope, and read-side snapshots
    of lookup rows, period statuses and status events.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Services and selectors convert ORM
    rows into these DTOs; nothing outside the kernel sees ORM instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from tracking_kernel.domain.period import PeriodKey, PeriodType


# =============================================================================
# Validation
# =============================================================================


class ValidationErrorCode(str, Enum):
    """Machine-readable codes returned by the status validator."""

    STATUS_NOT_FOUND = "STATUS_NOT_FOUND"
    REASON_NOT_FOUND = "REASON_NOT_FOUND"
    INVALID_REASON_FOR_STATUS = "INVALID_REASON_FOR_STATUS"
    REMARKS_REQUIRED = "REMARKS_REQUIRED"
    TERMINAL_STATUS = "TERMINAL_STATUS"
    VISITED_NOT_ALLOWED = "VISITED_NOT_ALLOWED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    BACKWARD_TRANSITION = "BACKWARD_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass(frozen=True)
class ValidationFailure:
    """Why a validation did not pass."""

    code: ValidationErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationResult:
    """Tagged validation result; ``error`` is set iff ``is_valid`` is False."""

    is_valid: bool
    error: ValidationFailure | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(
        cls,
        code: ValidationErrorCode,
        message: str,
        **details: Any,
    ) -> ValidationResult:
        return cls(
            is_valid=False,
            error=ValidationFailure(code=code, message=message, details=details),
        )

    @property
    def code(self) -> ValidationErrorCode | None:
        return self.error.code if self.error else None


@dataclass(frozen=True)
class StatusUpdateInput:
    """Everything ``validate_status_update`` needs for one change."""

    to_status_id: UUID
    company_id: UUID
    client_period_status_id: UUID | None = None
    from_status_id: UUID | None = None
    reason_id: UUID | None = None
    remarks: str | None = None
    updated_by: UUID | None = None


# =============================================================================
# Requests and callers
# =============================================================================


@dataclass(frozen=True)
class StatusChangeRequest:
    """One requested status change for a client in one period.

    Period fields are kept raw so that a malformed key fails only the record
    that carries it.
    """

    client_id: UUID
    period_type: PeriodType | str
    period_year: int
    status_id: UUID
    period_month: int | None = None
    period_quarter: int | None = None
    reason_id: UUID | None = None
    remarks: str | None = None
    has_payment: bool = False

    def period_key(self) -> PeriodKey:
        """Build the period key; raises InvalidPeriodKeyError."""
        return PeriodKey.of(
            self.period_type,
            self.period_year,
            self.period_month,
            self.period_quarter,
        )


@dataclass(frozen=True)
class CallerContext:
    """Identity of the user submitting a change."""

    user_id: UUID
    org_id: str
    correlation_id: str | None = None


class BranchScopeKind(str, Enum):
    """How much of the branch network a caller may act on."""

    ALL = "all"
    TERRITORY = "territory"
    NONE = "none"


@dataclass(frozen=True)
class BranchScope:
    """Territory scope of a caller."""

    scope: BranchScopeKind
    branch_ids: frozenset[UUID] = frozenset()

    @classmethod
    def all(cls) -> BranchScope:
        return cls(scope=BranchScopeKind.ALL)

    @classmethod
    def none(cls) -> BranchScope:
        return cls(scope=BranchScopeKind.NONE)

    @classmethod
    def territory(cls, branch_ids) -> BranchScope:
        return cls(scope=BranchScopeKind.TERRITORY, branch_ids=frozenset(branch_ids))

    def allows(self, branch_id: UUID) -> bool:
        if self.scope == BranchScopeKind.ALL:
            return True
        if self.scope == BranchScopeKind.NONE:
            return False
        return branch_id in self.branch_ids


# =============================================================================
# Lookup snapshots
# =============================================================================


@dataclass(frozen=True)
class CompanyInfo:
    id: UUID
    code: str
    name: str = ""


@dataclass(frozen=True)
class ProductInfo:
    id: UUID
    company_id: UUID | None
    code: str = ""
    name: str = ""


@dataclass(frozen=True)
class ClientInfo:
    id: UUID
    branch_id: UUID
    product_id: UUID
    client_code: str = ""
    full_name: str = ""
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class StatusTypeInfo:
    id: UUID
    code: str
    name: str
    sequence: int = 0


@dataclass(frozen=True)
class StatusReasonInfo:
    id: UUID
    status_type_id: UUID | None
    name: str
    requires_remarks: bool = False
    code: str = ""
    is_terminal: bool = False


# =============================================================================
# Period status snapshots
# =============================================================================


@dataclass(frozen=True)
class ClientPeriodStatusInfo:
    """Immutable snapshot of a client's status in one period."""

    id: UUID
    client_id: UUID
    period: PeriodKey
    status_type_id: UUID | None
    reason_id: UUID | None
    remarks: str | None
    has_payment: bool
    update_count: int
    is_terminal: bool
    updated_by_id: UUID | None = None
    updated_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class StatusEventInfo:
    """Immutable snapshot of one audit trail row."""

    id: UUID
    client_period_status_id: UUID
    status_type_id: UUID | None
    reason_id: UUID | None
    remarks: str | None
    has_payment: bool
    event_sequence: int
    created_by_id: UUID | None
    created_at: datetime | None
    status_name: str | None = None
    reason_name: str | None = None


@dataclass(frozen=True)
class StatusCount:
    status_type_id: UUID | None
    status_name: str | None
    count: int


@dataclass(frozen=True)
class PeriodStatusSummary:
    """Counts for one company and period key."""

    company_id: UUID
    period: PeriodKey
    total_clients: int
    status_counts: tuple[StatusCount, ...] = ()
    payment_count: int = 0
    terminal_count: int = 0
