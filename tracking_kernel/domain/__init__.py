"""
tracking_kernel.domain -- Pure types and value objects.

ZERO I/O.  Workflow graph, period keys, outcomes, DTOs and provider
protocols.
"""

from tracking_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from tracking_kernel.domain.dtos import (
    BranchScope,
    BranchScopeKind,
    CallerContext,
    ClientInfo,
    ClientPeriodStatusInfo,
    CompanyInfo,
    PeriodStatusSummary,
    ProductInfo,
    StatusChangeRequest,
    StatusCount,
    StatusEventInfo,
    StatusReasonInfo,
    StatusTypeInfo,
    StatusUpdateInput,
    ValidationErrorCode,
    ValidationFailure,
    ValidationResult,
)
from tracking_kernel.domain.outcome import Failure, Outcome, Success, count_outcomes
from tracking_kernel.domain.period import PeriodKey, PeriodType
from tracking_kernel.domain.providers import (
    AuthorizationProvider,
    LookupProvider,
    TerritoryProvider,
)
from tracking_kernel.domain.workflow import StatusWorkflow

__all__ = [
    "AuthorizationProvider",
    "BranchScope",
    "BranchScopeKind",
    "CallerContext",
    "ClientInfo",
    "ClientPeriodStatusInfo",
    "Clock",
    "CompanyInfo",
    "DeterministicClock",
    "Failure",
    "LookupProvider",
    "Outcome",
    "PeriodKey",
    "PeriodStatusSummary",
    "PeriodType",
    "ProductInfo",
    "StatusChangeRequest",
    "StatusCount",
    "StatusEventInfo",
    "StatusReasonInfo",
    "StatusTypeInfo",
    "StatusUpdateInput",
    "StatusWorkflow",
    "Success",
    "SystemClock",
    "TerritoryProvider",
    "ValidationErrorCode",
    "ValidationFailure",
    "ValidationResult",
    "count_outcomes",
]
