"""
Provider protocols -- collaborators the tracking core calls out to.

Contract:
    ``LookupProvider`` reads companies, products, clients, status types and
    reasons.  ``TerritoryProvider`` resolves a caller's branch scope.
    ``AuthorizationProvider`` answers capability checks.  The kernel ships a
    SQLAlchemy lookup provider (``LookupSelector``) and in-memory territory /
    authorization providers; the identity provider's own model stays outside.

Architecture position:
    Kernel > Domain.  Protocols only, zero I/O.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from uuid import UUID

from tracking_kernel.domain.dtos import (
    BranchScope,
    ClientInfo,
    CompanyInfo,
    ProductInfo,
    StatusReasonInfo,
    StatusTypeInfo,
)


@runtime_checkable
class LookupProvider(Protocol):
    """Read-only access to lookup rows.  Every getter returns None on a miss."""

    def get_company(self, company_id: UUID) -> CompanyInfo | None: ...

    def get_status_type(self, status_id: UUID) -> StatusTypeInfo | None: ...

    def get_status_type_by_code(self, code: str) -> StatusTypeInfo | None: ...

    def get_reason(self, reason_id: UUID) -> StatusReasonInfo | None: ...

    def get_reasons_for_status(
        self, status_id: UUID,
    ) -> tuple[StatusReasonInfo, ...]: ...

    def get_client(self, client_id: UUID) -> ClientInfo | None: ...

    def get_product(self, product_id: UUID) -> ProductInfo | None: ...


@runtime_checkable
class TerritoryProvider(Protocol):
    """Resolves which branches a caller may act upon."""

    def get_branch_scope(self, user_id: UUID, org_id: str) -> BranchScope: ...


@runtime_checkable
class AuthorizationProvider(Protocol):
    """Capability checks, e.g. ``("status", "bulk_update")``."""

    def has_permission(
        self, user_id: UUID, org_id: str, resource: str, action: str,
    ) -> bool: ...
