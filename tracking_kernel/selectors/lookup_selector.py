"""
Module: tracking_kernel.selectors.lookup_selector
Responsibility: SQLAlchemy implementation of the ``LookupProvider`` protocol
    -- companies, products, clients, status types and status reasons.
Architecture position: Kernel > Selectors.

Failure modes:
    - Getters return None on a miss; callers decide what a miss means.
    - SQLAlchemyError propagates; the validator converts it into
      VALIDATION_ERROR.
"""

from uuid import UUID

from sqlalchemy import select

from tracking_kernel.domain.dtos import (
    ClientInfo,
    CompanyInfo,
    ProductInfo,
    StatusReasonInfo,
    StatusTypeInfo,
)
from tracking_kernel.models.lookups import (
    Client,
    Company,
    Product,
    StatusReason,
    StatusType,
)
from tracking_kernel.selectors.base import BaseSelector


class LookupSelector(BaseSelector[StatusType]):
    """Read-only lookup queries returning frozen DTOs."""

    def get_company(self, company_id: UUID) -> CompanyInfo | None:
        company = self.session.get(Company, company_id)
        return company.to_dto() if company else None

    def get_company_by_code(self, code: str) -> CompanyInfo | None:
        company = self.session.execute(
            select(Company).where(Company.code == code)
        ).scalar_one_or_none()
        return company.to_dto() if company else None

    def get_status_type(self, status_id: UUID) -> StatusTypeInfo | None:
        status = self.session.get(StatusType, status_id)
        return status.to_dto() if status else None

    def get_status_type_by_code(self, code: str) -> StatusTypeInfo | None:
        status = self.session.execute(
            select(StatusType).where(StatusType.code == code)
        ).scalar_one_or_none()
        return status.to_dto() if status else None

    def list_status_types(self) -> tuple[StatusTypeInfo, ...]:
        rows = self.session.execute(
            select(StatusType).order_by(StatusType.sequence, StatusType.code)
        ).scalars()
        return tuple(row.to_dto() for row in rows)

    def get_reason(self, reason_id: UUID) -> StatusReasonInfo | None:
        reason = self.session.get(StatusReason, reason_id)
        return reason.to_dto() if reason else None

    def get_reasons_for_status(
        self, status_id: UUID,
    ) -> tuple[StatusReasonInfo, ...]:
        rows = self.session.execute(
            select(StatusReason)
            .where(StatusReason.status_type_id == status_id)
            .order_by(StatusReason.name)
        ).scalars()
        return tuple(row.to_dto() for row in rows)

    def get_client(self, client_id: UUID) -> ClientInfo | None:
        client = self.session.get(Client, client_id)
        return client.to_dto() if client else None

    def get_product(self, product_id: UUID) -> ProductInfo | None:
        product = self.session.get(Product, product_id)
        return product.to_dto() if product else None

    def get_active_clients_for_company(
        self, company_id: UUID,
    ) -> tuple[ClientInfo, ...]:
        """Non-deleted clients whose product belongs to the company."""
        rows = self.session.execute(
            select(Client)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                Client.deleted_at.is_(None),
            )
            .order_by(Client.client_code)
        ).scalars()
        return tuple(row.to_dto() for row in rows)
