"""
Module: tracking_kernel.models.lookups
Responsibility: ORM persistence for the reference data the status workflow
    reads: companies (tenants), products, clients, status types and status
    reasons.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Company.code is unique; it drives tenant-gated statuses (e.g. the
      FCASH tenant unlocks VISITED).
    - StatusType.code is unique; the workflow graph is expressed in codes.
    - A StatusReason belongs to exactly one StatusType.
    - Clients are soft-deleted (deleted_at); rows are never removed.

Failure modes:
    - IntegrityError on duplicate company/status codes.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tracking_kernel.db.base import TrackedBase, UUIDString
from tracking_kernel.domain.dtos import (
    ClientInfo,
    CompanyInfo,
    ProductInfo,
    StatusReasonInfo,
    StatusTypeInfo,
)
from tracking_kernel.domain.period import PeriodType


class Company(TrackedBase):
    """A business tenant."""

    __tablename__ = "companies"

    __table_args__ = (
        UniqueConstraint("code", name="uq_company_code"),
    )

    code: Mapped[str] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Company {self.code}>"

    def to_dto(self) -> CompanyInfo:
        return CompanyInfo(id=self.id, code=self.code, name=self.name)


class Product(TrackedBase):
    """A pension product; belongs to one company and has a tracking cycle."""

    __tablename__ = "products"

    __table_args__ = (
        Index("idx_product_company", "company_id"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    company_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("companies.id"),
        nullable=False,
    )

    # monthly | quarterly
    tracking_cycle: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PeriodType.MONTHLY.value,
    )

    def __repr__(self) -> str:
        return f"<Product {self.code}>"

    def to_dto(self) -> ProductInfo:
        return ProductInfo(
            id=self.id,
            company_id=self.company_id,
            code=self.code,
            name=self.name,
        )


class Client(TrackedBase):
    """A pension beneficiary under follow-up."""

    __tablename__ = "clients"

    __table_args__ = (
        UniqueConstraint("client_code", name="uq_client_code"),
        Index("idx_client_product", "product_id"),
        Index("idx_client_branch", "branch_id"),
    )

    client_code: Mapped[str] = mapped_column(String(50), nullable=False)

    full_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")

    # Branch rows live with the territory provider; no FK here.
    branch_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("products.id"),
        nullable=False,
    )

    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Client {self.client_code}>"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dto(self) -> ClientInfo:
        return ClientInfo(
            id=self.id,
            branch_id=self.branch_id,
            product_id=self.product_id,
            client_code=self.client_code,
            full_name=self.full_name,
            deleted_at=self.deleted_at,
        )


class StatusType(TrackedBase):
    """A workflow status (PENDING ... DONE) or a hard-terminal status."""

    __tablename__ = "status_types"

    __table_args__ = (
        UniqueConstraint("code", name="uq_status_type_code"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Display order
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<StatusType {self.code}>"

    def to_dto(self) -> StatusTypeInfo:
        return StatusTypeInfo(
            id=self.id,
            code=self.code,
            name=self.name,
            sequence=self.sequence,
        )


class StatusReason(TrackedBase):
    """A reason code selectable under one status type."""

    __tablename__ = "status_reasons"

    __table_args__ = (
        Index("idx_reason_status_type", "status_type_id"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    status_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("status_types.id"),
        nullable=False,
    )

    requires_remarks: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    is_terminal: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    def __repr__(self) -> str:
        return f"<StatusReason {self.name}>"

    def to_dto(self) -> StatusReasonInfo:
        return StatusReasonInfo(
            id=self.id,
            status_type_id=self.status_type_id,
            name=self.name,
            requires_remarks=self.requires_remarks,
            code=self.code,
            is_terminal=self.is_terminal,
        )
