"""
Module: tracking_kernel.models.period_status
Responsibility: ORM persistence for a client's status in one reporting
    period and for the append-only trail of status changes.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ value objects only.

Invariants enforced:
    - One ClientPeriodStatus per client per period key
      (uq_client_period_key over client_id, period_type, period_year,
      period_number).  period_number is the month for monthly keys and the
      quarter for quarterly keys, so the key never contains NULL.
    - update_count is 0 for seeded rows and grows by one per mutation.
    - StatusEvent rows are append-only; event_sequence is 1-based and unique
      per ClientPeriodStatus (uq_status_event_sequence).

Failure modes:
    - IntegrityError on a duplicate period key or event sequence.  Batch
      paths run each record in a SAVEPOINT so only that record fails.

Audit relevance:
    StatusEvent IS the status audit trail.  Every successful update, single
    or bulk, appends exactly one event carrying the actor and the new state.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from tracking_kernel.db.base import Base, TrackedBase, UUIDString
from tracking_kernel.domain.dtos import ClientPeriodStatusInfo, StatusEventInfo
from tracking_kernel.domain.period import PeriodKey


class ClientPeriodStatus(TrackedBase):
    """
    Current status of one client for one period key.

    Contract:
        Created by period initialization (PENDING, update_count 0) or lazily
        by the first update (update_count 1).  Mutated thereafter, never
        deleted.

    Guarantees:
        - period_number mirrors period_month or period_quarter.
        - is_terminal is recomputed from the status on every mutation.
    """

    __tablename__ = "client_period_status"

    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "period_type",
            "period_year",
            "period_number",
            name="uq_client_period_key",
        ),
        Index("idx_cps_period", "period_type", "period_year", "period_number"),
        Index("idx_cps_status_type", "status_type_id"),
    )

    client_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("clients.id"),
        nullable=False,
    )

    # monthly | quarterly
    period_type: Mapped[str] = mapped_column(String(20), nullable=False)

    period_year: Mapped[int] = mapped_column(Integer, nullable=False)

    period_month: Mapped[int | None] = mapped_column(Integer, nullable=True)

    period_quarter: Mapped[int | None] = mapped_column(Integer, nullable=True)

    period_number: Mapped[int] = mapped_column(Integer, nullable=False)

    status_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("status_types.id"),
        nullable=False,
    )

    reason_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("status_reasons.id"),
        nullable=True,
    )

    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    has_payment: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    update_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    is_terminal: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Who last changed the status (None for rows seeded without an actor)
    updated_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<ClientPeriodStatus client={self.client_id} "
            f"{self.period_type}:{self.period_year}/{self.period_number}>"
        )

    @classmethod
    def for_period(cls, client_id: UUID, period: PeriodKey, **values) -> "ClientPeriodStatus":
        """Build a row keyed by ``period``; remaining columns from ``values``."""
        return cls(
            client_id=client_id,
            period_type=period.period_type.value,
            period_year=period.period_year,
            period_month=period.period_month,
            period_quarter=period.period_quarter,
            period_number=period.period_number,
            **values,
        )

    @classmethod
    def period_filter(cls, period: PeriodKey) -> tuple:
        """WHERE clauses matching the columns of uq_client_period_key."""
        return (
            cls.period_type == period.period_type.value,
            cls.period_year == period.period_year,
            cls.period_number == period.period_number,
        )

    @property
    def period(self) -> PeriodKey:
        return PeriodKey.of(
            self.period_type,
            self.period_year,
            self.period_month,
            self.period_quarter,
        )

    def to_dto(self) -> ClientPeriodStatusInfo:
        return ClientPeriodStatusInfo(
            id=self.id,
            client_id=self.client_id,
            period=self.period,
            status_type_id=self.status_type_id,
            reason_id=self.reason_id,
            remarks=self.remarks,
            has_payment=self.has_payment,
            update_count=self.update_count,
            is_terminal=self.is_terminal,
            updated_by_id=self.updated_by_id,
            updated_at=self.updated_at,
            created_at=self.created_at,
        )


class StatusEvent(Base):
    """
    Append-only record of one successful status mutation.

    Contract:
        Never updated or deleted.  event_sequence is allocated as
        max(existing) + 1 for the owning ClientPeriodStatus.
    """

    __tablename__ = "status_events"

    __table_args__ = (
        UniqueConstraint(
            "client_period_status_id",
            "event_sequence",
            name="uq_status_event_sequence",
        ),
        Index("idx_status_event_cps", "client_period_status_id"),
        Index("idx_status_event_created", "created_at"),
    )

    client_period_status_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("client_period_status.id"),
        nullable=False,
    )

    status_type_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("status_types.id"),
        nullable=False,
    )

    reason_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("status_reasons.id"),
        nullable=True,
    )

    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    has_payment: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    event_sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    created_by_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
    )

    # Clock-injected, not server time
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<StatusEvent cps={self.client_period_status_id} "
            f"#{self.event_sequence}>"
        )

    def to_dto(
        self,
        status_name: str | None = None,
        reason_name: str | None = None,
    ) -> StatusEventInfo:
        return StatusEventInfo(
            id=self.id,
            client_period_status_id=self.client_period_status_id,
            status_type_id=self.status_type_id,
            reason_id=self.reason_id,
            remarks=self.remarks,
            has_payment=self.has_payment,
            event_sequence=self.event_sequence,
            created_by_id=self.created_by_id,
            created_at=self.created_at,
            status_name=status_name,
            reason_name=reason_name,
        )
