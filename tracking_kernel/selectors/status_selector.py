"""
Module: tracking_kernel.selectors.status_selector
Responsibility: Read-only queries over client period statuses and the status
    event trail: current status for a period key, a client's history, the
    per-period summary, and the eligibility helpers period initialization
    needs.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Period key filters always match on (period_type, period_year,
      period_number), the same columns as uq_client_period_key.
    - Company scoping goes Client -> Product -> company_id and ignores
      soft-deleted clients.
"""

from uuid import UUID

from sqlalchemy import func, select

from tracking_kernel.domain.dtos import (
    ClientPeriodStatusInfo,
    PeriodStatusSummary,
    StatusCount,
    StatusEventInfo,
)
from tracking_kernel.domain.period import PeriodKey
from tracking_kernel.models.lookups import Client, Product, StatusReason, StatusType
from tracking_kernel.models.period_status import ClientPeriodStatus, StatusEvent
from tracking_kernel.selectors.base import BaseSelector

DEFAULT_HISTORY_LIMIT = 50


class StatusSelector(BaseSelector[ClientPeriodStatus]):
    """
    Selector for period status queries.

    Guarantees:
        - History is newest first (created_at DESC, event_sequence DESC).
        - Summary counts only non-deleted clients of the company.
    """

    def get_current_status(
        self, client_id: UUID, period: PeriodKey,
    ) -> ClientPeriodStatusInfo | None:
        row = self.session.execute(
            select(ClientPeriodStatus).where(
                ClientPeriodStatus.client_id == client_id,
                *ClientPeriodStatus.period_filter(period),
            )
        ).scalar_one_or_none()
        return row.to_dto() if row else None

    def get_client_status_history(
        self, client_id: UUID, limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> tuple[StatusEventInfo, ...]:
        """Status events across all periods of a client, newest first."""
        rows = self.session.execute(
            select(StatusEvent, StatusType.name, StatusReason.name)
            .join(
                ClientPeriodStatus,
                StatusEvent.client_period_status_id == ClientPeriodStatus.id,
            )
            .outerjoin(StatusType, StatusEvent.status_type_id == StatusType.id)
            .outerjoin(StatusReason, StatusEvent.reason_id == StatusReason.id)
            .where(ClientPeriodStatus.client_id == client_id)
            .order_by(
                StatusEvent.created_at.desc(),
                StatusEvent.event_sequence.desc(),
            )
            .limit(limit)
        ).all()
        return tuple(
            event.to_dto(status_name=status_name, reason_name=reason_name)
            for event, status_name, reason_name in rows
        )

    def get_next_event_sequence(self, client_period_status_id: UUID) -> int:
        current = self.session.execute(
            select(func.max(StatusEvent.event_sequence)).where(
                StatusEvent.client_period_status_id == client_period_status_id
            )
        ).scalar()
        return (current or 0) + 1

    def get_period_summary(
        self, company_id: UUID, period: PeriodKey,
    ) -> PeriodStatusSummary:
        total_clients = self.session.execute(
            select(func.count(Client.id.distinct()))
            .select_from(Client)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                Client.deleted_at.is_(None),
            )
        ).scalar() or 0

        scoped = (
            select(ClientPeriodStatus)
            .join(Client, ClientPeriodStatus.client_id == Client.id)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                Client.deleted_at.is_(None),
                *ClientPeriodStatus.period_filter(period),
            )
            .subquery()
        )

        count_rows = self.session.execute(
            select(
                scoped.c.status_type_id,
                StatusType.name,
                func.count(scoped.c.id),
            )
            .select_from(scoped)
            .outerjoin(StatusType, scoped.c.status_type_id == StatusType.id)
            .group_by(scoped.c.status_type_id, StatusType.name)
            .order_by(StatusType.name)
        ).all()

        payment_count = self.session.execute(
            select(func.count(scoped.c.id)).where(scoped.c.has_payment.is_(True))
        ).scalar() or 0

        terminal_count = self.session.execute(
            select(func.count(scoped.c.id)).where(scoped.c.is_terminal.is_(True))
        ).scalar() or 0

        return PeriodStatusSummary(
            company_id=company_id,
            period=period,
            total_clients=total_clients,
            status_counts=tuple(
                StatusCount(status_type_id=status_id, status_name=name, count=count)
                for status_id, name, count in count_rows
            ),
            payment_count=payment_count,
            terminal_count=terminal_count,
        )

    # -------------------------------------------------------------------------
    # Eligibility helpers for period initialization
    # -------------------------------------------------------------------------

    def get_client_ids_with_status(
        self, company_id: UUID, period: PeriodKey,
    ) -> frozenset[UUID]:
        """Ids of the company's clients already holding a row for ``period``."""
        rows = self.session.execute(
            select(ClientPeriodStatus.client_id)
            .join(Client, ClientPeriodStatus.client_id == Client.id)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                *ClientPeriodStatus.period_filter(period),
            )
        ).scalars()
        return frozenset(rows)

    def get_latest_terminal_client_ids(self, company_id: UUID) -> frozenset[UUID]:
        """Clients whose most recent period status is terminal.

        "Most recent" is the highest period ordinal; ties fall back to the
        row's creation time.
        """
        rows = self.session.execute(
            select(
                ClientPeriodStatus.client_id,
                ClientPeriodStatus.period_type,
                ClientPeriodStatus.period_year,
                ClientPeriodStatus.period_month,
                ClientPeriodStatus.period_quarter,
                ClientPeriodStatus.created_at,
                ClientPeriodStatus.is_terminal,
            )
            .join(Client, ClientPeriodStatus.client_id == Client.id)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                Client.deleted_at.is_(None),
            )
        ).all()

        latest: dict[UUID, tuple[tuple, bool]] = {}
        for client_id, ptype, year, month, quarter, created_at, is_terminal in rows:
            ordinal = PeriodKey.of(ptype, year, month, quarter).ordinal
            sort_key = (ordinal, created_at)
            current = latest.get(client_id)
            if current is None or sort_key > current[0]:
                latest[client_id] = (sort_key, is_terminal)

        return frozenset(
            client_id for client_id, (_, is_terminal) in latest.items() if is_terminal
        )

    def has_period_rows(self, company_id: UUID, period: PeriodKey) -> bool:
        """True iff any client of the company has a row for ``period``."""
        found = self.session.execute(
            select(ClientPeriodStatus.id)
            .join(Client, ClientPeriodStatus.client_id == Client.id)
            .join(Product, Client.product_id == Product.id)
            .where(
                Product.company_id == company_id,
                *ClientPeriodStatus.period_filter(period),
            )
            .limit(1)
        ).first()
        return found is not None
