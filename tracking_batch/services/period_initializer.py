"""
PeriodInitializer -- seed one PENDING status per eligible client for a period.

Contract:
    ``initialize_period()`` creates the missing ClientPeriodStatus rows for
    one company and period key through ``BatchRecordWriter`` and reports
    how many rows were created, skipped and failed.  Running it twice for
    the same key creates nothing the second time.

Architecture: tracking_batch/services.  Reads through the kernel selectors,
    writes through BatchRecordWriter.  Called once per period rollover; when
    a period starts is decided elsewhere.

Invariants enforced:
    - Never duplicates a period key: clients that already hold a row for
      the exact key are skipped, and the unique constraint rejects a racing
      duplicate for that record only.
    - skipped == eligible - to_create.
    - Seeded rows are PENDING, has_payment False, update_count 0,
      is_terminal False.
    - Writer errors are mapped back to client ids by index.

Failure modes:
    - Missing PENDING status type, a malformed period key, or a storage
      error before the write loop degrades the whole call to one
      ``("system", message)`` error with success False.
    - ``is_period_initialized()`` returns False (and logs) on storage errors.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracking_kernel.domain.dtos import ClientInfo
from tracking_kernel.domain.period import PeriodKey, PeriodType
from tracking_kernel.domain.workflow import StatusWorkflow
from tracking_kernel.exceptions import InvalidPeriodKeyError, PendingStatusMissingError
from tracking_kernel.logging_config import LogContext, get_logger
from tracking_kernel.models.period_status import ClientPeriodStatus
from tracking_kernel.selectors.lookup_selector import LookupSelector
from tracking_kernel.selectors.status_selector import StatusSelector

from tracking_batch.domain.types import (
    ClientPeriodStatusSeed,
    InitializationError,
    InitializationResult,
)
from tracking_batch.services.record_writer import DEFAULT_CHUNK_SIZE, BatchRecordWriter

logger = get_logger("batch.period_initializer")


def seed_to_row(seed: ClientPeriodStatusSeed) -> ClientPeriodStatus:
    return ClientPeriodStatus.for_period(
        seed.client_id,
        seed.period,
        status_type_id=seed.status_type_id,
        has_payment=seed.has_payment,
        update_count=seed.update_count,
        is_terminal=seed.is_terminal,
        updated_by_id=seed.updated_by_id,
    )


class PeriodInitializer:
    """Seeds period status rows for a company.

    Contract:
        - ``get_clients_for_initialization()`` returns non-deleted clients
          of the company ordered by client code, optionally without clients
          whose most recent period status is terminal.
        - ``initialize_period()`` never raises for expected failures; it
          returns an ``InitializationResult``.
    """

    def __init__(
        self,
        session: Session,
        writer: BatchRecordWriter | None = None,
        workflow: StatusWorkflow | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._session = session
        self._lookups = LookupSelector(session)
        self._statuses = StatusSelector(session)
        self._writer = writer or BatchRecordWriter(session, chunk_size=chunk_size)
        self._workflow = workflow or StatusWorkflow.standard()

    def get_clients_for_initialization(
        self,
        company_id: UUID,
        exclude_terminal: bool = True,
    ) -> tuple[ClientInfo, ...]:
        clients = self._lookups.get_active_clients_for_company(company_id)
        if not exclude_terminal:
            return clients

        terminal_ids = self._statuses.get_latest_terminal_client_ids(company_id)
        if terminal_ids:
            logger.debug(
                "terminal_clients_excluded",
                extra={"company_id": company_id, "excluded": len(terminal_ids)},
            )
        return tuple(c for c in clients if c.id not in terminal_ids)

    def initialize_period(
        self,
        company_id: UUID,
        period_type: PeriodType | str,
        period_year: int,
        period_month: int | None = None,
        period_quarter: int | None = None,
        actor_id: UUID | None = None,
        exclude_terminal: bool = True,
    ) -> InitializationResult:
        with LogContext.bind(actor_id=actor_id):
            try:
                pending = self._lookups.get_status_type_by_code(
                    self._workflow.initial_status,
                )
                if pending is None:
                    raise PendingStatusMissingError(self._workflow.initial_status)

                period = PeriodKey.of(
                    period_type, period_year, period_month, period_quarter,
                )
                eligible = self.get_clients_for_initialization(
                    company_id, exclude_terminal,
                )
                existing = self._statuses.get_client_ids_with_status(
                    company_id, period,
                )
            except (PendingStatusMissingError, InvalidPeriodKeyError) as exc:
                logger.error(
                    "period_initialization_failed",
                    extra={
                        "company_id": company_id,
                        "error_code": exc.code,
                        "error": str(exc),
                    },
                )
                return InitializationResult.system_failure(str(exc))
            except SQLAlchemyError as exc:
                logger.error(
                    "period_initialization_failed",
                    extra={"company_id": company_id},
                    exc_info=True,
                )
                return InitializationResult.system_failure(
                    f"Failed to initialize period: {exc}"
                )

            seeds = [
                ClientPeriodStatusSeed(
                    client_id=client.id,
                    period=period,
                    status_type_id=pending.id,
                    updated_by_id=actor_id,
                )
                for client in eligible
                if client.id not in existing
            ]
            skipped = len(eligible) - len(seeds)

            write_result = self._writer.write(seeds, to_row=seed_to_row)

            errors = tuple(
                InitializationError(
                    client_id=seeds[error.index].client_id,
                    error=error.error,
                )
                for error in write_result.errors
            )

            logger.info(
                "period_initialized",
                extra={
                    "company_id": company_id,
                    "period": period.label,
                    "eligible": len(eligible),
                    "initialized": write_result.processed,
                    "skipped": skipped,
                    "failed": write_result.failed,
                },
            )

            return InitializationResult(
                success=write_result.failed == 0,
                initialized=write_result.processed,
                skipped=skipped,
                failed=write_result.failed,
                errors=errors,
            )

    def is_period_initialized(
        self,
        company_id: UUID,
        period_type: PeriodType | str,
        period_year: int,
        period_month: int | None = None,
        period_quarter: int | None = None,
    ) -> bool:
        try:
            period = PeriodKey.of(period_type, period_year, period_month, period_quarter)
            return self._statuses.has_period_rows(company_id, period)
        except (InvalidPeriodKeyError, SQLAlchemyError):
            logger.warning(
                "period_initialized_check_failed",
                extra={
                    "company_id": company_id,
                    "period_type": str(period_type),
                    "period_year": period_year,
                },
                exc_info=True,
            )
            return False
