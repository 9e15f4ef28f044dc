"""
tracking_batch.domain.types -- Pure frozen dataclasses for batch seeding and
bulk status updates.

ZERO I/O.  Frozen dataclasses with tuples for immutable collections, the
same shape as the kernel DTOs.

Invariants enforced:
    - BatchResult: processed + failed == number of records written, and
      ``errors`` carry the record's original (global) index.
    - InitializationResult: ``success`` iff ``failed == 0``.
    - BulkUpdateReport: ``results`` are in input order.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from tracking_kernel.domain.dtos import StatusChangeRequest
from tracking_kernel.domain.period import PeriodKey

# One entry of a bulk request is the same request the single path takes.
BulkStatusUpdateItem = StatusChangeRequest

SYSTEM_ERROR_KEY = "system"


# =============================================================================
# Batch writer
# =============================================================================


@dataclass(frozen=True)
class BatchError:
    """A record the writer could not insert."""

    index: int  # 0-indexed position in the input
    error: str
    error_code: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Immutable result of ``BatchRecordWriter.write()``."""

    success: bool
    processed: int
    failed: int
    errors: tuple[BatchError, ...] = ()
    chunks: int = 0

    @property
    def total(self) -> int:
        return self.processed + self.failed


# =============================================================================
# Period initialization
# =============================================================================


@dataclass(frozen=True)
class ClientPeriodStatusSeed:
    """One row to seed for a new period (PENDING, no payment, count 0)."""

    client_id: UUID
    period: PeriodKey
    status_type_id: UUID
    has_payment: bool = False
    update_count: int = 0
    is_terminal: bool = False
    updated_by_id: UUID | None = None


@dataclass(frozen=True)
class InitializationError:
    """``client_id`` is the client's id, or ``"system"`` for a call-level failure."""

    client_id: UUID | str
    error: str


@dataclass(frozen=True)
class InitializationResult:
    """Immutable result of ``PeriodInitializer.initialize_period()``."""

    success: bool
    initialized: int
    skipped: int
    failed: int
    errors: tuple[InitializationError, ...] = ()

    @classmethod
    def system_failure(cls, message: str) -> InitializationResult:
        return cls(
            success=False,
            initialized=0,
            skipped=0,
            failed=0,
            errors=(InitializationError(client_id=SYSTEM_ERROR_KEY, error=message),),
        )


# =============================================================================
# Bulk update
# =============================================================================


@dataclass(frozen=True)
class BulkUpdateItemResult:
    """Result of one entry of a bulk update."""

    client_id: UUID
    success: bool
    error: str | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class BulkUpdateReport:
    """Immutable result of ``BulkStatusUpdateCoordinator.execute_bulk_update()``."""

    successful: int
    failed: int
    results: tuple[BulkUpdateItemResult, ...] = ()
