"""tracking_batch.domain -- Pure result types for batch seeding and bulk updates."""

from tracking_batch.domain.types import (
    BatchError,
    BatchResult,
    BulkStatusUpdateItem,
    BulkUpdateItemResult,
    BulkUpdateReport,
    ClientPeriodStatusSeed,
    InitializationError,
    InitializationResult,
)

__all__ = [
    "BatchError",
    "BatchResult",
    "BulkStatusUpdateItem",
    "BulkUpdateItemResult",
    "BulkUpdateReport",
    "ClientPeriodStatusSeed",
    "InitializationError",
    "InitializationResult",
]
