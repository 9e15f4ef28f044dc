"""Batch seeding and bulk update services."""

from tracking_batch.services.bulk_update import BulkStatusUpdateCoordinator
from tracking_batch.services.period_initializer import PeriodInitializer
from tracking_batch.services.record_writer import BatchRecordWriter

__all__ = [
    "BatchRecordWriter",
    "BulkStatusUpdateCoordinator",
    "PeriodInitializer",
]
