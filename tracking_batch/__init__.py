"""
tracking_batch -- Period seeding and bulk status updates.

Provides the chunked, SAVEPOINT-per-record BatchRecordWriter, the
PeriodInitializer built on it, and the BulkStatusUpdateCoordinator that
applies many independent status changes in one call.

Architecture:
    tracking_batch/ is a top-level package.  It imports from
    tracking_kernel; nothing in tracking_kernel imports from tracking_batch.

Invariants:
    - SAVEPOINT isolation per record (one failure never aborts the batch)
    - Results in input order, counters derived from collected outcomes
    - Flush-only; callers own the transaction
"""
