"""
BatchRecordWriter -- chunked, SAVEPOINT-per-record bulk insert.

Contract:
    ``write(records)`` inserts every record, one at a time, in fixed-size
    chunks run one after another.  A record that fails is reported and the
    writer moves on to the next record and the next chunk; nothing aborts
    the batch.

Architecture: tracking_batch/services.  Imports from tracking_batch.domain
    and kernel domain types only; rows are whatever ORM instances the
    caller's ``to_row`` builds.

Invariants enforced:
    - SAVEPOINT isolation per record: one failure never undoes another
      record's insert.
    - processed + failed == len(records); outcomes are kept in input order
      and errors carry the original (global) index.
    - Flush-only: the caller owns the outer transaction.
    - Chunking bounds how much is flushed and logged at once; it is not a
      concurrency mechanism.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tracking_kernel.db.base import Base
from tracking_kernel.domain.outcome import Failure, Outcome, Success, count_outcomes
from tracking_kernel.logging_config import get_logger

from tracking_batch.domain.types import BatchError, BatchResult

logger = get_logger("batch.record_writer")

DEFAULT_CHUNK_SIZE = 100

INSERT_FAILED = "INSERT_FAILED"
UNHANDLED_EXCEPTION = "UNHANDLED_EXCEPTION"

R = TypeVar("R")


def _error_message(exc: Exception) -> str:
    # DBAPIError wraps the driver error; its own str() carries the SQL too.
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class BatchRecordWriter:
    """Failure-isolated bulk insert.

    Contract:
        - ``to_row`` converts an input record to an ORM instance; without
          it the records must already be ORM instances.
        - Returns ``BatchResult``; never raises for a per-record failure.
    """

    def __init__(self, session: Session, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._session = session
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def write(
        self,
        records: Sequence[R],
        to_row: Callable[[R], Base] | None = None,
    ) -> BatchResult:
        records = list(records)
        outcomes: list[Outcome[UUID]] = []
        chunks = 0

        for start in range(0, len(records), self._chunk_size):
            chunk = records[start:start + self._chunk_size]
            chunk_start = time.monotonic()

            chunk_outcomes = [
                self._write_one(start + offset, record, to_row)
                for offset, record in enumerate(chunk)
            ]
            outcomes.extend(chunk_outcomes)
            chunks += 1

            succeeded, failed = count_outcomes(chunk_outcomes)
            logger.info(
                "batch_chunk_written",
                extra={
                    "chunk_index": chunks - 1,
                    "chunk_size": len(chunk),
                    "succeeded": succeeded,
                    "failed": failed,
                    "duration_ms": int((time.monotonic() - chunk_start) * 1000),
                },
            )

        processed, failed = count_outcomes(outcomes)
        errors = tuple(
            BatchError(index=index, error=outcome.message, error_code=outcome.code)
            for index, outcome in enumerate(outcomes)
            if not outcome.ok
        )

        logger.info(
            "batch_write_completed",
            extra={
                "total": len(records),
                "processed": processed,
                "failed": failed,
                "chunks": chunks,
            },
        )

        return BatchResult(
            success=failed == 0,
            processed=processed,
            failed=failed,
            errors=errors,
            chunks=chunks,
        )

    def _write_one(
        self,
        index: int,
        record: R,
        to_row: Callable[[R], Base] | None,
    ) -> Outcome[UUID]:
        savepoint = self._session.begin_nested()
        try:
            row = to_row(record) if to_row is not None else record
            self._session.add(row)
            self._session.flush()
        except SQLAlchemyError as exc:
            savepoint.rollback()
            logger.warning(
                "batch_record_failed",
                extra={
                    "index": index,
                    "error_code": INSERT_FAILED,
                    "error": _error_message(exc),
                },
            )
            return Failure(INSERT_FAILED, _error_message(exc), {"index": index})
        except Exception as exc:
            savepoint.rollback()
            logger.warning(
                "batch_record_failed",
                extra={"index": index, "error_code": UNHANDLED_EXCEPTION},
                exc_info=True,
            )
            return Failure(UNHANDLED_EXCEPTION, str(exc), {"index": index})

        savepoint.commit()
        return Success(row.id)
