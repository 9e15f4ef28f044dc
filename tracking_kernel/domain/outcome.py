"""
Outcome -- typed per-record result for partial-failure processing.

Responsibility:
    ``Success`` and ``Failure`` are the two shapes a single record can end
    in when a batch keeps going past individual failures.  Batch services
    collect one outcome per input record, in input order, and derive their
    counters from the collected list.

Architecture position:
    Kernel > Domain -- pure, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Record processed; ``value`` is whatever the step produced."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Record not processed.

    ``code`` is machine-readable (validator codes, FORBIDDEN, NOT_FOUND,
    UNHANDLED_EXCEPTION, ...); ``message`` is user-facing.
    """

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success[T], Failure]


def count_outcomes(outcomes: list[Outcome] | tuple[Outcome, ...]) -> tuple[int, int]:
    """Return (succeeded, failed) for a collection of outcomes."""
    succeeded = sum(1 for o in outcomes if o.ok)
    return succeeded, len(outcomes) - succeeded
