"""
Period keys -- identity of one reporting cycle.

Responsibility:
    ``PeriodType`` and the frozen ``PeriodKey`` value object.  A key is
    (period_type, period_year, month-or-quarter); monthly keys carry a month,
    quarterly keys carry a quarter, never both.

Architecture position:
    Kernel > Domain -- pure, zero I/O.

Invariants enforced:
    - Monthly: month in 1..12, quarter is None.
    - Quarterly: quarter in 1..4, month is None.
    - Year in 2000..2100.
    Violations raise ``InvalidPeriodKeyError`` at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tracking_kernel.exceptions import InvalidPeriodKeyError

MIN_PERIOD_YEAR = 2000
MAX_PERIOD_YEAR = 2100


class PeriodType(str, Enum):
    """Reporting cycle granularity."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


@dataclass(frozen=True)
class PeriodKey:
    """Immutable period key.

    ``period_number`` is the month for monthly keys and the quarter for
    quarterly keys; it is the column that makes the stored unique key
    NULL-free.
    """

    period_type: PeriodType
    period_year: int
    period_month: int | None = None
    period_quarter: int | None = None

    def __post_init__(self) -> None:
        try:
            period_type = PeriodType(self.period_type)
        except ValueError:
            raise InvalidPeriodKeyError(
                f"unknown period type {self.period_type!r}",
                period_type=str(self.period_type),
                period_year=self.period_year,
                period_month=self.period_month,
                period_quarter=self.period_quarter,
            ) from None
        object.__setattr__(self, "period_type", period_type)

        reason = self._check()
        if reason is not None:
            raise InvalidPeriodKeyError(
                reason,
                period_type=period_type.value,
                period_year=self.period_year,
                period_month=self.period_month,
                period_quarter=self.period_quarter,
            )

    def _check(self) -> str | None:
        for field_name in ("period_year", "period_month", "period_quarter"):
            value = getattr(self, field_name)
            if value is None and field_name != "period_year":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                return f"{field_name} must be an integer, got {value!r}"
        if not MIN_PERIOD_YEAR <= self.period_year <= MAX_PERIOD_YEAR:
            return (
                f"year {self.period_year} outside "
                f"{MIN_PERIOD_YEAR}..{MAX_PERIOD_YEAR}"
            )
        if self.period_type == PeriodType.MONTHLY:
            if self.period_quarter is not None:
                return "monthly period cannot carry a quarter"
            if self.period_month is None or not 1 <= self.period_month <= 12:
                return f"monthly period needs a month in 1..12, got {self.period_month}"
        else:
            if self.period_month is not None:
                return "quarterly period cannot carry a month"
            if self.period_quarter is None or not 1 <= self.period_quarter <= 4:
                return f"quarterly period needs a quarter in 1..4, got {self.period_quarter}"
        return None

    @classmethod
    def of(
        cls,
        period_type: PeriodType | str,
        period_year: int,
        period_month: int | None = None,
        period_quarter: int | None = None,
    ) -> PeriodKey:
        return cls(
            period_type=period_type,  # type: ignore[arg-type]
            period_year=period_year,
            period_month=period_month,
            period_quarter=period_quarter,
        )

    @property
    def period_number(self) -> int:
        if self.period_type == PeriodType.MONTHLY:
            return self.period_month  # type: ignore[return-value]
        return self.period_quarter  # type: ignore[return-value]

    @property
    def ordinal(self) -> int:
        """Chronological position: the month index at which the period ends."""
        if self.period_type == PeriodType.MONTHLY:
            return self.period_year * 12 + self.period_number
        return self.period_year * 12 + self.period_number * 3

    @property
    def label(self) -> str:
        if self.period_type == PeriodType.MONTHLY:
            return f"{self.period_year}-{self.period_number:02d}"
        return f"{self.period_year}-Q{self.period_number}"

    def __str__(self) -> str:
        return self.label
