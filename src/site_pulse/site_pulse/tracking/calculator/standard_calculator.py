from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import DEFAULT_FIXED_BREAK_HOURS, DEFAULT_REGULAR_HOURS
from .base import SessionTotals, TotalsCalculator

TWO_PLACES = Decimal("0.01")
ZERO_HOURS = Decimal("0.00")


def elapsed_hours(start: datetime, end: datetime) -> Decimal:
    """Wall-clock hours between two timestamps, rounded half-up to 2 places."""
    seconds = Decimal(str((end - start).total_seconds()))
    return (seconds / Decimal(3600)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between two timestamps, rounded half-up."""
    seconds = Decimal(str((end - start).total_seconds()))
    return int((seconds / Decimal(60)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class StandardTotalsCalculator(TotalsCalculator):
    """Standard rule: total = out - in; overtime = max(0, total - regular - fixed break).

    Recorded break minutes are accepted but not used: the lunch deduction is a
    flat ``fixed_break_hours`` and total hours are never reduced by breaks.
    """

    def __init__(
        self,
        *,
        regular_hours: float | Decimal = DEFAULT_REGULAR_HOURS,
        fixed_break_hours: float | Decimal = DEFAULT_FIXED_BREAK_HOURS,
    ):
        self.regular_hours = Decimal(str(regular_hours))
        self.fixed_break_hours = Decimal(str(fixed_break_hours))

    @property
    def overtime_threshold(self) -> Decimal:
        return self.regular_hours + self.fixed_break_hours

    def totals(self, clock_in: datetime, clock_out: datetime, *, break_minutes: int = 0) -> SessionTotals:
        total = elapsed_hours(clock_in, clock_out)
        overtime = max(ZERO_HOURS, total - self.overtime_threshold).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return SessionTotals(total_hours=total, overtime_hours=overtime)
