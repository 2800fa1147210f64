from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class SessionTotals:
    total_hours: Decimal
    overtime_hours: Decimal


class TotalsCalculator(ABC):
    """Calculator interface (Strategy Pattern for clock-out totals)."""

    @abstractmethod
    def totals(self, clock_in: datetime, clock_out: datetime, *, break_minutes: int = 0) -> SessionTotals:
        raise NotImplementedError
