from __future__ import annotations

from datetime import date, datetime
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current server time, truncated to whole seconds.

    Note: Wrapped so tests can patch/mock easier. MySQL DATETIME columns drop
    fractional seconds, so we do the same before computing durations.
    """
    return datetime.now().replace(microsecond=0)


def iso_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
