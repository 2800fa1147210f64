from __future__ import annotations

from datetime import datetime

import pytest

from site_pulse.tracking.service import TimeTrackingService
from fakes import InMemoryTracking


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def tracking_repo() -> InMemoryTracking:
    return InMemoryTracking()


@pytest.fixture
def service(tracking_repo, fixed_now) -> TimeTrackingService:
    return TimeTrackingService(tracking_repo, clock=lambda: fixed_now)
