from __future__ import annotations

from datetime import datetime
from typing import Protocol

from django.utils import timezone


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock backed by django.utils.timezone (aware datetimes)."""

    def now(self) -> datetime:
        return timezone.now()


system_clock = SystemClock()
