"""Timestamp source for system-managed record fields."""

from datetime import datetime, timedelta, timezone


class UtcClock:
    """UTC clock that never returns the same instant twice.

    Consecutive readings are strictly increasing even when the system clock
    has coarse resolution or steps backwards.
    """

    def __init__(self) -> None:
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = datetime.now(tz=timezone.utc)
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current


# Shared by every repository in the process
utc_clock = UtcClock()
