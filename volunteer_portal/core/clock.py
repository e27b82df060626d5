"""Reference time zone clock.

All "now", start-of-day and day-of-week decisions for invitations and
scheduled reasons are made in a single fixed time zone
(America/Los_Angeles by default). Services receive a clock instance so the
policy lives in one place and tests can freeze time.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from volunteer_portal.core.config import get_settings

SUNDAY = 6  # datetime.weekday()


class ReferenceClock:
    """Clock bound to the reference time zone."""

    def __init__(self, tz_name: str = "America/Los_Angeles") -> None:
        self.tz_name = tz_name
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        """Current time in the reference zone."""
        return datetime.now(self.tz)

    def to_local(self, value: datetime) -> datetime:
        """Convert to the reference zone. Naive values are taken as UTC."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(self.tz)

    def parse_local(self, value: str | datetime) -> datetime:
        """Parse an ISO date or datetime into the reference zone.

        Values without an offset are read as wall-clock time in the reference
        zone; values with an offset are converted to it.

        Raises:
            ValueError: If the value is not an ISO 8601 date/datetime
        """
        if isinstance(value, str):
            value = datetime.fromisoformat(value.strip())
        if value.tzinfo is None:
            return value.replace(tzinfo=self.tz)
        return value.astimezone(self.tz)

    def start_of_day(self, value: datetime) -> datetime:
        local = self.to_local(value)
        midnight = datetime(local.year, local.month, local.day)
        return midnight.replace(tzinfo=self.tz)

    def today(self) -> datetime:
        """Start of the current day in the reference zone."""
        return self.start_of_day(self.now())

    def is_sunday(self, value: datetime) -> bool:
        return self.to_local(value).weekday() == SUNDAY

    def is_expired(self, expiration: datetime) -> bool:
        """True once the current time has reached ``expiration``."""
        return self.now() >= self.to_local(expiration)

    def expires_in(self, days: int) -> datetime:
        """Absolute expiration ``days`` from now, stored as UTC."""
        return (self.now() + timedelta(days=days)).astimezone(UTC)


class FrozenClock(ReferenceClock):
    """Clock pinned to a fixed instant, for tests and scripted runs."""

    def __init__(self, frozen_at: datetime, tz_name: str = "America/Los_Angeles") -> None:
        super().__init__(tz_name)
        self.frozen_at = frozen_at

    def now(self) -> datetime:
        return self.to_local(self.frozen_at)

    def advance(self, delta: timedelta) -> None:
        self.frozen_at = self.frozen_at + delta


def get_clock() -> ReferenceClock:
    """FastAPI dependency returning the configured reference clock."""
    return ReferenceClock(get_settings().reference_timezone)
