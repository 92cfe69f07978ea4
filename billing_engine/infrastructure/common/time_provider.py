"""Clock implementations."""

from datetime import UTC, datetime, timedelta


class SystemTimeProvider:
    """Production clock reading the system time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedTimeProvider:
    """
    Controllable clock for tests and local replays.

    Not thread-safe; concurrent workflows should share a time that is not
    changed while they run.
    """

    def __init__(self, fixed_time: datetime) -> None:
        self._validate_utc(fixed_time)
        self._fixed_time = fixed_time

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        """Move the clock to `new_time`."""
        self._validate_utc(new_time)
        self._fixed_time = new_time

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward by a timedelta given as keyword arguments."""
        self._fixed_time = self._fixed_time + timedelta(**delta)
        return self._fixed_time

    def _validate_utc(self, dt: datetime) -> None:
        if dt.tzinfo is not UTC:
            raise ValueError(f"datetime must have tzinfo=UTC, got tzinfo={dt.tzinfo}")
