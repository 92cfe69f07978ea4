"""Protocol for the clock used by use cases."""

from datetime import datetime
from typing import Protocol


class TimeProvider(Protocol):
    """
    Source of the current time.

    Implementations must return timezone-aware UTC datetimes; billing weeks are
    anchored in UTC and a naive datetime cannot be compared with them.
    """

    def now(self) -> datetime:
        """
        Return the current moment.

        Returns:
            Datetime with tzinfo=UTC
        """
        ...
