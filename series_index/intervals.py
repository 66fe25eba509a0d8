"""Half-open time intervals used as time bucket keys."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

BUCKET_DURATION = timedelta(days=1)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class TimeInterval:
    """A half-open `[start, end)` range of UTC instants.

    Equality and hashing are derived from `start` and `end`, so intervals
    can be used directly as dict keys.

    Attributes:
        start: Inclusive lower bound (timezone-aware).
        end: Exclusive upper bound (timezone-aware).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError(f"TimeInterval bounds must be timezone-aware: {self}")
        if not self.start < self.end:
            raise ValueError(f"TimeInterval start must precede end: {self}")

    @classmethod
    def bucket(cls, day: date, duration: timedelta = BUCKET_DURATION) -> TimeInterval:
        """Bucket starting at UTC midnight of `day` and lasting `duration`."""
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        return cls(start, start + duration)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: TimeInterval) -> bool:
        """Whether the two intervals share at least one instant.

        Intervals that only touch at a boundary do not overlap.
        """
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def epoch_micros(self) -> tuple[int, int]:
        """`(start, end)` as integer microseconds since the Unix epoch."""
        one = timedelta(microseconds=1)
        return ((self.start - _EPOCH) // one, (self.end - _EPOCH) // one)

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
