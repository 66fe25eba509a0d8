"""Parsing of composite wide-row series ids.

A series id names one wide row in the store::

    cpu,hostname=host_0,region=eu-central-1#usage_idle#2016-01-01

i.e. `<measurement>(,<tag>)*#<field>#<YYYY-MM-DD>`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from series_index.errors import MalformedSeriesIdError
from series_index.intervals import BUCKET_DURATION, TimeInterval

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass(frozen=True)
class Series:
    """A single wide row, parsed from its series id.

    Attributes:
        table: Table the row lives in (e.g. `"series_bigint"`).
        series_id: The raw composite identifier.
        measurement: Measurement name (e.g. `"cpu"`).
        tags: `"key=value"` tag tokens (e.g. `{"hostname=host_0"}`).
        field: Field name (e.g. `"usage_idle"`).
        time_interval: UTC time bucket covered by the row.
    """

    table: str
    series_id: str
    measurement: str
    tags: frozenset[str]
    field: str
    time_interval: TimeInterval

    def matches_time_interval(self, interval: TimeInterval) -> bool:
        """Whether this row's time bucket overlaps `interval`."""
        return self.time_interval.overlaps(interval)

    def matches_measurement_name(self, name: str) -> bool:
        return self.measurement == name

    def matches_field_name(self, name: str) -> bool:
        return self.field == name

    def matches_tag_sets(self, tag_sets: Sequence[Iterable[str]]) -> bool:
        """Whether this row satisfies every tag group.

        Each group is a set of alternatives; the row must carry at least one
        tag from every group. No groups matches everything.
        """
        for group in tag_sets:
            if not any(tag in self.tags for tag in group):
                return False
        return True


def _parse_day(token: str, *, series_id: str, table: str) -> datetime:
    if _DATE_RE.fullmatch(token) is None:
        raise MalformedSeriesIdError(
            f"Bad time bucket {token!r} (expected YYYY-MM-DD)",
            series_id=series_id,
            table=table,
        )
    try:
        return datetime.strptime(token, "%Y-%m-%d")
    except ValueError as exc:
        raise MalformedSeriesIdError(
            f"Bad time bucket {token!r}", series_id=series_id, table=table
        ) from exc


def parse_series_id(
    table: str,
    series_id: str,
    *,
    bucket_duration: timedelta = BUCKET_DURATION,
) -> Series:
    """Parse a stored series id into a `Series`.

    Args:
        table: Table the id was read from.
        series_id: Raw composite identifier.
        bucket_duration: Length of the time bucket starting at the id's date.

    Raises:
        MalformedSeriesIdError: If the id does not have exactly three
            `#`-separated sections, repeats a tag, or carries an invalid date.
    """
    sections = series_id.split("#")
    if len(sections) != 3:
        raise MalformedSeriesIdError(
            f"Expected 3 '#'-separated sections, got {len(sections)}",
            series_id=series_id,
            table=table,
        )
    measurement_and_tags, field, day_raw = sections
    measurement, *tag_tokens = measurement_and_tags.split(",")

    tags: set[str] = set()
    for tag in tag_tokens:
        if tag in tags:
            raise MalformedSeriesIdError(
                f"Duplicate tag {tag!r}", series_id=series_id, table=table
            )
        tags.add(tag)

    day = _parse_day(day_raw, series_id=series_id, table=table)
    try:
        time_interval = TimeInterval.bucket(day.date(), bucket_duration)
    except OverflowError as exc:
        raise MalformedSeriesIdError(
            f"Time bucket {day_raw!r} + {bucket_duration} is out of range",
            series_id=series_id,
            table=table,
        ) from exc
    return Series(
        table=table,
        series_id=series_id,
        measurement=measurement,
        tags=frozenset(tags),
        field=field,
        time_interval=time_interval,
    )


def parse_series_ids(
    pairs: Iterable[tuple[str, str]],
    *,
    bucket_duration: timedelta = BUCKET_DURATION,
) -> list[Series]:
    """Parse `(table, series_id)` pairs, preserving order."""
    out = [parse_series_id(t, s, bucket_duration=bucket_duration) for t, s in pairs]
    logger.debug("Parsed %d series ids", len(out))
    return out
