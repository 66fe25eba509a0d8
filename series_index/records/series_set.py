"""Immutable series collections with fluent filtering."""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

import pandas as pd

from series_index.intervals import TimeInterval
from series_index.raw.series_id import Series

_SERIES_FIELDS = frozenset(f.name for f in dataclasses.fields(Series))

DATAFRAME_COLUMNS = ["table", "series_id", "measurement", "tags", "field", "start", "end"]


def series_to_dataframe(series: Iterable[Series]) -> pd.DataFrame:
    """One row per series; tags become a sorted list, the interval becomes `start`/`end`."""
    records = [
        {
            "table": s.table,
            "series_id": s.series_id,
            "measurement": s.measurement,
            "tags": sorted(s.tags),
            "field": s.field,
            "start": s.time_interval.start,
            "end": s.time_interval.end,
        }
        for s in series
    ]
    if not records:
        return pd.DataFrame(columns=DATAFRAME_COLUMNS)
    return pd.DataFrame(records, columns=DATAFRAME_COLUMNS)


class _SeriesSetData:
    """Typed field accessor for SeriesSet, returning `list[T]` per field.

    Accessed via `SeriesSet.data` so that field columns do not collide with
    filter methods (`series.data.measurement` is a list, `series.measurement`
    is the filter).
    """

    __slots__ = ("_cache", "_series")

    def __init__(self, series: tuple[Series, ...], cache: dict[str, Any]) -> None:
        self._series = series
        self._cache = cache

    if not TYPE_CHECKING:

        def __getattr__(self, name: str) -> list[Any]:
            if name not in _SERIES_FIELDS:
                raise AttributeError(f"Series has no field {name!r}")
            key = f"_data_{name}"
            if key not in self._cache:
                self._cache[key] = [getattr(s, name) for s in self._series]
            return self._cache[key]

    if TYPE_CHECKING:

        @property
        def table(self) -> list[str]: ...

        @property
        def series_id(self) -> list[str]: ...

        @property
        def measurement(self) -> list[str]: ...

        @property
        def tags(self) -> list[frozenset[str]]: ...

        @property
        def field(self) -> list[str]: ...

        @property
        def time_interval(self) -> list[TimeInterval]: ...


class SeriesSet:
    """Immutable collection of parsed series with fluent filtering.

    Filters return new collections. Filters on categorical fields (table,
    measurement, field) and `group_by` are cached per collection; time
    window and tag-set filters are not:

        cpu = index.series.measurement("cpu").field("usage_idle")
        for s in cpu.time_interval(window).tag_sets([["hostname=host_0"]]):
            print(s.series_id)

    Column access goes through `data`:

        ids = index.series.data.series_id  # list[str]
    """

    def __init__(self, series: Sequence[Series]) -> None:
        self._series = tuple(series)
        self._cache: dict[str, Any] = {}

    def table(self, *tables: str) -> SeriesSet:
        """Filter to series stored in any of the given tables."""
        return self._filter("table", tables)

    def measurement(self, *names: str) -> SeriesSet:
        """Filter to series of any of the given measurements."""
        return self._filter("measurement", names)

    def field(self, *names: str) -> SeriesSet:
        """Filter to series of any of the given field names."""
        return self._filter("field", names)

    def tag(self, *tags: str) -> SeriesSet:
        """Filter to series carrying at least one of the given tags."""
        return self.tag_sets([tags])

    def tag_sets(self, tag_sets: Sequence[Iterable[str]]) -> SeriesSet:
        """Filter to series satisfying every tag group (OR within, AND across)."""
        groups = [tuple(g) for g in tag_sets]
        return SeriesSet([s for s in self._series if s.matches_tag_sets(groups)])

    def time_interval(self, interval: TimeInterval) -> SeriesSet:
        """Filter to series whose time bucket overlaps `interval`."""
        return SeriesSet([s for s in self._series if s.matches_time_interval(interval)])

    def where(self, predicate: Callable[[Series], bool]) -> SeriesSet:
        """Filter series by an arbitrary predicate."""
        return SeriesSet([s for s in self._series if predicate(s)])

    def _filter(self, field: str, values: tuple[Any, ...]) -> SeriesSet:
        key = f"_filter_{field}_{values}"
        if key not in self._cache:
            value_set = set(values)
            self._cache[key] = SeriesSet(
                [s for s in self._series if getattr(s, field) in value_set]
            )
        return self._cache[key]

    @property
    def data(self) -> _SeriesSetData:
        """Field accessor returning one `list` per `Series` field, in iteration order."""
        key = "_data_accessor"
        if key not in self._cache:
            self._cache[key] = _SeriesSetData(self._series, self._cache)
        return self._cache[key]

    def group_by(self, *fields: str) -> dict[Any, SeriesSet]:
        """Group series by one or more fields.

        Returns:
            Single field: `{value: SeriesSet, ...}`.
            Multiple fields: `{(v1, v2, ...): SeriesSet, ...}`.
        """
        unknown = [f for f in fields if f not in _SERIES_FIELDS]
        if not fields or unknown:
            raise ValueError(f"group_by() needs Series field names, got {fields!r}")
        key = f"_group_by_{fields}"
        if key not in self._cache:
            groups: dict[Any, list[Series]] = defaultdict(list)
            for s in self._series:
                if len(fields) == 1:
                    k = getattr(s, fields[0])
                else:
                    k = tuple(getattr(s, f) for f in fields)
                groups[k].append(s)
            self._cache[key] = {k: SeriesSet(v) for k, v in groups.items()}
        return self._cache[key]

    def __iter__(self) -> Iterator[Series]:
        return iter(self._series)

    def __len__(self) -> int:
        return len(self._series)

    def __getitem__(self, index: int) -> Series:
        return self._series[index]

    def __bool__(self) -> bool:
        return len(self._series) > 0

    def __add__(self, other: SeriesSet) -> SeriesSet:
        return SeriesSet(list(self._series) + list(other._series))

    def __repr__(self) -> str:
        return f"SeriesSet({len(self._series)} series)"

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per series."""
        return series_to_dataframe(self._series)
