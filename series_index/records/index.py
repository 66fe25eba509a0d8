"""Client-side index translating query predicates into candidate wide rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import timedelta
from pathlib import Path
from types import MappingProxyType

import numpy as np
import pandas as pd

from series_index.config import IndexConfig
from series_index.errors import EmptyIndexError
from series_index.intervals import BUCKET_DURATION, TimeInterval
from series_index.raw.series_id import Series, parse_series_ids
from series_index.records.series_set import SeriesSet, series_to_dataframe
from series_index.sources import SeriesSource, fetch_series_collection

logger = logging.getLogger(__name__)


class ClientSideIndex:
    """Read-only index over every known series of a wide-row store.

    The store cannot tell which rows match a combination of predicates, so
    the client keeps this index and prunes candidates before generating
    storage queries. It is built once from a full snapshot and never mutated
    afterwards, which makes it safe to share across reader threads.

    Two inverted indices are kept:

    - `by_time_interval`: exact time bucket -> series in that bucket. This is
      an exact-bucket index, not an interval index: a query spanning several
      buckets must go through `intervals_overlapping` or `candidates`.
    - `by_tag`: tag token -> series carrying that tag.

    Bucket values are tuples of the same `Series` objects held in the
    index's ordered row tuple; nothing is copied.

    Example:

        index = ClientSideIndex.from_pairs(
            [("series_double", "cpu,hostname=host_0#usage_idle#2016-01-01")]
        )
        hits = index.candidates(
            measurement="cpu",
            field="usage_idle",
            time_interval=window,
            tag_sets=[["hostname=host_0", "hostname=host_1"]],
        )
    """

    def __init__(self, series_collection: Sequence[Series]) -> None:
        if len(series_collection) == 0:
            raise EmptyIndexError("No series to build ClientSideIndex from")

        series = tuple(series_collection)
        by_interval: dict[TimeInterval, list[Series]] = {}
        by_tag: dict[str, list[Series]] = {}
        for s in series:
            by_interval.setdefault(s.time_interval, []).append(s)
            for tag in s.tags:
                by_tag.setdefault(tag, []).append(s)

        self._series = series
        self._series_ids = tuple(s.series_id for s in series)
        self._by_time_interval: Mapping[TimeInterval, tuple[Series, ...]] = MappingProxyType(
            {k: tuple(v) for k, v in by_interval.items()}
        )
        self._by_tag: Mapping[str, tuple[Series, ...]] = MappingProxyType(
            {k: tuple(v) for k, v in by_tag.items()}
        )

        intervals = sorted(self._by_time_interval, key=lambda ti: (ti.start, ti.end))
        bounds = np.array([ti.epoch_micros() for ti in intervals], dtype=np.int64)
        self._sorted_intervals = tuple(intervals)
        self._interval_starts = bounds[:, 0]
        self._interval_ends = bounds[:, 1]

        logger.info(
            "Built client-side index: %d series, %d buckets, %d tags",
            len(series),
            len(self._by_time_interval),
            len(self._by_tag),
        )

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[str, str]],
        *,
        bucket_duration: timedelta = BUCKET_DURATION,
    ) -> ClientSideIndex:
        """Parse `(table, series_id)` pairs and build the index from them."""
        return cls(parse_series_ids(pairs, bucket_duration=bucket_duration))

    @classmethod
    def from_source(
        cls,
        source: SeriesSource,
        *,
        config: IndexConfig | None = None,
    ) -> ClientSideIndex:
        """Scan every configured table of `source` and build the index.

        Args:
            source: Where series ids are listed from.
            config: Tables and bucket duration (default: `IndexConfig()`).
        """
        config = config if config is not None else IndexConfig()
        collection = fetch_series_collection(
            source, config.tables, bucket_duration=config.bucket_duration
        )
        return cls(collection)

    @classmethod
    def from_parquet(
        cls,
        path: str | Path,
        *,
        bucket_duration: timedelta | None = None,
    ) -> ClientSideIndex:
        """Rebuild an index from a snapshot written by `to_dataframe().to_parquet()`.

        Every id is parsed again so the rebuilt index holds the same
        invariants as a fresh scan. The bucket duration is taken from the
        stored `start`/`end` columns.

        Args:
            path: Snapshot parquet file.
            bucket_duration: Expected bucket duration. Must agree with the
                snapshot when given.

        Raises:
            ValueError: If the snapshot mixes bucket durations or disagrees
                with `bucket_duration`.
        """
        df = pd.read_parquet(path, columns=["table", "series_id", "start", "end"])
        stored = {d.to_pytimedelta() for d in df["end"] - df["start"]}
        if len(stored) > 1:
            raise ValueError(f"Snapshot mixes bucket durations {sorted(stored)}: {path}")
        if stored:
            (stored_duration,) = stored
            if bucket_duration is not None and bucket_duration != stored_duration:
                raise ValueError(
                    f"Snapshot bucket duration {stored_duration} does not match "
                    f"requested {bucket_duration}: {path}"
                )
            bucket_duration = stored_duration
        elif bucket_duration is None:
            bucket_duration = BUCKET_DURATION
        pairs = zip(df["table"].astype(str), df["series_id"].astype(str))
        index = cls.from_pairs(pairs, bucket_duration=bucket_duration)
        logger.info("ClientSideIndex.from_parquet: %d series from %s", len(index), path)
        return index

    @property
    def by_time_interval(self) -> Mapping[TimeInterval, tuple[Series, ...]]:
        """Read-only view: exact time bucket -> series in that bucket."""
        return self._by_time_interval

    @property
    def by_tag(self) -> Mapping[str, tuple[Series, ...]]:
        """Read-only view: tag token -> series carrying it."""
        return self._by_tag

    @property
    def series_ids(self) -> tuple[str, ...]:
        """Raw series ids, in input order."""
        return self._series_ids

    @property
    def series(self) -> SeriesSet:
        """All series as a fluent, immutable `SeriesSet`."""
        return SeriesSet(self._series)

    def copy_of_series_collection(self) -> list[Series]:
        """Return a new list of all series, in input order.

        The list may be altered freely. The `Series` objects inside are shared
        with the index and are immutable.
        """
        return list(self._series)

    def intervals_overlapping(self, query: TimeInterval) -> list[TimeInterval]:
        """Bucket keys of `by_time_interval` overlapping `query`, ordered by start."""
        q_start, q_end = query.epoch_micros()
        mask = (self._interval_starts < q_end) & (q_start < self._interval_ends)
        return [self._sorted_intervals[i] for i in np.flatnonzero(mask)]

    def candidates(
        self,
        *,
        measurement: str,
        field: str,
        time_interval: TimeInterval,
        tag_sets: Sequence[Iterable[str]] = (),
    ) -> list[Series]:
        """Series matching all four predicates, in input order.

        Args:
            measurement: Exact measurement name.
            field: Exact field name.
            time_interval: Query window; series buckets must overlap it.
            tag_sets: Tag groups, OR within a group and AND across groups.
        """
        groups = [tuple(g) for g in tag_sets]
        return [
            s
            for s in self._series
            if s.matches_time_interval(time_interval)
            and s.matches_measurement_name(measurement)
            and s.matches_field_name(field)
            and s.matches_tag_sets(groups)
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per series, in input order."""
        return series_to_dataframe(self._series)

    def __iter__(self) -> Iterator[Series]:
        return iter(self._series)

    def __len__(self) -> int:
        return len(self._series)

    def __repr__(self) -> str:
        return (
            f"ClientSideIndex({len(self._series)} series, "
            f"{len(self._by_time_interval)} buckets, {len(self._by_tag)} tags)"
        )
