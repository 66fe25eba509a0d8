"""Series id sources standing in for the store's `SELECT DISTINCT series_id` scan."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Protocol

from series_index.intervals import BUCKET_DURATION
from series_index.raw.series_id import Series, parse_series_id

logger = logging.getLogger(__name__)


class SeriesSource(Protocol):
    """Common interface for anything that can enumerate stored series ids."""

    def series_ids(self, table: str) -> Iterator[str]:
        """Yield the distinct series ids stored in `table`."""
        ...


@dataclass(frozen=True)
class ListingDirectorySource:
    """Directory holding one `<table>.txt` listing per table.

    Each listing has one series id per line, as dumped by
    `SELECT DISTINCT series_id FROM <table>`. Blank lines are ignored and
    repeated ids are yielded once.
    """

    root: Path
    suffix: str = ".txt"

    def series_ids(self, table: str) -> Iterator[str]:
        root = Path(self.root)
        if not root.is_dir():
            raise FileNotFoundError(f"Listing directory does not exist: {root}")
        listing = root / f"{table}{self.suffix}"
        if not listing.is_file():
            logger.warning("No listing for table %s under %s", table, root)
            return iter(())
        lines = (line.strip() for line in listing.read_text(encoding="utf-8").splitlines())
        return iter(dict.fromkeys(line for line in lines if line))


def fetch_series_collection(
    source: SeriesSource,
    tables: Iterable[str],
    *,
    bucket_duration: timedelta = BUCKET_DURATION,
) -> list[Series]:
    """Parse every series id of every table, one pass per table in order.

    Raises:
        MalformedSeriesIdError: On the first id that does not parse.
    """
    collection: list[Series] = []
    for table in tables:
        before = len(collection)
        for series_id in source.series_ids(table):
            collection.append(parse_series_id(table, series_id, bucket_duration=bucket_duration))
        logger.debug("Fetched %d series from %s", len(collection) - before, table)
    logger.info("Fetched %d series in total", len(collection))
    return collection
