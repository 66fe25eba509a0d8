"""Index and collection types over parsed series."""

from series_index.records.index import ClientSideIndex
from series_index.records.series_set import SeriesSet

__all__ = [
    "ClientSideIndex",
    "SeriesSet",
]
