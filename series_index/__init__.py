"""Client-side series index for wide-row time-series stores."""

from series_index.config import IndexConfig, load_config
from series_index.errors import EmptyIndexError, MalformedSeriesIdError
from series_index.intervals import BUCKET_DURATION, TimeInterval
from series_index.raw.series_id import Series, parse_series_id
from series_index.records.index import ClientSideIndex
from series_index.records.series_set import SeriesSet
from series_index.sources import ListingDirectorySource, fetch_series_collection

__all__ = [
    "BUCKET_DURATION",
    "ClientSideIndex",
    "EmptyIndexError",
    "IndexConfig",
    "ListingDirectorySource",
    "MalformedSeriesIdError",
    "Series",
    "SeriesSet",
    "TimeInterval",
    "fetch_series_collection",
    "load_config",
    "parse_series_id",
]

__version__ = "0.1.0"
