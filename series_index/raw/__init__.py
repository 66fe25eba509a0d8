"""Raw series id parsers."""

from series_index.raw.series_id import Series, parse_series_id, parse_series_ids

__all__ = [
    "Series",
    "parse_series_id",
    "parse_series_ids",
]
