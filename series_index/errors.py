"""Exceptions raised while parsing series ids and building the index."""

from __future__ import annotations


class MalformedSeriesIdError(ValueError):
    """A stored series id does not follow `<measurement>(,<tag>)*#<field>#<YYYY-MM-DD>`.

    Attributes:
        series_id: The offending raw identifier.
        table: Table the identifier was read from.
    """

    def __init__(self, message: str, *, series_id: str, table: str) -> None:
        super().__init__(f"{message}: series_id={series_id!r} table={table!r}")
        self.series_id = series_id
        self.table = table


class EmptyIndexError(ValueError):
    """Index construction was handed no series."""
