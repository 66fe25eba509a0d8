"""Build a parquet snapshot of the client-side index from table listings.

Each table listing is the output of ``SELECT DISTINCT series_id FROM <table>``
saved as ``<listing-dir>/<table>.txt``. Every id is parsed and the full index
is built before anything is written, so a malformed id or an empty scan
aborts without leaving a partial snapshot behind.

Usage::

    python -m series_index.snapshot \\
      --listing-dir /path/to/listings \\
      --config /path/to/index.yaml \\
      --out /path/to/series.parquet
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from series_index.config import load_config
from series_index.errors import EmptyIndexError, MalformedSeriesIdError
from series_index.records.index import ClientSideIndex
from series_index.sources import ListingDirectorySource

logger = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build a client-side series index snapshot from table listings"
    )
    parser.add_argument(
        "--listing-dir",
        type=str,
        required=True,
        help="Directory of <table>.txt files, one series id per line",
    )
    parser.add_argument(
        "--out",
        type=str,
        required=True,
        help="Output parquet file",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Index config YAML (default: $SERIES_INDEX_CONFIG, then built-in defaults)",
    )
    parser.add_argument(
        "--table",
        type=str,
        action="append",
        dest="tables",
        default=None,
        help="Table to scan (can be specified multiple times; overrides the config)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = load_config(args.config)
    if args.tables:
        config = replace(config, tables=tuple(args.tables))

    source = ListingDirectorySource(Path(args.listing_dir))
    logger.info("Scanning %d tables under %s", len(config.tables), source.root)
    try:
        index = ClientSideIndex.from_source(source, config=config)
    except (MalformedSeriesIdError, EmptyIndexError) as exc:
        logger.error("Cannot build client-side index: %s", exc)
        raise SystemExit(1) from exc

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    df = index.to_dataframe()
    df.to_parquet(out, index=False)

    logger.info("Done. Wrote %s", out)
    logger.info("  series: %d", len(index))
    logger.info("  time buckets: %d", len(index.by_time_interval))
    logger.info("  tags: %d", len(index.by_tag))


if __name__ == "__main__":
    main()
