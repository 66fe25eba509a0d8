"""Index configuration: which tables to scan and how long a time bucket is."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from series_index.intervals import BUCKET_DURATION

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SERIES_INDEX_CONFIG"

DEFAULT_TABLES = (
    "series_bigint",
    "series_float",
    "series_double",
    "series_boolean",
    "series_blob",
)


@dataclass(frozen=True)
class IndexConfig:
    """Settings for building a client-side index.

    Attributes:
        tables: Tables scanned for series ids, in scan order.
        bucket_duration: Length of the time bucket each series id covers.
    """

    tables: tuple[str, ...] = DEFAULT_TABLES
    bucket_duration: timedelta = BUCKET_DURATION

    @classmethod
    def from_mapping(cls, raw: dict[str, Any], *, origin: str = "<mapping>") -> IndexConfig:
        """Build a config from a parsed YAML mapping.

        Recognized keys are `tables` (list of table names) and
        `bucket_duration_hours` (positive number). Missing keys keep defaults.
        """
        unknown = set(raw) - {"tables", "bucket_duration_hours"}
        if unknown:
            raise ValueError(f"Unknown keys {sorted(unknown)} in index config: {origin}")

        tables = DEFAULT_TABLES
        if "tables" in raw:
            tables_raw = raw["tables"]
            if (
                not isinstance(tables_raw, list)
                or not tables_raw
                or not all(isinstance(t, str) and t for t in tables_raw)
            ):
                raise ValueError(f"'tables' must be a non-empty list of names in {origin}")
            tables = tuple(tables_raw)

        bucket_duration = BUCKET_DURATION
        if "bucket_duration_hours" in raw:
            hours = raw["bucket_duration_hours"]
            message = f"'bucket_duration_hours' must be a finite positive number in {origin}"
            if isinstance(hours, bool) or not isinstance(hours, (int, float)):
                raise ValueError(message)
            try:
                if not math.isfinite(hours) or hours <= 0:
                    raise ValueError(message)
                bucket_duration = timedelta(hours=hours)
            except OverflowError as exc:
                raise ValueError(message) from exc

        return cls(tables=tables, bucket_duration=bucket_duration)


@lru_cache(maxsize=32)
def _load_yaml_cached(path_raw: str) -> dict[str, Any]:
    raw = yaml.safe_load(Path(path_raw).read_text())
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid index config (not object): {path_raw}")
    return raw


def load_config(path: str | Path | None = None) -> IndexConfig:
    """Load index settings from YAML.

    Args:
        path: YAML file to read. Falls back to the `SERIES_INDEX_CONFIG`
            environment variable, then to built-in defaults.
    """
    if path is None:
        env = os.environ.get(CONFIG_ENV_VAR)
        if not env:
            logger.debug("No index config given; using defaults")
            return IndexConfig()
        path = env
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Index config does not exist: {p}")
    config = IndexConfig.from_mapping(dict(_load_yaml_cached(str(p.resolve()))), origin=str(p))
    logger.info(
        "Loaded index config from %s: %d tables, bucket=%s",
        p,
        len(config.tables),
        config.bucket_duration,
    )
    return config
