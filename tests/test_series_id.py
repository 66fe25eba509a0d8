from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from series_index.errors import MalformedSeriesIdError
from series_index.intervals import BUCKET_DURATION, TimeInterval
from series_index.raw.series_id import parse_series_id, parse_series_ids


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_parse_series_id() -> None:
    s = parse_series_id(
        "series_double",
        "cpu,hostname=host_0,region=eu-central-1#usage_idle#2016-01-01",
    )
    assert s.table == "series_double"
    assert s.series_id == "cpu,hostname=host_0,region=eu-central-1#usage_idle#2016-01-01"
    assert s.measurement == "cpu"
    assert s.tags == frozenset({"hostname=host_0", "region=eu-central-1"})
    assert s.field == "usage_idle"
    assert s.time_interval.start == _utc(2016, 1, 1)
    assert s.time_interval.end == _utc(2016, 1, 2)
    assert s.time_interval.duration == BUCKET_DURATION


def test_parse_series_id_without_tags() -> None:
    s = parse_series_id("series_bigint", "disk#free#2016-01-03")
    assert s.measurement == "disk"
    assert s.tags == frozenset()
    assert s.field == "free"


def test_parse_series_id_custom_bucket() -> None:
    s = parse_series_id("t", "cpu#usage_idle#2016-01-01", bucket_duration=timedelta(hours=6))
    assert s.time_interval == TimeInterval(_utc(2016, 1, 1), _utc(2016, 1, 1, 6))


def test_parse_series_id_is_value_object() -> None:
    a = parse_series_id("t", "cpu,hostname=a#f#2016-01-01")
    b = parse_series_id("t", "cpu,hostname=a#f#2016-01-01")
    assert a == b
    assert hash(a) == hash(b)
    with pytest.raises(AttributeError):
        a.field = "g"  # type: ignore[misc]


def test_parse_series_id_duplicate_tag() -> None:
    with pytest.raises(MalformedSeriesIdError, match="Duplicate tag"):
        parse_series_id("t", "cpu,hostname=a,hostname=a#f#2016-01-01")


@pytest.mark.parametrize(
    "series_id",
    [
        "cpu,hostname=a#2016-01-01",
        "cpu,hostname=a",
        "cpu#f#2016-01-01#extra",
        "",
    ],
)
def test_parse_series_id_wrong_section_count(series_id: str) -> None:
    with pytest.raises(MalformedSeriesIdError, match="3 '#'-separated sections"):
        parse_series_id("t", series_id)


@pytest.mark.parametrize("day", ["2016-1-1", "2016/01/01", "20160101", "2016-02-30", ""])
def test_parse_series_id_bad_date(day: str) -> None:
    with pytest.raises(MalformedSeriesIdError, match="Bad time bucket"):
        parse_series_id("t", f"cpu#f#{day}")


def test_parse_series_id_bucket_out_of_range() -> None:
    with pytest.raises(MalformedSeriesIdError, match="out of range") as exc_info:
        parse_series_id("series_double", "cpu#usage_idle#9999-12-31")
    assert exc_info.value.table == "series_double"
    assert isinstance(exc_info.value.__cause__, OverflowError)


def test_malformed_error_carries_context() -> None:
    with pytest.raises(MalformedSeriesIdError) as exc_info:
        parse_series_id("series_blob", "broken")
    assert exc_info.value.series_id == "broken"
    assert exc_info.value.table == "series_blob"
    assert isinstance(exc_info.value, ValueError)


def test_parse_series_ids_preserves_order(sample_pairs: list[tuple[str, str]]) -> None:
    parsed = parse_series_ids(sample_pairs)
    assert [s.series_id for s in parsed] == [sid for _, sid in sample_pairs]


def test_matches_time_interval() -> None:
    s = parse_series_id("t", "cpu#f#2016-01-01")
    assert s.matches_time_interval(TimeInterval(_utc(2015, 12, 31, 23), _utc(2016, 1, 1, 1)))
    assert s.matches_time_interval(TimeInterval.bucket(date(2016, 1, 1)))
    # Touching boundaries on either side do not overlap.
    assert not s.matches_time_interval(TimeInterval.bucket(date(2016, 1, 2)))
    assert not s.matches_time_interval(TimeInterval.bucket(date(2015, 12, 31)))


def test_matches_names() -> None:
    s = parse_series_id("t", "cpu,hostname=a#usage_idle#2016-01-01")
    assert s.matches_measurement_name("cpu")
    assert not s.matches_measurement_name("cp")
    assert s.matches_field_name("usage_idle")
    assert not s.matches_field_name("usage_user")


def test_matches_tag_sets() -> None:
    s = parse_series_id("t", "cpu,hostname=host_0,region=eu-central-1#usage_idle#2016-01-01")
    groups = [["hostname=host_0", "hostname=host_1"], ["region=eu-central-1"]]
    assert s.matches_tag_sets(groups)
    assert s.matches_tag_sets([])

    other_region = parse_series_id(
        "t", "cpu,hostname=host_1,region=us-west-1#usage_idle#2016-01-01"
    )
    assert not other_region.matches_tag_sets(groups)

    other_host = parse_series_id(
        "t", "cpu,hostname=host_2,region=eu-central-1#usage_idle#2016-01-01"
    )
    assert not other_host.matches_tag_sets(groups)

    untagged = parse_series_id("t", "cpu#usage_idle#2016-01-01")
    assert untagged.matches_tag_sets([])
    assert not untagged.matches_tag_sets([[]])
