from __future__ import annotations

import pytest

SAMPLE_PAIRS = [
    ("series_double", "cpu,hostname=host_0,region=eu-central-1#usage_idle#2016-01-01"),
    ("series_double", "cpu,hostname=host_1,region=eu-central-1#usage_idle#2016-01-02"),
    ("series_double", "cpu,hostname=host_2,region=us-west-1#usage_user#2016-01-02"),
    ("series_bigint", "mem,hostname=host_0,region=eu-central-1#available#2016-01-01"),
    ("series_bigint", "disk#free#2016-01-03"),
]


@pytest.fixture
def sample_pairs() -> list[tuple[str, str]]:
    return list(SAMPLE_PAIRS)
