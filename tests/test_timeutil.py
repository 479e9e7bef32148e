from datetime import datetime, timezone

import pytest

from zaplog.timeutil import time_to_millis


@pytest.mark.parametrize(
    "seconds, stamp",
    [(0, 0), (1, 1000), (1.5, 1500)],
)
def test_time_to_millis(seconds, stamp):
    t = datetime.fromtimestamp(seconds, tz=timezone.utc)
    assert time_to_millis(t) == stamp


def test_time_to_millis_truncates_toward_zero():
    t = datetime(1969, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)
    assert time_to_millis(t) == 0
    t = datetime(1969, 12, 31, 23, 59, 59, 500000, tzinfo=timezone.utc)
    assert time_to_millis(t) == -500


def test_time_to_millis_naive_is_utc():
    assert time_to_millis(datetime(1970, 1, 1, 0, 0, 2)) == 2000