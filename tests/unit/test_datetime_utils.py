from datetime import datetime, timedelta, timezone

from src.at_common.datetime_utils import ensure_utc, seconds_until, to_epoch_ms
from tests.unit.fakes import T0


def test_naive_is_read_as_utc() -> None:
    assert ensure_utc(datetime(2026, 3, 1, 12, 0)) == T0


def test_aware_is_converted_to_utc() -> None:
    cet = timezone(timedelta(hours=1))
    converted = ensure_utc(datetime(2026, 3, 1, 13, 0, tzinfo=cet))
    assert converted == T0
    assert converted.utcoffset() == timedelta(0)


def test_epoch_ms() -> None:
    assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000


def test_seconds_until_rounds_up() -> None:
    assert seconds_until(to_epoch_ms(T0) + 1, T0) == 1
    assert seconds_until(to_epoch_ms(T0) + 60_000, T0) == 60


def test_seconds_until_past_is_zero() -> None:
    assert seconds_until(to_epoch_ms(T0) - 5_000, T0) == 0
