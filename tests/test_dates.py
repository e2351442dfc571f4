from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from fx_ledger.utils.dates import (
    normalise_rate_date,
    to_rate_date,
    to_utc_datetime,
    utc_from_timestamp,
)


def test_to_rate_date_drops_time_of_day() -> None:
    assert to_rate_date(datetime(2024, 6, 1, 23, 59)) == date(2024, 6, 1)
    assert to_rate_date(date(2024, 6, 1)) == date(2024, 6, 1)


def test_aware_datetimes_are_truncated_in_utc() -> None:
    evening_new_york = datetime(2024, 6, 1, 21, 30, tzinfo=timezone(timedelta(hours=-5)))

    assert to_rate_date(evening_new_york) == date(2024, 6, 2)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-06-01", date(2024, 6, 1)),
        ("2024-06-01T10:15:00", date(2024, 6, 1)),
        ("2024-06-01T23:15:00-02:00", date(2024, 6, 2)),
    ],
)
def test_to_rate_date_parses_iso_strings(raw: str, expected: date) -> None:
    assert to_rate_date(raw) == expected


def test_to_rate_date_rejects_other_types() -> None:
    with pytest.raises(TypeError):
        to_rate_date(20240601)  # type: ignore[arg-type]


def test_to_utc_datetime_assumes_naive_values_are_utc() -> None:
    naive = datetime(2024, 6, 1, 12, 0)
    aware = to_utc_datetime(naive)

    assert aware.tzinfo is timezone.utc
    assert aware.hour == 12
    assert to_utc_datetime("2024-06-01 12:00:00.000000") == aware
    assert to_utc_datetime(datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))) == aware


def test_normalise_rate_date_handles_multiple_input_types() -> None:
    assert normalise_rate_date(date(2024, 5, 1)) == date(2024, 5, 1)
    assert normalise_rate_date(datetime(2024, 5, 2, 15, 0)) == date(2024, 5, 2)
    assert normalise_rate_date("2024-05-03") == date(2024, 5, 3)


def test_utc_from_timestamp_round_trips_epoch_seconds() -> None:
    stamp = 1_717_243_200.25
    assert utc_from_timestamp(stamp).timestamp() == stamp
