from datetime import date, time

import pytest

from clinic.scheduling.timeutils import (
    add_minutes,
    format_wall_clock,
    iterate_dates,
    minutes_between,
    parse_calendar_date,
    parse_wall_clock,
)


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('09:00', time(9, 0)),
        ('9:5', time(9, 5)),
        (' 14:30:00 ', time(14, 30)),
        (time(8, 15, 30), time(8, 15)),
    ],
)
def test_parse_wall_clock_pads_loose_values(value, expected) -> None:
    assert parse_wall_clock(value) == expected


def test_parse_wall_clock_strict_rejects_unpadded_values() -> None:
    assert parse_wall_clock('09:05', strict=True) == time(9, 5)

    with pytest.raises(ValueError):
        parse_wall_clock('9:05', strict=True)


@pytest.mark.parametrize('value', ['24:00', '12:60', 'noon', '', '12'])
def test_parse_wall_clock_rejects_out_of_range_or_garbage(value: str) -> None:
    with pytest.raises(ValueError):
        parse_wall_clock(value)


def test_add_minutes_crosses_hours() -> None:
    assert add_minutes(time(9, 30), 45) == time(10, 15)


def test_add_minutes_refuses_to_roll_past_midnight() -> None:
    with pytest.raises(ValueError):
        add_minutes(time(23, 45), 30)


def test_minutes_between_and_format() -> None:
    assert minutes_between(time(8, 0), time(12, 0)) == 240
    assert format_wall_clock(time(7, 5)) == '07:05'


def test_parse_calendar_date_accepts_iso_strings() -> None:
    assert parse_calendar_date('2024-01-01') == date(2024, 1, 1)
    assert parse_calendar_date('2024-01-01T10:00:00') == date(2024, 1, 1)


def test_iterate_dates_is_inclusive() -> None:
    assert list(iterate_dates(date(2024, 1, 30), date(2024, 2, 1))) == [
        date(2024, 1, 30),
        date(2024, 1, 31),
        date(2024, 2, 1),
    ]
