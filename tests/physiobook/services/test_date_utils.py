from datetime import date

import pytest

from physiobook.services.date_utils import (
    add_one_hour,
    calculate_date_for_day,
    generate_week_dates,
    get_day_of_week,
    is_afternoon,
    is_morning,
    normalize_time,
    time_to_minutes,
    validate_special_date,
)

WEDNESDAY = date(2026, 1, 7)


def test_generate_week_dates_starts_today_and_spans_seven_days() -> None:
    assert generate_week_dates(WEDNESDAY) == [
        '2026-01-07',
        '2026-01-08',
        '2026-01-09',
        '2026-01-10',
        '2026-01-11',
        '2026-01-12',
        '2026-01-13',
    ]


def test_generate_week_dates_crosses_month_and_year_boundaries() -> None:
    week = generate_week_dates(date(2025, 12, 29))

    assert week[0] == '2025-12-29'
    assert week[-1] == '2026-01-04'


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('2026-01-05', 'Monday'),
        ('2026-01-07', 'Wednesday'),
        ('2026-01-11', 'Sunday'),
        (date(2026, 1, 10), 'Saturday'),
    ],
)
def test_get_day_of_week(value, expected: str) -> None:
    assert get_day_of_week(value) == expected


@pytest.mark.parametrize(
    ('day_of_week', 'expected'),
    [
        ('Wednesday', '2026-01-07'),
        ('Thursday', '2026-01-08'),
        ('Sunday', '2026-01-11'),
        ('Monday', '2026-01-12'),
        ('Tuesday', '2026-01-13'),
    ],
)
def test_calculate_date_for_day_returns_next_occurrence_on_or_after_today(day_of_week: str, expected: str) -> None:
    assert calculate_date_for_day(day_of_week, WEDNESDAY) == expected


def test_calculate_date_for_day_rejects_unknown_name() -> None:
    with pytest.raises(ValueError):
        calculate_date_for_day('Funday', WEDNESDAY)


def test_validate_special_date_accepts_future_matching_weekday() -> None:
    assert validate_special_date('2026-01-12', 'Monday', WEDNESDAY) == '2026-01-12'
    assert validate_special_date(date(2026, 1, 7), 'Wednesday', WEDNESDAY) == '2026-01-07'


@pytest.mark.parametrize(
    ('special_date', 'day_of_week'),
    [
        ('2026-01-13', 'Monday'),
        ('2026-01-05', 'Monday'),
        ('not-a-date', 'Monday'),
        (None, 'Monday'),
    ],
)
def test_validate_special_date_returns_none_for_unusable_dates(special_date, day_of_week: str) -> None:
    assert validate_special_date(special_date, day_of_week, WEDNESDAY) is None


@pytest.mark.parametrize(
    ('time_value', 'morning', 'afternoon'),
    [
        ('05:59', False, False),
        ('06:00', True, False),
        ('11:59', True, False),
        ('12:00', False, True),
        ('17:00', False, True),
        ('18:00', False, False),
        ('23:00', False, False),
    ],
)
def test_time_buckets_are_half_open(time_value: str, morning: bool, afternoon: bool) -> None:
    assert is_morning(time_value) is morning
    assert is_afternoon(time_value) is afternoon


def test_add_one_hour_pads_and_does_not_roll_over() -> None:
    assert add_one_hour('09:00') == '10:00'
    assert add_one_hour('09:30') == '10:30'
    assert add_one_hour('23:30') == '24:30'


def test_normalize_time_pads_single_digit_hours() -> None:
    assert normalize_time('9:00') == '09:00'
    assert time_to_minutes('24:30') == 1470


@pytest.mark.parametrize('time_value', ['24:00', '9', '09:60', 'ab:cd', '09:5'])
def test_normalize_time_rejects_invalid_values(time_value: str) -> None:
    with pytest.raises(ValueError):
        normalize_time(time_value)
