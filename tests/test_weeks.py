from datetime import date

import pytest

from stock_tracker.core.weeks import current_week, sunday_based_weekday, week_number


def test_sunday_based_weekday():
    assert sunday_based_weekday(date(2023, 1, 1)) == 0  # Sunday
    assert sunday_based_weekday(date(2024, 1, 1)) == 1  # Monday
    assert sunday_based_weekday(date(2022, 1, 1)) == 6  # Saturday


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2024, 1, 1), 1),
        (date(2024, 1, 6), 1),
        (date(2024, 1, 7), 2),   # weeks start on Sunday
        (date(2024, 12, 31), 53),
        (date(2023, 1, 1), 1),
        (date(2023, 1, 7), 1),
        (date(2023, 1, 8), 2),
        (date(2022, 1, 1), 1),   # a lone Saturday is week 1
        (date(2022, 1, 2), 2),
        (date(2022, 12, 31), 53),
        (date(2000, 12, 31), 54),
    ],
)
def test_week_number(day, expected):
    assert week_number(day) == expected


def test_current_week_uses_given_day():
    assert current_week(date(2024, 3, 15)) == (week_number(date(2024, 3, 15)), 2024)
    assert current_week(date(2024, 1, 7)) == (2, 2024)
