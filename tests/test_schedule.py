from datetime import date

import pytest

from leasing.exceptions import InvalidFrequency
from leasing.schedule import clamp_day, due_dates, schedule_end, step_months


# ---------- stepping ----------

def test_monthly_schedule_covers_both_ends():
    dates = due_dates(date(2024, 1, 1), date(2024, 6, 1), "monthly", 1)
    assert dates == [date(2024, m, 1) for m in range(1, 7)]


def test_quarterly_schedule():
    dates = due_dates(date(2024, 1, 1), date(2024, 12, 31), "quarterly", 5)
    assert dates == [date(2024, 1, 5), date(2024, 4, 5), date(2024, 7, 5), date(2024, 10, 5)]


def test_semi_annual_schedule():
    dates = due_dates(date(2024, 1, 1), date(2025, 1, 1), "semi_annually", 1)
    assert dates == [date(2024, 1, 1), date(2024, 7, 1), date(2025, 1, 1)]


def test_yearly_schedule():
    dates = due_dates(date(2024, 3, 1), date(2026, 2, 28), "yearly", 10)
    assert dates == [date(2024, 3, 10), date(2025, 3, 10)]


def test_open_ended_lease_is_scheduled_one_year_ahead():
    assert schedule_end(date(2024, 1, 1), None) == date(2025, 1, 1)
    dates = due_dates(date(2024, 1, 1), None, "monthly", 1)
    assert len(dates) == 13
    assert dates[-1] == date(2025, 1, 1)


def test_end_before_start_yields_nothing():
    assert due_dates(date(2024, 5, 1), date(2024, 4, 1), "monthly", 1) == []


def test_unknown_frequency():
    with pytest.raises(InvalidFrequency):
        step_months("fortnightly")
    with pytest.raises(InvalidFrequency):
        due_dates(date(2024, 1, 1), date(2024, 6, 1), "weekly", 1)


# ---------- clamping ----------

def test_clamp_day_to_end_of_month():
    assert clamp_day(date(2023, 2, 1), 28) == date(2023, 2, 28)
    assert clamp_day(date(2024, 2, 10), 31) == date(2024, 2, 29)
    assert clamp_day(date(2024, 4, 10), 31) == date(2024, 4, 30)


def test_cursor_does_not_drift_after_short_months():
    dates = due_dates(date(2024, 1, 31), date(2024, 5, 31), "monthly", 28)
    assert [d.month for d in dates] == [1, 2, 3, 4, 5]
    assert all(d.day == 28 for d in dates)
