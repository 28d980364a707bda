# leasing/schedule.py
"""
Due-date arithmetic for payment schedules.

Cursors are always computed from the lease start date (start + k * step)
so a lease starting on the 31st does not drift to the 28th after February.
The payment day is clamped to the last day of the cursor's month; a due
date never rolls over into the following month.
"""
from __future__ import annotations

import calendar
from datetime import date

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidFrequency

FREQUENCY_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "semi_annually": 6,
    "yearly": 12,
}


def step_months(frequency: str) -> int:
    try:
        return FREQUENCY_MONTHS[frequency]
    except KeyError:
        raise InvalidFrequency(f"Unknown payment frequency: {frequency!r}") from None


def clamp_day(value: date, day: int) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=min(day, last_day))


def schedule_end(start: date, end: date | None) -> date:
    # Open-ended leases are scheduled one year ahead.
    return end if end is not None else start + relativedelta(years=1)


def due_dates(start: date, end: date | None, frequency: str, payment_day: int) -> list[date]:
    months = step_months(frequency)
    last = schedule_end(start, end)

    dates = []
    k = 0
    cursor = start
    while cursor <= last:
        dates.append(clamp_day(cursor, payment_day))
        k += 1
        cursor = start + relativedelta(months=months * k)
    return dates
