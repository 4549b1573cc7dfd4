"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple

from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Add calendar months, clamping to the last day of shorter months (Jan 31 + 1 -> Feb 28/29)"""
    return from_date + relativedelta(months=months)


def month_bounds(day: date) -> Tuple[date, date]:
    """First and last day of the month containing ``day``"""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def period_window(period: str, today: date) -> Tuple[date, date]:
    """
    Resolve an analytics period name to an inclusive date window.

    - current: this calendar month
    - last_month: the previous calendar month
    - last_3_months: from the first day three months back to the end of this month
    """
    if period == "last_month":
        return month_bounds(add_months(today, -1))
    if period == "last_3_months":
        start, _ = month_bounds(add_months(today, -3))
        _, end = month_bounds(today)
        return start, end
    return month_bounds(today)
