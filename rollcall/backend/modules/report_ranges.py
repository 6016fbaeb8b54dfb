# rollcall/backend/modules/report_ranges.py

import calendar
from datetime import date, timedelta
from typing import Literal, Optional, Tuple

ReportType = Literal["daily", "weekly", "monthly", "custom"]


def week_bounds(today: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `today`."""
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(today: date) -> Tuple[date, date]:
    """First and last day of the month containing `today`."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def resolve_report_range(report_type: ReportType, today: date, date_from: Optional[date] = None, date_to: Optional[date] = None) -> Tuple[date, date]:
    """
    Turns a report type into an inclusive (date_from, date_to) range.

    'daily', 'weekly' and 'monthly' ignore the explicit dates and are computed
    from `today`. 'custom' uses the given dates, each defaulting to `today`.

    Raises:
        ValueError: if the resolved range is inverted or the type is unknown.
    """
    if report_type == "daily":
        start, end = today, today
    elif report_type == "weekly":
        start, end = week_bounds(today)
    elif report_type == "monthly":
        start, end = month_bounds(today)
    elif report_type == "custom":
        start, end = date_from or today, date_to or today
    else:
        raise ValueError(f"Unknown report type: {report_type}")

    if start > end:
        raise ValueError("date_from must not be after date_to.")
    return start, end
