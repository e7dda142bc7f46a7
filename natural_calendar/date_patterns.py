import re
from datetime import date

from dateutil.relativedelta import relativedelta

from . import MONTH_NAMES, WEEKDAY_NAMES, month_number, next_weekday, weekday_number
from .models import ComponentType, DateValue, MonthValue, Pattern, WeekdayValue


def _reachable(reference, days):
    """True when reference shifted by days is still a representable date"""
    try:
        reference + relativedelta(days=days)
    except (OverflowError, ValueError):
        return False
    return True


def _offset(pattern, match, days, **metadata):
    return pattern.component(match, ComponentType.DATE, DateValue(day_offset=days),
                             relative=True, **metadata)


def _weekday(pattern, match, context):
    name = match.group(1).lower()
    return pattern.component(match, ComponentType.WEEKDAY,
                             WeekdayValue(weekday_number(name), name[:3]), relative=True)


def _today(pattern, match, context):
    return _offset(pattern, match, 0)


def _tomorrow(pattern, match, context):
    return _offset(pattern, match, 1)


def _in_days(pattern, match, context):
    amount = int(match.group(1))
    days = amount * 7 if match.group(2).lower() == 'week' else amount
    if not _reachable(context.reference_instant, days):
        return None
    return _offset(pattern, match, days)


def _next_week(pattern, match, context):
    return _offset(pattern, match, 7)


def _next_weekday(pattern, match, context):
    iso_weekday = weekday_number(match.group(1))
    try:
        target = next_weekday(context.reference_instant.date(), iso_weekday)
    except (OverflowError, ValueError):
        return None
    return pattern.component(match, ComponentType.DATE, DateValue(date=target),
                             relative=True, next=True, weekday=iso_weekday)


def _month(pattern, match, context):
    name = match.group(1).lower()
    return pattern.component(match, ComponentType.MONTH, MonthValue(month_number(name), name[:3]))


def _calendar_date(pattern, match, year, month, day, **metadata):
    try:
        target = date(year, month, day)
    except ValueError:
        return None
    return pattern.component(match, ComponentType.DATE, DateValue(date=target), **metadata)


def _month_day(pattern, match, context):
    explicit = match.group(3) or match.group(4)
    year = int(explicit) if explicit else context.reference_instant.year
    return _calendar_date(pattern, match, year, month_number(match.group(1)),
                          int(match.group(2)), format='month_day')


def _numeric_date(pattern, match, context):
    year = context.reference_instant.year
    if match.group(3):
        year = int(match.group(3))
        if year < 100:
            year += 2000
    return _calendar_date(pattern, match, year, int(match.group(1)),
                          int(match.group(2)), format='numeric')


DATE_PATTERNS = [
    Pattern(
        name="Weekday names",
        regex=re.compile(rf"\b({WEEKDAY_NAMES})\b", re.IGNORECASE),
        confidence=0.9,
        priority=2,
        build=_weekday,
    ),
    Pattern(
        name="Relative dates - today",
        regex=re.compile(r"\btoday\b", re.IGNORECASE),
        confidence=0.95,
        priority=5,
        build=_today,
    ),
    Pattern(
        name="Relative dates - tomorrow",
        regex=re.compile(r"\b(tomorrow|tom|tmr|tmrw)\b", re.IGNORECASE),
        confidence=0.95,
        priority=5,
        build=_tomorrow,
    ),
    Pattern(
        name="Relative dates - in X days",
        regex=re.compile(r"\bin\s+(\d+)\s+(day|week)s?\b", re.IGNORECASE),
        confidence=0.9,
        priority=6,
        build=_in_days,
    ),
    Pattern(
        name="Next week",
        regex=re.compile(r"\bnext\s+week\b", re.IGNORECASE),
        confidence=0.85,
        priority=6,
        build=_next_week,
    ),
    Pattern(
        name="Next weekday",
        regex=re.compile(rf"\bnext\s+({WEEKDAY_NAMES})\b", re.IGNORECASE),
        confidence=0.9,
        priority=6,
        build=_next_weekday,
    ),
    Pattern(
        name="Month names",
        regex=re.compile(rf"\b({MONTH_NAMES})\b", re.IGNORECASE),
        confidence=0.9,
        priority=2,
        build=_month,
    ),
    Pattern(
        name="Date with month and day",
        regex=re.compile(rf"\b({MONTH_NAMES})\s+(\d{{1,2}})(?:st|nd|rd|th)?"
                         # A bare year needs a comma or a 19xx/20xx shape, "jan 20 1530" is a time
                         r"(?:,\s*(\d{4})|\s+((?:19|20)\d{2}))?\b",
                         re.IGNORECASE),
        confidence=0.85,
        priority=6,
        build=_month_day,
    ),
    Pattern(
        name="Numeric month/day",
        regex=re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b"),
        confidence=0.8,
        priority=6,
        build=_numeric_date,
    ),
]
