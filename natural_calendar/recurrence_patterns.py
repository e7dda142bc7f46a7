import re
from datetime import datetime

from dateutil import parser

from . import MONTH_NAMES, WEEKDAY_CODES, WEEKDAY_NAMES, weekday_number
from .models import ComponentType, Pattern, RecurrenceRule

# Optional end condition: "until 12/31", "until jan 15", "10 times"
END_CONDITION = (rf"(?:\s+until\s+(?P<until>\d{{1,2}}/\d{{1,2}}(?:/\d{{2,4}})?"
                 rf"|(?:{MONTH_NAMES})\s+\d{{1,2}}(?:st|nd|rd|th)?)"
                 r"|\s+(?:for\s+)?(?P<count>\d+)\s+times)?")

_DAY_LIST_SEPARATOR = r"(?:\s*[,&]\s*|\s+and\s+)"

FREQUENCY_WORDS = {
    'daily': 'DAILY', 'day': 'DAILY',
    'weekly': 'WEEKLY', 'week': 'WEEKLY',
    'monthly': 'MONTHLY', 'month': 'MONTHLY',
    'yearly': 'YEARLY', 'annually': 'YEARLY', 'year': 'YEARLY',
}

WORKWEEK = ('MO', 'TU', 'WE', 'TH', 'FR')


def _day_code(name):
    return WEEKDAY_CODES[weekday_number(name)]


def _parse_until(text, reference):
    try:
        until = parser.parse(text, default=datetime(reference.year, 1, 1)).date()
        if until < reference.date() and text.count('/') < 2:
            # No explicit year and already past: the user means the next one
            until = until.replace(year=until.year + 1)
    except (ValueError, OverflowError):
        return None
    return until


def _rule(pattern, match, context, frequency, interval=1, by_day=()):
    """Build a RECURRENCE component, reading the optional end condition"""
    if interval < 1:
        return None
    until = count = None
    if match.group('until'):
        until = _parse_until(match.group('until'), context.reference_instant)
        if until is None:
            return None
    if match.group('count'):
        count = int(match.group('count'))
        if count < 1:
            return None
    rule = RecurrenceRule(frequency, interval, tuple(by_day), until, count)
    return pattern.component(match, ComponentType.RECURRENCE, rule)


def _every_weekday(pattern, match, context):
    return _rule(pattern, match, context, 'WEEKLY', by_day=[_day_code(match.group('day'))])


def _every_other(pattern, match, context):
    return _rule(pattern, match, context, 'WEEKLY', interval=2,
                 by_day=[_day_code(match.group('day'))])


def _every_n(pattern, match, context):
    frequency = FREQUENCY_WORDS[match.group('unit').lower()]
    return _rule(pattern, match, context, frequency, interval=int(match.group('n')))


def _workweek(pattern, match, context):
    return _rule(pattern, match, context, 'WEEKLY', by_day=WORKWEEK)


def _frequency(pattern, match, context):
    word = match.group('freq').lower().split()[-1]
    return _rule(pattern, match, context, FREQUENCY_WORDS[word])


def _weekday_list(pattern, match, context):
    codes = []
    for name in re.findall(WEEKDAY_NAMES, match.group('days'), re.IGNORECASE):
        code = _day_code(name)
        if code not in codes:
            codes.append(code)
    return _rule(pattern, match, context, 'WEEKLY', by_day=codes)


RECURRENCE_PATTERNS = [
    Pattern(
        name="every_weekday",
        regex=re.compile(rf"\bevery\s+(?P<day>{WEEKDAY_NAMES})\b{END_CONDITION}", re.IGNORECASE),
        confidence=0.9,
        priority=7,
        build=_every_weekday,
    ),
    Pattern(
        name="every_other",
        regex=re.compile(rf"\bevery\s+other\s+(?P<day>{WEEKDAY_NAMES})\b{END_CONDITION}",
                         re.IGNORECASE),
        confidence=0.9,
        priority=8,
        build=_every_other,
    ),
    Pattern(
        name="every_n_units",
        regex=re.compile(rf"\bevery\s+(?P<n>\d+)\s+(?P<unit>day|week|month|year)s?\b{END_CONDITION}",
                         re.IGNORECASE),
        confidence=0.9,
        priority=8,
        build=_every_n,
    ),
    Pattern(
        name="workweek",
        regex=re.compile(rf"\bevery\s+weekday\b{END_CONDITION}", re.IGNORECASE),
        confidence=0.9,
        priority=7,
        build=_workweek,
    ),
    Pattern(
        name="frequency",
        regex=re.compile(r"\b(?P<freq>daily|weekly|monthly|yearly|annually|every\s+(?:day|week|month|year))\b"
                         rf"{END_CONDITION}", re.IGNORECASE),
        confidence=0.95,
        priority=7,
        build=_frequency,
    ),
    Pattern(
        name="multiple_weekdays",
        regex=re.compile(rf"\b(?:every\s+)?(?P<days>(?:{WEEKDAY_NAMES})"
                         rf"(?:{_DAY_LIST_SEPARATOR}(?:{WEEKDAY_NAMES}))+)\b{END_CONDITION}",
                         re.IGNORECASE),
        confidence=0.8,
        priority=9,
        build=_weekday_list,
    ),
]
