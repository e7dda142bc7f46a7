"""Merge the selected components of a phrase into one concrete event.

The resolver never raises: a phrase without any usable component still
resolves to an event starting at the reference instant. Deciding whether such
an event is acceptable is left to the validator and the caller.
"""

import re
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from . import WEEKDAY_CODES, next_weekday
from .config import get_testing_mode
from .logger import setup_logger
from .models import ComponentType, EventDescriptor, ParsedPhrase, Reminder
from .selection import rank

logger = setup_logger('resolver', testing=get_testing_mode())

_MINUTES = r'(?:mins?|minutes?)'
_HOURS = r'(?:hrs?|hours?)'

DURATION_PATTERNS = {
    'days': re.compile(r'\bfor\s+(\d+)\s+days?\b', re.IGNORECASE),
    'hours': re.compile(rf'(?<!\bin )\b(?:for\s+)?(\d+(?:\.\d+)?)\s*{_HOURS}\b', re.IGNORECASE),
    'minutes': re.compile(rf'(?<!\bin )\b(?:for\s+)?(\d+)\s*{_MINUTES}\b', re.IGNORECASE),
}

REMINDER_PATTERNS = [
    re.compile(rf'\b(?:(?:remind\s+me|rem|alert)\s+)?(\d+)\s*({_MINUTES}|{_HOURS})\s+before\b',
               re.IGNORECASE),
    re.compile(rf'\b(?:with\s+(?:an?\s+)?)?(\d+)\s*({_MINUTES}|{_HOURS})\s+(?:alert|reminder)\b',
               re.IGNORECASE),
]

Span = Tuple[int, int]

ISO_WEEKDAYS = {code: number for number, code in WEEKDAY_CODES.items()}


def _overlaps(span: Span, spans) -> bool:
    return any(span[0] < end and span[1] > start for start, end in spans)


def format_duration(minutes: int) -> Optional[str]:
    """Render a positive number of minutes as an ISO-8601 duration"""
    if minutes <= 0:
        return None
    hours, minutes = divmod(minutes, 60)
    return 'PT' + (f'{hours}H' if hours else '') + (f'{minutes}M' if minutes else '')


def parse_reminders(text: str, kind: str = 'DISPLAY') -> List[Tuple[Reminder, Span]]:
    """Find "N min before" style reminders, in order of appearance"""
    found = []
    for pattern in REMINDER_PATTERNS:
        for match in pattern.finditer(text):
            amount = int(match.group(1))
            if match.group(2).lower().startswith('h'):
                amount *= 60
            found.append((match.span(), amount))

    reminders = []
    taken = []
    for span, minutes in sorted(found):
        if minutes <= 0 or _overlaps(span, taken):
            continue
        taken.append(span)
        if any(r.minutes_before == minutes for r, _ in reminders):
            continue
        reminders.append((Reminder(minutes, kind), span))
    return reminders


def parse_duration(text: str, excluded=()) -> Optional[Tuple[str, Span]]:
    """Find the first duration phrase outside the excluded spans"""
    matches = []
    for unit, pattern in DURATION_PATTERNS.items():
        for match in pattern.finditer(text):
            if not _overlaps(match.span(), excluded):
                matches.append((match.start(), unit, match))
                break
    if not matches:
        return None

    _, unit, match = min(matches, key=lambda m: m[0])
    if unit == 'days':
        days = int(match.group(1))
        return (f'P{days}D', match.span()) if days > 0 else None
    if unit == 'hours':
        try:
            duration = format_duration(round(float(match.group(1)) * 60))
        except OverflowError:
            logger.debug(f"Ignored duration {match.group(0)!r}: too large")
            return None
    else:
        duration = format_duration(int(match.group(1)))
    return (duration, match.span()) if duration else None


def best_component(phrase: ParsedPhrase, type: ComponentType):
    """The highest ranked component of a type, or None"""
    ranked = rank(phrase.components_of(type))
    return ranked[0] if ranked else None


def resolve_date(phrase: ParsedPhrase):
    """Move the reference instant to the day the phrase names"""
    start = phrase.reference_instant
    date_component = best_component(phrase, ComponentType.DATE)
    weekday_component = best_component(phrase, ComponentType.WEEKDAY)
    recurrence_component = best_component(phrase, ComponentType.RECURRENCE)

    if date_component:
        value = date_component.value
        if value.date is not None:
            return start.replace(year=value.date.year, month=value.date.month, day=value.date.day)
        if value.day_offset:
            return start + relativedelta(days=value.day_offset)
    elif weekday_component:
        return next_weekday(start, weekday_component.value.iso_weekday)
    elif recurrence_component and recurrence_component.value.by_day:
        current = start.isoweekday()
        days_ahead = min((ISO_WEEKDAYS[code] - current) % 7
                         for code in recurrence_component.value.by_day)
        return start + relativedelta(days=days_ahead)
    return start


def resolve_start(phrase: ParsedPhrase):
    try:
        start = resolve_date(phrase)
    except (OverflowError, ValueError) as e:
        # Near the ends of the calendar the named day may not exist
        logger.debug(f"Kept reference date for {phrase.original_text!r}: {e}")
        start = phrase.reference_instant

    interval = best_component(phrase, ComponentType.INTERVAL)
    clock = None
    if interval:
        clock = interval.value.start
    else:
        time_component = (best_component(phrase, ComponentType.TIME)
                          or best_component(phrase, ComponentType.FUZZY_TIME))
        if time_component:
            clock = time_component.value
    if clock:
        start = start.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
    return start


def resolve_event(phrase: ParsedPhrase, reminder_kind: str = 'DISPLAY') -> EventDescriptor:
    """Resolve a parsed phrase into start, end or duration, recurrence and reminders"""
    start = resolve_start(phrase)

    end = duration = None
    interval = best_component(phrase, ComponentType.INTERVAL)
    reminders = parse_reminders(phrase.original_text, reminder_kind)
    if interval:
        end = start.replace(hour=interval.value.end.hour, minute=interval.value.end.minute,
                            second=0, microsecond=0)
    else:
        excluded = [span for _, span in reminders]
        excluded.extend((c.start, c.end) for c in phrase.components)
        found = parse_duration(phrase.original_text, excluded)
        if found:
            duration = found[0]

    recurrence = best_component(phrase, ComponentType.RECURRENCE)
    event = EventDescriptor(
        start=start,
        end=end,
        duration=duration,
        recurrence=recurrence.value if recurrence else None,
        reminders=tuple(r for r, _ in reminders),
    )
    logger.debug(f"Resolved {phrase.original_text!r} to {event}")
    return event
