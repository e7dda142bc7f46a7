import re
from datetime import datetime, timedelta
from itertools import islice
from typing import List, Optional, Tuple

from .config import get_testing_mode
from .logger import setup_logger
from .models import EventDescriptor, ParsedPhrase
from .resolver import parse_duration, parse_reminders

logger = setup_logger('preview', testing=get_testing_mode())

LOCATION_PREFIX = re.compile(r'(?:(?<=\s)|^)(at|in)\s+|@\s*', re.IGNORECASE)
LOCATION_FALLBACKS = [
    re.compile(r'\broom\s+\d+\b', re.IGNORECASE),
    re.compile(r'\b(?:office|home)\b', re.IGNORECASE),
]
LOCATION_STOP = re.compile(r'[,;\n]')

# Connectives left behind once the temporal words are gone
FILLER_WORDS = {'at', 'on', 'in', 'from', 'to', 'for', 'this', 'and', '&', '@', 'with'}

DAY_NAMES = {
    'MO': 'Monday', 'TU': 'Tuesday', 'WE': 'Wednesday', 'TH': 'Thursday',
    'FR': 'Friday', 'SA': 'Saturday', 'SU': 'Sunday'
}


def _scraped_spans(phrase: ParsedPhrase) -> List[Tuple[int, int]]:
    """Spans already claimed by components, reminders and the duration phrase"""
    spans = [(c.start, c.end) for c in phrase.components]
    spans.extend(span for _, span in parse_reminders(phrase.original_text))
    duration = parse_duration(phrase.original_text, spans)
    if duration:
        spans.append(duration[1])
    return spans


def _inside(position, spans):
    return any(start <= position < end for start, end in spans)


def _trim_location(text):
    words = text.strip(' ,.').split()
    while words and words[-1].lower() in FILLER_WORDS:
        words.pop()
    return ' '.join(words)


def find_location(phrase: ParsedPhrase) -> Optional[Tuple[str, Tuple[int, int]]]:
    """Location text and the span it occupies, including its "at"/"in"/"@" prefix"""
    text = phrase.original_text
    claimed = _scraped_spans(phrase)

    for match in LOCATION_PREFIX.finditer(text):
        begin = match.end()
        if begin >= len(text) or _inside(match.start(), claimed) or _inside(begin, claimed):
            continue
        if match.group(1) and text[begin].isdigit():
            continue
        end = len(text)
        stop = LOCATION_STOP.search(text, begin)
        if stop:
            end = stop.start()
        end = min([end] + [start for start, _ in claimed if start > begin])
        location = _trim_location(text[begin:end])
        if location:
            return location, (match.start(), begin + len(text[begin:end].rstrip()))

    for pattern in LOCATION_FALLBACKS:
        match = pattern.search(text)
        if match and not _inside(match.start(), claimed):
            return match.group(0), match.span()
    return None


def extract_location(phrase: ParsedPhrase) -> Optional[str]:
    found = find_location(phrase)
    return found[0] if found else None


def extract_summary(phrase: ParsedPhrase) -> Optional[str]:
    """Words not covered by any component, location, reminder or duration"""
    spans = _scraped_spans(phrase)
    location = find_location(phrase)
    if location:
        spans.append(location[1])

    words = []
    for match in re.finditer(r'\S+', phrase.original_text):
        if any(match.start() < end and match.end() > start for start, end in spans):
            continue
        word = match.group(0).strip(',;')
        if word and word.lower() not in FILLER_WORDS:
            words.append(word)
    return ' '.join(words) if words else None


def format_time(moment: datetime) -> str:
    return moment.strftime('%-I:%M %p')


def _day_list(codes):
    names = [DAY_NAMES[code] for code in codes]
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


def describe_recurrence(event: EventDescriptor) -> str:
    rule = event.recurrence
    every = 'Every other' if rule.interval == 2 else 'Every'
    if rule.interval > 2:
        every = f'Every {rule.interval}'
    if rule.by_day:
        text = f"{every} {_day_list(rule.by_day)}"
    else:
        unit = {'DAILY': 'day', 'WEEKLY': 'week', 'MONTHLY': 'month', 'YEARLY': 'year'}[rule.frequency]
        text = f"{every} {unit}{'s' if rule.interval > 2 else ''}"
    text += f" at {format_time(event.start)}"
    if rule.until:
        text += f" until {rule.until.strftime('%B %-d, %Y')}"
    elif rule.count:
        text += f", {rule.count} times"
    return text


def describe_event(event: EventDescriptor, reference: datetime) -> str:
    """One-line human description of when the event happens"""
    if event.recurrence:
        text = describe_recurrence(event)
    elif event.start.date() == reference.date():
        text = f"Today at {format_time(event.start)}"
    elif event.start.date() == (reference + timedelta(days=1)).date():
        text = f"Tomorrow at {format_time(event.start)}"
    else:
        text = event.start.strftime("%A, %B %-d at %-I:%M %p")

    if event.end:
        text += f" until {format_time(event.end)}"
    elif event.duration:
        text += f" ({event.duration})"
    if event.location:
        text += f" @ {event.location}"
    return text


def upcoming_occurrences(event: EventDescriptor, count: int = 3) -> List[datetime]:
    """Next start times of a recurring event, starting with its own start"""
    if not event.recurrence:
        return [event.start]
    return list(islice(event.recurrence.to_rrule(event.start), count))
