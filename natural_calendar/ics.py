"""Serialize an EventDescriptor into an RFC 5545 VCALENDAR document."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .models import EventDescriptor

PRODUCT_ID = '-//Natural Calendar//EN'
LINE_LIMIT = 75


def escape_text(value: str) -> str:
    """Escape a TEXT property value"""
    return (value.replace('\\', '\\\\')
                 .replace(';', '\\;')
                 .replace(',', '\\,')
                 .replace('\n', '\\n'))


def fold_line(line: str) -> str:
    """Fold a content line at 75 octets, continuation lines start with a space"""
    if len(line.encode('utf-8')) <= LINE_LIMIT:
        return line
    parts = []
    current = ''
    for char in line:
        # Continuation lines spend one octet on the leading space
        limit = LINE_LIMIT if not parts else LINE_LIMIT - 1
        if len((current + char).encode('utf-8')) > limit:
            parts.append(current)
            current = char
        else:
            current += char
    parts.append(current)
    return '\r\n '.join(parts)


def _is_utc(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() == timedelta(0)


def format_datetime(name: str, moment: datetime, tzid: Optional[str] = None) -> str:
    if _is_utc(moment):
        return f"{name}:{moment.strftime('%Y%m%dT%H%M%SZ')}"
    if tzid and tzid != 'UTC':
        return f"{name};TZID={tzid}:{moment.strftime('%Y%m%dT%H%M%S')}"
    return f"{name}:{moment.strftime('%Y%m%dT%H%M%S')}"


def event_lines(event: EventDescriptor, uid: Optional[str] = None,
                stamp: Optional[datetime] = None) -> List[str]:
    """Content lines of a single VEVENT, unfolded"""
    stamp = stamp or datetime.now(timezone.utc)
    lines = [
        'BEGIN:VEVENT',
        f'UID:{uid or uuid.uuid4()}',
        f"DTSTAMP:{stamp.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}",
    ]
    if event.summary:
        lines.append(f'SUMMARY:{escape_text(event.summary)}')
    if event.location:
        lines.append(f'LOCATION:{escape_text(event.location)}')

    lines.append(format_datetime('DTSTART', event.start, event.timezone))
    if event.end:
        lines.append(format_datetime('DTEND', event.end, event.timezone))
    elif event.duration:
        lines.append(f'DURATION:{event.duration}')

    if event.recurrence:
        lines.append(f'RRULE:{event.recurrence.to_rrule_string()}')

    for reminder in event.reminders:
        lines.extend([
            'BEGIN:VALARM',
            f'ACTION:{reminder.kind}',
            f'TRIGGER:{reminder.trigger}',
            f'DESCRIPTION:{escape_text(event.summary or "Reminder")}',
            'END:VALARM',
        ])
    lines.append('END:VEVENT')
    return lines


def event_to_ics(event: EventDescriptor, uid: Optional[str] = None,
                 stamp: Optional[datetime] = None) -> str:
    """Wrap the event in a VCALENDAR with CRLF line endings"""
    lines = ['BEGIN:VCALENDAR', 'VERSION:2.0', f'PRODID:{PRODUCT_ID}']
    lines.extend(event_lines(event, uid, stamp))
    lines.append('END:VCALENDAR')
    return '\r\n'.join(fold_line(line) for line in lines) + '\r\n'
