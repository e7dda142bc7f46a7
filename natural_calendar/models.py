"""Value types shared by the parser, resolver and exporters."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from dateutil import rrule


class ComponentType(Enum):
    TIME = "time"
    DATE = "date"
    WEEKDAY = "weekday"
    MONTH = "month"
    YEAR = "year"
    DURATION = "duration"
    INTERVAL = "interval"
    RECURRENCE = "recurrence"
    FUZZY_TIME = "fuzzy_time"


@dataclass(frozen=True)
class TimeValue:
    hour: int
    minute: int = 0

    def __str__(self):
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class DateValue:
    """Either an absolute calendar date or an offset in days from the reference date"""
    date: Optional[date] = None
    day_offset: Optional[int] = None


@dataclass(frozen=True)
class WeekdayValue:
    iso_weekday: int
    name: str


@dataclass(frozen=True)
class MonthValue:
    month: int
    name: str


@dataclass(frozen=True)
class IntervalValue:
    start: TimeValue
    end: TimeValue


_FREQUENCIES = {
    'DAILY': rrule.DAILY,
    'WEEKLY': rrule.WEEKLY,
    'MONTHLY': rrule.MONTHLY,
    'YEARLY': rrule.YEARLY,
}

_RRULE_WEEKDAYS = {
    'MO': rrule.MO, 'TU': rrule.TU, 'WE': rrule.WE, 'TH': rrule.TH,
    'FR': rrule.FR, 'SA': rrule.SA, 'SU': rrule.SU,
}


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: str
    interval: int = 1
    by_day: Tuple[str, ...] = ()
    until: Optional[date] = None
    count: Optional[int] = None

    def to_rrule_string(self) -> str:
        """Render the rule as an RFC 5545 RRULE value"""
        parts = [f'FREQ={self.frequency}']
        if self.interval > 1:
            parts.append(f'INTERVAL={self.interval}')
        if self.by_day:
            parts.append(f'BYDAY={",".join(self.by_day)}')
        if self.until:
            parts.append(f'UNTIL={self.until.strftime("%Y%m%dT235959Z")}')
        if self.count:
            parts.append(f'COUNT={self.count}')
        return ';'.join(parts)

    def to_rrule(self, dtstart: datetime) -> rrule.rrule:
        """Build a dateutil rrule anchored at dtstart"""
        until = None
        if self.until:
            until = datetime.combine(self.until, time(23, 59, 59), tzinfo=dtstart.tzinfo)
        return rrule.rrule(
            _FREQUENCIES[self.frequency],
            dtstart=dtstart,
            interval=self.interval,
            byweekday=[_RRULE_WEEKDAYS[code] for code in self.by_day] or None,
            until=until,
            count=self.count,
        )


@dataclass(frozen=True)
class Component:
    source_text: str
    start: int
    end: int
    type: ComponentType
    value: Any
    confidence: float
    priority: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    def overlaps(self, other: 'Component') -> bool:
        return self.start < other.end and self.end > other.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.source_text,
            'start': self.start,
            'end': self.end,
            'type': self.type.value,
            'value': str(self.value),
            'confidence': self.confidence,
            'priority': self.priority,
        }


@dataclass(frozen=True)
class ParsingContext:
    reference_instant: datetime
    timezone: Optional[str] = None
    locale: str = 'en-US'
    user_preferences: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Pattern:
    """A named regex plus the builder that turns each match into a Component"""
    name: str
    regex: Any
    confidence: float
    priority: int
    build: Callable[..., Optional[Component]]

    def parse(self, match, context: ParsingContext) -> Optional[Component]:
        return self.build(self, match, context)

    def component(self, match, type, value, **metadata) -> Component:
        """Wrap a match in a Component carrying this pattern's scores"""
        metadata.setdefault('pattern', self.name)
        return Component(
            source_text=match.group(0),
            start=match.start(),
            end=match.end(),
            type=type,
            value=value,
            confidence=self.confidence,
            priority=self.priority,
            metadata=metadata,
        )


@dataclass(frozen=True)
class ParsedPhrase:
    original_text: str
    components: Tuple[Component, ...]
    reference_instant: datetime
    # The context the phrase was parsed with, reused when it is resolved
    context: Optional[ParsingContext] = None

    def components_of(self, type: ComponentType) -> Tuple[Component, ...]:
        return tuple(c for c in self.components if c.type is type)


@dataclass(frozen=True)
class Reminder:
    minutes_before: int
    kind: str = 'DISPLAY'

    @property
    def trigger(self) -> str:
        return f'-PT{self.minutes_before}M'


@dataclass(frozen=True)
class EventDescriptor:
    start: datetime
    end: Optional[datetime] = None
    duration: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None
    reminders: Tuple[Reminder, ...] = ()
    summary: Optional[str] = None
    location: Optional[str] = None
    timezone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary,
            'location': self.location,
            'start': self.start.isoformat(),
            'end': self.end.isoformat() if self.end else None,
            'duration': self.duration,
            'recurrence': self.recurrence.to_rrule_string() if self.recurrence else None,
            'reminders': [
                {'kind': r.kind, 'trigger': r.trigger, 'minutes_before': r.minutes_before}
                for r in self.reminders
            ],
            'timezone': self.timezone,
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    missing_types: Tuple[ComponentType, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'missing': [t.value for t in self.missing_types],
            'warnings': list(self.warnings),
        }
