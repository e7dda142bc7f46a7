"""The pattern catalog: every domain's patterns flattened and ordered by priority."""

from .date_patterns import DATE_PATTERNS
from .interval_patterns import INTERVAL_PATTERNS
from .recurrence_patterns import RECURRENCE_PATTERNS
from .time_patterns import TIME_PATTERNS

PATTERN_GROUPS = {
    'time': TIME_PATTERNS,
    'date': DATE_PATTERNS,
    'interval': INTERVAL_PATTERNS,
    'recurrence': RECURRENCE_PATTERNS,
}


def get_patterns(extra=()):
    """Return the catalog plus any custom patterns, highest priority first"""
    patterns = [p for group in PATTERN_GROUPS.values() for p in group]
    patterns.extend(extra)
    return tuple(sorted(patterns, key=lambda p: p.priority, reverse=True))


PATTERNS = get_patterns()
