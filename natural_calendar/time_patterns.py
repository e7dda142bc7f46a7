import re

from . import build_time_pattern, convert_meridiem, normalize_meridiem
from .models import ComponentType, Pattern, TimeValue

FUZZY_HOURS = {
    'noon': 12,
    'midnight': 0,
    'morning': 9,
    'afternoon': 14,
    'evening': 18,
    'night': 20,
}


def _twelve_hour(pattern, match, context):
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = normalize_meridiem(match.group(3))
    hour = convert_meridiem(int(match.group(1)), meridiem)
    if hour is None or minute > 59:
        return None
    return pattern.component(match, ComponentType.TIME, TimeValue(hour, minute),
                             format='12hour', meridiem=meridiem)


def _clock(pattern, match, context, hour, minute, format):
    if hour > 23 or minute > 59:
        return None
    return pattern.component(match, ComponentType.TIME, TimeValue(hour, minute), format=format)


def _twenty_four_hour(pattern, match, context):
    return _clock(pattern, match, context, int(match.group(1)), int(match.group(2)), '24hour')


def _military(pattern, match, context):
    digits = match.group(1)
    return _clock(pattern, match, context, int(digits[:2]), int(digits[2:]), 'military')


def _fuzzy(pattern, match, context):
    word = match.group(1).lower()
    overrides = context.user_preferences.get('fuzzy_hours') or {}
    hour = overrides.get(word, FUZZY_HOURS[word])
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        return None
    return pattern.component(match, ComponentType.FUZZY_TIME, TimeValue(hour, 0),
                             fuzzy=True, original=word)


TIME_PATTERNS = [
    Pattern(
        name="12-hour format with meridiem",
        regex=re.compile(rf"\b{build_time_pattern()}\b", re.IGNORECASE),
        confidence=0.95,
        priority=5,
        build=_twelve_hour,
    ),
    Pattern(
        name="24-hour format",
        regex=re.compile(r"\b(\d{1,2}):(\d{2})\b"),
        confidence=0.9,
        priority=4,
        build=_twenty_four_hour,
    ),
    Pattern(
        name="Military time",
        regex=re.compile(r"\b(\d{4})\b"),
        confidence=0.85,
        priority=3,
        build=_military,
    ),
    Pattern(
        name="Fuzzy time expressions",
        regex=re.compile(rf"\b({'|'.join(FUZZY_HOURS)})\b", re.IGNORECASE),
        confidence=0.7,
        priority=1,
        build=_fuzzy,
    ),
]
