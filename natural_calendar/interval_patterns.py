import re

from . import build_time_pattern, convert_meridiem, normalize_meridiem
from .models import ComponentType, IntervalValue, Pattern, TimeValue

_ENDPOINT = build_time_pattern(meridiem_required=False)


def _to_24_hour(hour, meridiem):
    if meridiem:
        return convert_meridiem(hour, meridiem)
    return hour if hour <= 23 else None


def _time_range(pattern, match, context):
    start_hour, end_hour = int(match.group(1)), int(match.group(4))
    start_minute = int(match.group(2)) if match.group(2) else 0
    end_minute = int(match.group(5)) if match.group(5) else 0
    start_meridiem = normalize_meridiem(match.group(3))
    end_meridiem = normalize_meridiem(match.group(6))
    if start_minute > 59 or end_minute > 59:
        return None

    adjusted_start = _to_24_hour(start_hour, start_meridiem)
    if end_meridiem:
        adjusted_end = convert_meridiem(end_hour, end_meridiem)
    elif start_meridiem == 'pm' and end_hour < start_hour:
        # "11pm to 1" is read as ending at 13:00; no roll-over past midnight
        adjusted_end = end_hour + 12
    else:
        adjusted_end = end_hour if end_hour <= 23 else None
    if adjusted_start is None or adjusted_end is None or adjusted_end > 23:
        return None

    if end_meridiem and not start_meridiem:
        # "2-3pm": the start shares the end's meridiem unless that puts it after the end
        inferred = convert_meridiem(start_hour, end_meridiem)
        if inferred is not None and inferred * 60 + start_minute <= adjusted_end * 60 + end_minute:
            adjusted_start = inferred

    value = IntervalValue(TimeValue(adjusted_start, start_minute), TimeValue(adjusted_end, end_minute))
    return pattern.component(match, ComponentType.INTERVAL, value,
                             format=pattern.name, start_meridiem=start_meridiem,
                             end_meridiem=end_meridiem)


INTERVAL_PATTERNS = [
    Pattern(
        name="range_with_to",
        regex=re.compile(rf"\b{_ENDPOINT}\s+to\s+{_ENDPOINT}\b", re.IGNORECASE),
        confidence=0.9,
        priority=10,
        build=_time_range,
    ),
    Pattern(
        name="range_with_hyphen",
        regex=re.compile(rf"\b{_ENDPOINT}\s*-\s*{_ENDPOINT}\b", re.IGNORECASE),
        confidence=0.9,
        priority=10,
        build=_time_range,
    ),
]
