from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

__version__ = '0.3.0'

# Time pattern components
TIME_COMPONENTS = {
    'hours': r'(\d{1,2})',                  # 1-12
    'minutes': r'(?::(\d{2}))?',            # :00-:59
    'meridiem': r'([ap])(?:\s*m)?',         # a/p/am/pm
    'spaces': r'\s*',                       # Optional spaces
}

WEEKDAY_NAMES = (r'mon(?:day)?|tue(?:s(?:day)?)?|wed(?:nesday)?|thu(?:r(?:s(?:day)?)?)?'
                 r'|fri(?:day)?|sat(?:urday)?|sun(?:day)?')

MONTH_NAMES = (r'jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?'
               r'|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?')

# ISO weekday numbers, keyed by the first three letters
WEEKDAY_NUMBERS = {
    'mon': 1, 'tue': 2, 'wed': 3, 'thu': 4, 'fri': 5, 'sat': 6, 'sun': 7
}

WEEKDAY_CODES = {
    1: 'MO', 2: 'TU', 3: 'WE', 4: 'TH', 5: 'FR', 6: 'SA', 7: 'SU'
}

MONTH_NUMBERS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12
}

_RELATIVE_WEEKDAYS = (MO, TU, WE, TH, FR, SA, SU)


def build_time_pattern(meridiem_required=True):
    """Build time pattern from components"""
    meridiem = TIME_COMPONENTS['meridiem']
    if not meridiem_required:
        meridiem = f"(?:{meridiem})?"
    return (f"{TIME_COMPONENTS['hours']}"
            f"{TIME_COMPONENTS['minutes']}"
            f"{TIME_COMPONENTS['spaces']}"
            f"{meridiem}")


def convert_meridiem(hour, meridiem):
    """Convert a 12-hour clock value to 24-hour; None if out of range"""
    if not 1 <= hour <= 12:
        return None
    if meridiem == 'pm':
        return 12 if hour == 12 else hour + 12
    return 0 if hour == 12 else hour


def normalize_meridiem(raw):
    """Map 'p', 'PM', 'p m' etc. to 'am'/'pm'"""
    if not raw:
        return None
    return 'pm' if raw[0].lower() == 'p' else 'am'


def weekday_number(name):
    return WEEKDAY_NUMBERS[name[:3].lower()]


def month_number(name):
    return MONTH_NUMBERS[name[:3].lower()]


def next_weekday(reference, iso_weekday):
    """Next date strictly after reference falling on iso_weekday (1-7 days ahead)"""
    return reference + relativedelta(days=+1, weekday=_RELATIVE_WEEKDAYS[iso_weekday - 1](+1))
