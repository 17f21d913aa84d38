import datetime
from typing import Union
from schemas import DayOfWeek, validate_clock_time

MINUTES_PER_DAY = 24 * 60

# Python's weekday() counts from Monday; the roster counts from Sunday.
_WEEKDAY_TO_DAY = [
    DayOfWeek.MONDAY, DayOfWeek.TUESDAY, DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY, DayOfWeek.FRIDAY, DayOfWeek.SATURDAY, DayOfWeek.SUNDAY
]

def to_minutes(time_str: str) -> int:
    """Converts an "HH:MM" clock value into minutes after midnight."""
    validate_clock_time(time_str)
    hours, minutes = time_str.split(':')
    return int(hours) * 60 + int(minutes)

def clock_value(time_str: str) -> int:
    """The "HHMM" digits of a clock value read as one integer (e.g., '09:30' -> 930)."""
    validate_clock_time(time_str)
    return int(time_str.replace(':', ''))

def add_minutes(time_str: str, minutes: int) -> str:
    """
    Adds a signed minute offset to a clock value, wrapping around midnight.
    Purely a clock-face operation with no date semantics.
    """
    total = (to_minutes(time_str) + minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"

def is_time_in_range(time_str: str, start: str, end: str) -> bool:
    """True iff start <= time < end, start inclusive and end exclusive."""
    return clock_value(start) <= clock_value(time_str) < clock_value(end)

def do_intervals_overlap(start1: str, dur1: int, start2: str, dur2: int) -> bool:
    """
    Half-open interval overlap on the clock face. Touching intervals
    (one ending exactly when the other starts) do not overlap.
    """
    s1 = clock_value(start1)
    e1 = clock_value(add_minutes(start1, dur1))
    s2 = clock_value(start2)
    e2 = clock_value(add_minutes(start2, dur2))
    return s1 < e2 and s2 < e1

def parse_date(value: Union[str, datetime.date]) -> datetime.date:
    """Accepts a date or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD.")

def day_of_week(value: Union[str, datetime.date]) -> DayOfWeek:
    return _WEEKDAY_TO_DAY[parse_date(value).weekday()]

def lesson_datetime(lesson_date: datetime.date, start_time: str) -> datetime.datetime:
    """Combines a lesson's date and start time into one naive local instant."""
    hours, minutes = divmod(to_minutes(start_time), 60)
    return datetime.datetime.combine(lesson_date, datetime.time(hours, minutes))
