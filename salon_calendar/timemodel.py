"""Time-of-day and calendar-date handling for the scheduling grid.

Formats:
- Time of day: 12-hour "H:MM AM|PM", no leading zero on the hour ("9:00 AM")
- Calendar date: "YYYY-MM-DD"
- Weeks run Monday to Sunday
"""
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional, Union

from salon_calendar.config import VALID_MINUTES
from salon_calendar.errors import DateParseError, TimeParseError

DateLike = Union[date, datetime]


class TimeOfDay(NamedTuple):
    """24-hour clock reading."""
    hour: int
    minutes: int


def parse_time(time_str: str) -> TimeOfDay:
    """
    Parse a 12-hour time string into a 24-hour clock reading.

    Args:
        time_str: Time like "9:00 AM" or "12:30 PM" (a leading zero is tolerated)

    Returns:
        TimeOfDay(hour 0-23, minutes 0-59)

    Raises:
        TimeParseError: If the string is not two tokens "H:MM" "AM|PM"

    Example:
        >>> parse_time("12:15 AM")
        TimeOfDay(hour=0, minutes=15)
    """
    if not isinstance(time_str, str):
        raise TimeParseError(f"Time must be a string, got {type(time_str).__name__}")

    parts = time_str.split(" ")
    if len(parts) != 2:
        raise TimeParseError(f"Invalid time '{time_str}': expected 'H:MM AM|PM'")
    clock, period = parts

    clock_parts = clock.split(":")
    if len(clock_parts) != 2 or period not in ("AM", "PM"):
        raise TimeParseError(f"Invalid time '{time_str}': expected 'H:MM AM|PM'")
    hour_str, minute_str = clock_parts

    if not (hour_str.isdigit() and minute_str.isdigit() and len(minute_str) == 2):
        raise TimeParseError(f"Invalid time '{time_str}': non-numeric hour or minutes")

    hour = int(hour_str)
    minutes = int(minute_str)
    if not 1 <= hour <= 12 or not 0 <= minutes <= 59:
        raise TimeParseError(f"Invalid time '{time_str}': out of range")

    # Convert to 24-hour clock
    if period == "PM" and hour != 12:
        hour += 12
    if period == "AM" and hour == 12:
        hour = 0

    return TimeOfDay(hour, minutes)


def format_time_to_string(hour: int, minutes: int = 0) -> str:
    """
    Format a 24-hour clock reading as "H:MM AM|PM".

    Hour 0 displays as 12 AM and hour 12 as 12 PM.
    """
    if not 0 <= hour <= 23 or not 0 <= minutes <= 59:
        raise ValueError(f"Invalid clock reading {hour}:{minutes}")

    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minutes:02d} {period}"


def is_quarter_hour(minutes: int) -> bool:
    """Check minutes fall on the grid's 15-minute granularity."""
    return minutes in VALID_MINUTES


def to_24h_string(time_str: str) -> str:
    """Convert "H:MM AM|PM" to "HH:MM"."""
    hour, minutes = parse_time(time_str)
    return f"{hour:02d}:{minutes:02d}"


def minutes_since_midnight(time_str: str) -> int:
    """Minutes from 00:00 to the given 12-hour time."""
    hour, minutes = parse_time(time_str)
    return hour * 60 + minutes


def parse_date(date_str: str) -> date:
    """
    Parse "YYYY-MM-DD" into a calendar date.

    The string is split on "-" and the components used directly, so the
    result never shifts with the local timezone.

    Raises:
        DateParseError: If the string is not a valid YYYY-MM-DD date
    """
    if not isinstance(date_str, str):
        raise DateParseError(f"Date must be a string, got {type(date_str).__name__}")

    parts = date_str.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise DateParseError(f"Invalid date '{date_str}': expected YYYY-MM-DD")

    year, month, day = (int(part) for part in parts)
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseError(f"Invalid date '{date_str}': {e}") from e


def format_date_to_string(value: DateLike) -> str:
    """Format a date as zero-padded "YYYY-MM-DD"."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def as_date(value: DateLike) -> date:
    """Drop the time-of-day component, if any."""
    if isinstance(value, datetime):
        return value.date()
    return value


# Week arithmetic

def get_week_start(value: DateLike) -> date:
    """
    Get the Monday on or before a date.

    Sunday belongs to the week that started six days earlier.

    Example:
        >>> get_week_start(date(2025, 12, 14))  # Sunday
        datetime.date(2025, 12, 8)
    """
    day = as_date(value)
    return day - timedelta(days=day.weekday())


def get_week_dates(week_start: DateLike) -> List[date]:
    """The 7 consecutive dates starting at week_start."""
    start = as_date(week_start)
    return [start + timedelta(days=i) for i in range(7)]


def navigate_week(week_start: DateLike, offset: int) -> date:
    """Move a week anchor by offset weeks (negative goes back)."""
    return as_date(week_start) + timedelta(days=offset * 7)


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    if today is None:
        today = date.today()
    return as_date(value) == as_date(today)


def is_appointment_on_date(appointment, value: DateLike) -> bool:
    """
    Check an appointment falls on a calendar day.

    Args:
        appointment: Anything with a "YYYY-MM-DD" `date` attribute
        value: Day to compare against (time-of-day ignored)
    """
    return parse_date(appointment.date) == as_date(value)


# Display labels

def format_hour_label(hour: int) -> str:
    """Row label for an hour, e.g. "9:00 AM"."""
    return format_time_to_string(hour, 0)


def format_hour_short(hour: int) -> str:
    """Compact row label for narrow screens, e.g. "9a", "12p"."""
    if hour == 0:
        return "12a"
    if hour < 12:
        return f"{hour}a"
    if hour == 12:
        return "12p"
    return f"{hour - 12}p"


def get_day_name(value: DateLike) -> str:
    return value.strftime("%a")


def format_date_short(value: DateLike) -> str:
    """e.g. "Dec 10"."""
    return f"{value.strftime('%b')} {value.day}"


def format_date_long(value: DateLike) -> str:
    """e.g. "Dec 10, 2025"."""
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_week_range(week_start: DateLike, compact: bool = False) -> str:
    """Header text for a week, e.g. "Dec 8, 2025 - Dec 14, 2025"."""
    dates = get_week_dates(week_start)
    formatter = format_date_short if compact else format_date_long
    return f"{formatter(dates[0])} - {formatter(dates[-1])}"
