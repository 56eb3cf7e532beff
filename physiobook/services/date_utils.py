"""Calendar helpers for the rolling booking week.

Everything here works on UTC calendar dates. Callers pass ``today`` explicitly
so that slot computation is a pure function of stored rules and the date;
``utc_today`` is the single place that reads the clock.
"""

from datetime import date, datetime, timedelta, timezone

DAYS_OF_WEEK = [
    'Monday',
    'Tuesday',
    'Wednesday',
    'Thursday',
    'Friday',
    'Saturday',
    'Sunday',
]
WEEK_LENGTH_DAYS = 7

MORNING_START = '06:00'
AFTERNOON_START = '12:00'
AFTERNOON_END = '18:00'


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _as_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def generate_week_dates(today: date) -> list[str]:
    """Return today and the six following days as YYYY-MM-DD strings."""
    return [(today + timedelta(days=offset)).isoformat() for offset in range(WEEK_LENGTH_DAYS)]


def get_day_of_week(value: date | str) -> str:
    return DAYS_OF_WEEK[_as_date(value).weekday()]


def calculate_date_for_day(day_of_week: str, today: date) -> str:
    """Return the next date on or after ``today`` that falls on ``day_of_week``.

    Raises ``ValueError`` for a name that is not one of ``DAYS_OF_WEEK``.
    """
    if day_of_week not in DAYS_OF_WEEK:
        raise ValueError(f'Invalid day of week: {day_of_week}')

    days_until_target = (DAYS_OF_WEEK.index(day_of_week) - today.weekday()) % WEEK_LENGTH_DAYS
    return (today + timedelta(days=days_until_target)).isoformat()


def validate_special_date(special_date: date | str | None, day_of_week: str, today: date) -> str | None:
    """Return the override date if it is usable, otherwise ``None``.

    A special date is usable when it is today or later and actually falls on
    ``day_of_week``. Unparseable input is treated as unusable.
    """
    if special_date is None:
        return None
    try:
        parsed = _as_date(special_date)
    except ValueError:
        return None

    if parsed < today:
        return None
    if DAYS_OF_WEEK[parsed.weekday()] != day_of_week:
        return None
    return parsed.isoformat()


def is_morning(time_value: str) -> bool:
    return MORNING_START <= time_value < AFTERNOON_START


def is_afternoon(time_value: str) -> bool:
    return AFTERNOON_START <= time_value < AFTERNOON_END


def time_to_minutes(time_value: str) -> int:
    hours, _, minutes = time_value.strip().partition(':')
    if not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise ValueError(f'Invalid time: {time_value!r}')

    hour = int(hours)
    minute = int(minutes)
    if minute >= 60:
        raise ValueError(f'Invalid time: {time_value!r}')
    return hour * 60 + minute


def minutes_to_time(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    return f'{hours:02d}:{minutes:02d}'


def normalize_time(time_value: str) -> str:
    """Re-pad a clock time such as ``9:00`` to ``09:00``; rejects hours past 23."""
    total_minutes = time_to_minutes(time_value)
    if total_minutes >= 24 * 60:
        raise ValueError(f'Invalid time: {time_value!r}')
    return minutes_to_time(total_minutes)


def add_one_hour(time_value: str) -> str:
    # No rollover: "23:30" becomes "24:30", which sorts after every valid end time.
    return minutes_to_time(time_to_minutes(time_value) + 60)
