"""
Season calendar utilities for leaderboard periods.

Weeks run Saturday 00:00 to the following Friday 23:59:59.999, months are
calendar months and a season starts on a configured date. Every datetime
handled here is naive league-local time; timezone-aware values are converted
with pytz on the way in so that UTC and local instants are never compared.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import pytz

from league.config import Config
from league.constants import CalendarConstants
from league.data_models.leaderboard import Period, PeriodOption, SeasonBounds

ONE_MILLISECOND = timedelta(milliseconds=1)
ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=CalendarConstants.DAYS_PER_WEEK)


def to_league_time(moment, timezone_name: Optional[str] = None) -> datetime:
    """
    Normalise a date or datetime to naive league-local time.
    
    Naive datetimes are assumed to already be league-local. Aware datetimes
    are converted to the league timezone and stripped of tzinfo. Plain dates
    become midnight of that day.
    
    Raises:
        TypeError: If the value is not a date or datetime
    """
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            return moment
        tz = pytz.timezone(timezone_name) if timezone_name else Config.get_timezone()
        return moment.astimezone(tz).replace(tzinfo=None)
    if isinstance(moment, date):
        return datetime.combine(moment, time.min)
    raise TypeError(f"Expected date or datetime, got {type(moment).__name__}")


def parse_datetime(value, timezone_name: Optional[str] = None) -> Optional[datetime]:
    """
    Parse a stored timestamp into league-local time.
    
    Accepts datetimes, dates and ISO 8601 strings (including a trailing 'Z').
    Returns None for anything that does not describe a valid instant.
    """
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return to_league_time(value, timezone_name)
    if not isinstance(value, str) or not value.strip():
        return None
    
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return to_league_time(parsed, timezone_name)


def parse_calendar_date(value) -> Optional[datetime]:
    """
    Midnight of the calendar date written in ``value``.
    
    Unlike ``parse_datetime`` no timezone conversion happens, so
    "2025-01-01T00:00:00Z" is January 1st in every league timezone. Returns
    None for anything that is not a valid date.
    """
    if isinstance(value, datetime):
        return datetime.combine(value.date(), time.min)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        return None
    
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return datetime.combine(parsed.date(), time.min)


def week_start(moment) -> datetime:
    """Get Saturday midnight of the week containing the given moment."""
    moment = to_league_time(moment)
    days_since_saturday = (moment.weekday() - CalendarConstants.WEEK_ANCHOR_WEEKDAY) % 7
    return datetime.combine(moment.date() - timedelta(days=days_since_saturday), time.min)


def week_end(start: datetime) -> datetime:
    """Last instant of the week beginning at ``start``."""
    return to_league_time(start) + ONE_WEEK - ONE_MILLISECOND


def month_start(moment) -> datetime:
    moment = to_league_time(moment)
    return datetime(moment.year, moment.month, 1)


def month_end(moment) -> datetime:
    moment = to_league_time(moment)
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return datetime(moment.year, moment.month, last_day, 23, 59, 59, 999000)


def season_start(year: int) -> datetime:
    """January 1st of the season year."""
    return datetime(year, 1, 1)


def season_end(year: int) -> datetime:
    return datetime(year, 12, 31, 23, 59, 59, 999000)


def season_bounds(year: int, start=None, end=None) -> SeasonBounds:
    """
    Build the season window.
    
    Args:
        year: Season year
        start: Optional first day; defaults to January 1st
        end: Optional last day; the whole day is included. Defaults to December 31st
    """
    start_dt = datetime.combine(to_league_time(start).date(), time.min) if start is not None else season_start(year)
    if end is not None:
        end_dt = datetime.combine(to_league_time(end).date(), time.max).replace(microsecond=999000)
    else:
        end_dt = season_end(year)
    
    if end_dt < start_dt:
        raise ValueError(f"Season {year} ends ({end_dt}) before it starts ({start_dt})")
    return SeasonBounds(year=year, start=start_dt, end=end_dt)


def season_first_saturday(start) -> datetime:
    """First Saturday on or after the season start."""
    day = datetime.combine(to_league_time(start).date(), time.min)
    while day.weekday() != CalendarConstants.WEEK_ANCHOR_WEEKDAY:
        day += ONE_DAY
    return day


def gameweek_number(start: datetime, season_start_date) -> int:
    """
    Gameweek of a week relative to the season.
    
    Gameweek 1 begins on the season's first Saturday. Weeks before that give
    0 or negative numbers, which callers must treat as pre-season.
    """
    first_saturday = season_first_saturday(season_start_date)
    return (to_league_time(start) - first_saturday) // ONE_WEEK + 1


def format_date_string(moment: datetime) -> str:
    return moment.strftime('%Y-%m-%d')


def format_week_label(start: datetime, gameweek: Optional[int] = None) -> str:
    """Format a week label like 'Gameweek 3: Sat, Jan 18, 2025'."""
    date_str = f"{start:%a}, {start:%b} {start.day}, {start.year}"
    if gameweek and gameweek > 0:
        return f"Gameweek {gameweek}: {date_str}"
    return date_str


def format_month_label(moment: datetime) -> str:
    return f"{moment:%B} {moment.year}"


def format_season_label(year: int) -> str:
    return f"{year} Season"


def week_period(moment, season_start_date=None) -> Period:
    """Week period containing ``moment``, numbered when the season start is known."""
    start = week_start(moment)
    gameweek = gameweek_number(start, season_start_date) if season_start_date is not None else None
    return Period(
        period_type=CalendarConstants.PERIOD_WEEK,
        start=start,
        end=week_end(start),
        label=format_week_label(start, gameweek),
        gameweek_number=gameweek,
    )


def month_period(moment) -> Period:
    start = month_start(moment)
    return Period(
        period_type=CalendarConstants.PERIOD_MONTH,
        start=start,
        end=month_end(start),
        label=format_month_label(start),
    )


def season_period(bounds: SeasonBounds) -> Period:
    return Period(
        period_type=CalendarConstants.PERIOD_SEASON,
        start=bounds.start,
        end=bounds.end,
        label=format_season_label(bounds.year),
    )


def period_for(period_type: str, reference, bounds: SeasonBounds) -> Period:
    """
    Resolve the period of the given type that contains ``reference``.
    
    Raises:
        ValueError: If the period type is unknown
    """
    if period_type == CalendarConstants.PERIOD_WEEK:
        return week_period(reference, bounds.start)
    if period_type == CalendarConstants.PERIOD_MONTH:
        return month_period(reference)
    if period_type == CalendarConstants.PERIOD_SEASON:
        return season_period(bounds)
    raise ValueError(f"Unknown period type: {period_type}")


def previous_period(period: Period, season_start_date=None) -> Optional[Period]:
    """The period of the same type one step earlier. Seasons have none."""
    if period.period_type == CalendarConstants.PERIOD_WEEK:
        return week_period(period.start - ONE_WEEK, season_start_date)
    if period.period_type == CalendarConstants.PERIOD_MONTH:
        return month_period(period.start - ONE_DAY)
    return None


def next_period(period: Period, season_start_date=None) -> Optional[Period]:
    """The period of the same type one step later. Seasons have none."""
    if period.period_type == CalendarConstants.PERIOD_WEEK:
        return week_period(period.start + ONE_WEEK, season_start_date)
    if period.period_type == CalendarConstants.PERIOD_MONTH:
        return month_period(period.end + ONE_MILLISECOND)
    return None


def week_options(team_effective_start, season_start_date, now: datetime) -> List[PeriodOption]:
    """
    Gameweek dropdown options, most recent first.
    
    Starts at whichever is later of the season's first Saturday and the week
    the team became eligible, and runs to the current week (or gameweek 1
    while the season has not started yet).
    """
    now = to_league_time(now)
    current_week = week_start(now)
    first_saturday = season_first_saturday(season_start_date)
    effective = datetime.combine(to_league_time(team_effective_start).date(), time.min)
    
    start = first_saturday if first_saturday >= effective else week_start(effective)
    last_week = first_saturday if now < first_saturday else current_week
    
    options = []
    cursor = start
    while cursor <= last_week:
        gameweek = gameweek_number(cursor, season_start_date)
        options.append(PeriodOption(format_date_string(cursor), format_week_label(cursor, gameweek)))
        cursor += ONE_WEEK
    options.reverse()
    
    # Always include at least one option
    if not options:
        options.append(PeriodOption(format_date_string(current_week), format_week_label(current_week)))
    
    return options


def month_options(season_start_date, now: datetime) -> List[PeriodOption]:
    """Month dropdown options from the season start to ``now``, most recent first."""
    now = to_league_time(now)
    options = []
    cursor = month_start(season_start_date)
    while cursor <= now:
        options.append(PeriodOption(format_date_string(cursor), format_month_label(cursor)))
        cursor = month_end(cursor) + ONE_MILLISECOND
    options.reverse()
    return options
