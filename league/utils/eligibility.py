"""
Team eligibility rules.

A team only scores from the Saturday after the week it was created, at
08:00 league time, so a team created mid-week cannot claim points from
tournaments already underway. Teams without a usable creation time are
grandfathered in from a date long before any season.
"""

import logging
from datetime import datetime, time
from typing import Optional

from league.constants import CalendarConstants
from league.utils.season_calendar import ONE_WEEK, parse_datetime, week_start

logger = logging.getLogger(__name__)


def effective_start(team_created_at, timezone_name: Optional[str] = None) -> datetime:
    """
    First instant from which a team accrues points.
    
    Args:
        team_created_at: Creation time as a datetime, ISO string or None
        timezone_name: League timezone for converting aware timestamps
        
    Returns:
        Naive league-local datetime
    """
    created = parse_datetime(team_created_at, timezone_name)
    if created is None:
        if team_created_at is not None:
            logger.debug(f"Unparseable team creation time {team_created_at!r}, grandfathering team")
        return CalendarConstants.GRANDFATHERED_START
    
    next_week_start = week_start(created) + ONE_WEEK
    return datetime.combine(next_week_start.date(), time(hour=CalendarConstants.ELIGIBILITY_HOUR))


def is_eligible(tournament_date: datetime, team_effective_start: datetime) -> bool:
    """Whether a tournament starting at ``tournament_date`` counts for the team."""
    return tournament_date >= team_effective_start
