"""
Period navigation for leaderboard paging.

Decides whether the client may step to the previous or next period. A
previous period is reachable while it still starts inside the season; a next
period is reachable once it has started. Season boards are a single page.
"""

from datetime import datetime

from league.constants import CalendarConstants
from league.data_models.leaderboard import Period, PeriodNavigation, SeasonBounds
from league.utils.season_calendar import next_period, previous_period, to_league_time


class PeriodNavigator:
    """Computes has_previous / has_next for a period."""
    
    @staticmethod
    def navigate(period_type: str, current_period: Period, season_bounds: SeasonBounds,
                 today: datetime) -> PeriodNavigation:
        """
        Args:
            period_type: week, month or season
            current_period: Period being displayed
            season_bounds: Season start and end
            today: Current league-local time, supplied by the caller
        """
        if period_type == CalendarConstants.PERIOD_SEASON:
            return PeriodNavigation(has_previous=False, has_next=False)
        
        today = to_league_time(today)
        before = previous_period(current_period, season_bounds.start)
        after = next_period(current_period, season_bounds.start)
        
        return PeriodNavigation(
            has_previous=before is not None and before.start >= season_bounds.start,
            has_next=after is not None and after.start <= today,
        )
