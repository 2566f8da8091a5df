"""
Leaderboard data models for period rankings.

Provides immutable data transfer objects for periods, ranked entries and the
navigation flags the client uses for paging between periods.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from league.data_models.scoring import TournamentRecord


class Movement(Enum):
    UP = "up"
    DOWN = "down"
    SAME = "same"
    NEW = "new"


@dataclass(frozen=True)
class Period:
    """A week, month or season window. Both bounds are inclusive."""
    period_type: str
    start: datetime
    end: datetime
    label: str
    gameweek_number: Optional[int] = None
    
    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class SeasonBounds:
    """First and last instant of a season."""
    year: int
    start: datetime
    end: datetime


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    user_id: str
    points: float
    rank: int
    previous_rank: Optional[int]
    movement: Movement
    movement_amount: int = 0
    events_played: int = 0
    team_value: float = 0


@dataclass(frozen=True)
class PeriodNavigation:
    """Whether the client can page to the neighbouring periods."""
    has_previous: bool
    has_next: bool


@dataclass(frozen=True)
class PeriodOption:
    """Dropdown option for picking a week or month."""
    value: str
    label: str


@dataclass(frozen=True)
class LeaderboardPage:
    """Ranked leaderboard for one period."""
    entries: List[LeaderboardEntry]
    period: Optional[Period]
    navigation: PeriodNavigation
    tournament_count: int = 0


@dataclass(frozen=True)
class LeadersSummary:
    """Current leader of each period type."""
    weekly_leader: Optional[LeaderboardEntry]
    monthly_leader: Optional[LeaderboardEntry]
    season_leader: Optional[LeaderboardEntry]
    current_week: Period
    current_month: Period
    season: Period
    week_navigation: PeriodNavigation
    month_navigation: PeriodNavigation


@dataclass(frozen=True)
class UserPeriodStats:
    """Points for a single user, including users without a team."""
    user_id: str
    has_team: bool
    points: float
    events_played: int
    rank: Optional[int]
    period: Period


@dataclass(frozen=True)
class TournamentLeaderboard:
    """Users ranked by their squad's points in a single tournament."""
    tournament: Optional[TournamentRecord]
    entries: List[LeaderboardEntry]


@dataclass(frozen=True)
class TournamentScoreLine:
    """One counted tournament result for a golfer in a team view."""
    tournament_id: str
    tournament_name: str
    tournament_date: datetime
    position: Optional[int]
    multiplied_points: float


@dataclass(frozen=True)
class GolferBreakdown:
    """A squad golfer's points for the selected week, its month and the season.
    
    Point totals include the captain multiplier; score lines do not.
    """
    golfer_id: str
    is_captain: bool
    week_points: float
    month_points: float
    season_points: float
    week_scores: Tuple[TournamentScoreLine, ...] = ()
    season_scores: Tuple[TournamentScoreLine, ...] = ()


@dataclass(frozen=True)
class TeamBreakdown:
    """Per-golfer view of one user's team."""
    user_id: str
    has_team: bool
    captain_id: Optional[str]
    week: Period
    month: Period
    golfers: List[GolferBreakdown]
