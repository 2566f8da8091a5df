"""
Leaderboard service for week, month and season rankings.

Reads a season snapshot from storage, then runs the pure scoring pipeline:
calendar -> eligibility -> aggregation -> ranking -> navigation. Nothing is
cached; every call recomputes from the stored scores so a leaderboard can
never disagree with the score sheets behind it.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select

from league.config import Config
from league.constants import CalendarConstants, ScoringConstants, SettingKeys
from league.data_models.leaderboard import (
    LeaderboardPage, LeadersSummary, Period, PeriodNavigation, PeriodOption,
    SeasonBounds, TeamBreakdown, TournamentLeaderboard, UserPeriodStats
)
from league.data_models.scoring import LeagueSnapshot
from league.database.models import Pick, Score, Setting, Tournament, User
from league.services.aggregation import ScoreAggregator
from league.services.base import BaseService
from league.services.navigation import PeriodNavigator
from league.utils.eligibility import effective_start
from league.utils.league_exceptions import InvalidPeriodError, SeasonConfigurationError
from league.utils.ranking import RankingEngine
from league.utils.season_calendar import (
    month_options, month_period, parse_calendar_date, parse_datetime, period_for,
    previous_period, season_bounds, season_period, to_league_time, week_options,
    week_period
)

logger = logging.getLogger(__name__)


class LeaderboardService(BaseService):
    """Service for period leaderboards, leaders and per-user period stats."""
    
    def __init__(self, session_factory, timezone_name: Optional[str] = None):
        super().__init__(session_factory)
        self.timezone_name = timezone_name or Config.LEAGUE_TIMEZONE
        self.aggregator = ScoreAggregator(self.timezone_name)
    
    # Season settings
    
    async def get_season_bounds(self) -> SeasonBounds:
        """
        Resolve the current season from the settings table.
        
        Falls back to configuration for any setting that is not stored.
        
        Raises:
            SeasonConfigurationError: If a stored value cannot be parsed
        """
        settings = await self._fetch_settings((
            SettingKeys.CURRENT_SEASON,
            SettingKeys.SEASON_START_DATE,
            SettingKeys.SEASON_END_DATE,
        ))
        
        raw_season = settings.get(SettingKeys.CURRENT_SEASON, Config.CURRENT_SEASON)
        try:
            year = int(raw_season)
        except (TypeError, ValueError):
            raise SeasonConfigurationError(SettingKeys.CURRENT_SEASON, raw_season)
        
        start = self._parse_setting_date(
            SettingKeys.SEASON_START_DATE,
            settings.get(SettingKeys.SEASON_START_DATE, Config.SEASON_START_DATE)
        )
        end = self._parse_setting_date(
            SettingKeys.SEASON_END_DATE,
            settings.get(SettingKeys.SEASON_END_DATE, Config.SEASON_END_DATE)
        )
        
        try:
            return season_bounds(year, start, end)
        except ValueError:
            raise SeasonConfigurationError(SettingKeys.SEASON_END_DATE, end)
    
    def _parse_setting_date(self, key: str, value) -> Optional[datetime]:
        if value in (None, ''):
            return None
        # Season dates are calendar dates; any time or UTC offset is dropped
        parsed = parse_calendar_date(value)
        if parsed is None:
            raise SeasonConfigurationError(key, value)
        return parsed
    
    # Leaderboards
    
    async def get_period_leaderboard(self, period_type: str = CalendarConstants.PERIOD_WEEK,
                                     reference=None, *, now: datetime) -> LeaderboardPage:
        """
        Ranked leaderboard for the period of ``period_type`` containing ``reference``.
        
        Args:
            period_type: week, month or season
            reference: Date, datetime or ISO string inside the wanted period; defaults to ``now``
            now: Current time, used for navigation
            
        Raises:
            InvalidPeriodError: If the period type or reference date is invalid
        """
        bounds = await self.get_season_bounds()
        now = to_league_time(now, self.timezone_name)
        period = self._resolve_period(period_type, reference if reference is not None else now, bounds)
        snapshot = await self.execute_with_retry(lambda: self.load_snapshot(bounds.year))
        
        entries = self._rank_period(snapshot, period, bounds)
        navigation = PeriodNavigator.navigate(period_type, period, bounds, now)
        
        return LeaderboardPage(
            entries=entries,
            period=period,
            navigation=navigation,
            tournament_count=self.aggregator.tournament_count(period, bounds.year, snapshot.tournaments),
        )
    
    async def get_leaders(self, *, now: datetime) -> LeadersSummary:
        """Current weekly, monthly and season leaders."""
        bounds = await self.get_season_bounds()
        now = to_league_time(now, self.timezone_name)
        snapshot = await self.execute_with_retry(lambda: self.load_snapshot(bounds.year))
        
        week = week_period(now, bounds.start)
        month = month_period(now)
        season = season_period(bounds)
        
        return LeadersSummary(
            weekly_leader=RankingEngine.leader(self._rank_period(snapshot, week, bounds)),
            monthly_leader=RankingEngine.leader(self._rank_period(snapshot, month, bounds)),
            season_leader=RankingEngine.leader(self._rank_period(snapshot, season, bounds)),
            current_week=week,
            current_month=month,
            season=season,
            week_navigation=PeriodNavigator.navigate(CalendarConstants.PERIOD_WEEK, week, bounds, now),
            month_navigation=PeriodNavigator.navigate(CalendarConstants.PERIOD_MONTH, month, bounds, now),
        )
    
    async def get_user_period_stats(self, user_id, period_type: str = CalendarConstants.PERIOD_WEEK,
                                    reference=None, *, now: datetime) -> UserPeriodStats:
        """
        Points for one user in a period.
        
        Users without a pick for the season get zeros and ``has_team=False``
        instead of being left out.
        """
        bounds = await self.get_season_bounds()
        now = to_league_time(now, self.timezone_name)
        period = self._resolve_period(period_type, reference if reference is not None else now, bounds)
        snapshot = await self.execute_with_retry(lambda: self.load_snapshot(bounds.year))
        
        user_id = str(user_id)
        entries = self._rank_period(snapshot, period, bounds)
        entry = next((e for e in entries if e.user_id == user_id), None)
        if entry is None:
            return UserPeriodStats(user_id, has_team=False, points=0, events_played=0, rank=None, period=period)
        return UserPeriodStats(
            user_id,
            has_team=True,
            points=entry.points,
            events_played=entry.events_played,
            rank=entry.rank,
            period=period,
        )
    
    async def get_period_options(self, user_id, *, now: datetime) -> Dict[str, List[PeriodOption]]:
        """Week and month dropdown options for a user, most recent first."""
        bounds = await self.get_season_bounds()
        now = to_league_time(now, self.timezone_name)
        picks = await self._fetch_picks(bounds.year)
        pick = next((p for p in picks if p.user_id == str(user_id)), None)
        team_start = effective_start(pick.created_at if pick else None, self.timezone_name)
        
        return {
            'weeks': week_options(team_start, bounds.start, now),
            'months': month_options(bounds.start, now),
        }
    
    async def get_tournament_leaderboard(self, tournament_id) -> TournamentLeaderboard:
        """
        Users ranked by their squad's points in one tournament of the current season.
        
        Unknown, draft and other-season tournaments give an empty board with
        ``tournament=None``.
        """
        bounds = await self.get_season_bounds()
        snapshot = await self.execute_with_retry(lambda: self.load_snapshot(bounds.year))
        
        tournament_id = str(tournament_id)
        tournament = next((t for t in snapshot.tournaments if t.id == tournament_id), None)
        if tournament is None:
            logger.debug(f"Tournament {tournament_id} is not a scoring tournament of season {bounds.year}")
            return TournamentLeaderboard(tournament=None, entries=[])
        
        points = self.aggregator.tournament_points(
            tournament_id, snapshot.season, snapshot.picks, snapshot.tournaments, snapshot.scores
        )
        return TournamentLeaderboard(tournament=tournament, entries=RankingEngine.rank(points))
    
    async def get_team_breakdown(self, user_id, reference=None, *, now: datetime) -> TeamBreakdown:
        """
        Per-golfer points of a user's team for the week containing ``reference``,
        the month that week starts in, and the season.
        
        Users without a pick get ``has_team=False`` and no golfers.
        """
        bounds = await self.get_season_bounds()
        now = to_league_time(now, self.timezone_name)
        week = self._resolve_period(
            CalendarConstants.PERIOD_WEEK, reference if reference is not None else now, bounds
        )
        month = month_period(week.start)
        snapshot = await self.execute_with_retry(lambda: self.load_snapshot(bounds.year))
        
        user_id = str(user_id)
        pick = next((p for p in snapshot.picks if p.user_id == user_id), None)
        if pick is None:
            return TeamBreakdown(user_id, has_team=False, captain_id=None, week=week, month=month, golfers=[])
        
        golfers = self.aggregator.team_breakdown(pick, week, bounds, snapshot.tournaments, snapshot.scores)
        return TeamBreakdown(user_id, has_team=True, captain_id=pick.captain_id, week=week, month=month, golfers=golfers)
    
    def _resolve_period(self, period_type: str, reference, bounds: SeasonBounds) -> Period:
        if period_type not in CalendarConstants.PERIOD_TYPES:
            raise InvalidPeriodError(period_type)
        
        if isinstance(reference, str):
            moment = parse_datetime(reference, self.timezone_name)
            if moment is None:
                raise InvalidPeriodError(period_type, f"'{reference}' is not a valid date")
        else:
            try:
                moment = to_league_time(reference, self.timezone_name)
            except TypeError:
                raise InvalidPeriodError(period_type, f"{reference!r} is not a date")
        return period_for(period_type, moment, bounds)
    
    def _rank_period(self, snapshot: LeagueSnapshot, period: Period, bounds: SeasonBounds):
        """Aggregate and rank one period, with movement against the period before it."""
        if not snapshot.picks:
            return []
        
        totals = self.aggregator.summarize(
            period, snapshot.season, snapshot.picks, snapshot.tournaments, snapshot.scores
        )
        before = previous_period(period, bounds.start)
        previous_points = None
        if before is not None:
            previous_points = self.aggregator.aggregate(
                before, snapshot.season, snapshot.picks, snapshot.tournaments, snapshot.scores
            )
        return RankingEngine.rank_totals(totals, previous_points)
    
    # Storage reads
    
    async def load_snapshot(self, season: int) -> LeagueSnapshot:
        """
        Read tournaments, picks, scores and users for a season.
        
        The four reads are independent and run concurrently, each on its own
        session. Picks belonging to users that no longer exist are dropped.
        """
        tournaments, picks, scores, user_ids = await asyncio.gather(
            self._fetch_tournaments(season),
            self._fetch_picks(season),
            self._fetch_scores(season),
            self._fetch_user_ids(),
        )
        
        orphaned = [p for p in picks if p.user_id not in user_ids]
        if orphaned:
            logger.warning(f"Skipping {len(orphaned)} picks for season {season} with no matching user")
        
        return LeagueSnapshot(
            season=season,
            tournaments=tuple(tournaments),
            picks=tuple(p for p in picks if p.user_id in user_ids),
            scores=tuple(scores),
            user_ids=frozenset(user_ids),
        )
    
    async def _fetch_tournaments(self, season: int):
        async with self.get_session() as session:
            result = await session.execute(
                select(Tournament).where(
                    Tournament.season == season,
                    Tournament.status.in_(sorted(ScoringConstants.SCORING_STATUSES))
                ).order_by(Tournament.start_date, Tournament.id)
            )
            return [t.to_record() for t in result.scalars()]
    
    async def _fetch_picks(self, season: int):
        async with self.get_session() as session:
            result = await session.execute(
                select(Pick).where(Pick.season == season).order_by(Pick.id)
            )
            return [p.to_record() for p in result.scalars()]
    
    async def _fetch_scores(self, season: int):
        async with self.get_session() as session:
            result = await session.execute(
                select(Score)
                .join(Tournament, Score.tournament_id == Tournament.id)
                .where(
                    Tournament.season == season,
                    Tournament.status.in_(sorted(ScoringConstants.SCORING_STATUSES))
                )
                .order_by(Score.id)
            )
            return [s.to_record() for s in result.scalars()]
    
    async def _fetch_user_ids(self):
        async with self.get_session() as session:
            result = await session.execute(select(User.id))
            return {str(user_id) for user_id in result.scalars()}
    
    async def _fetch_settings(self, keys: Tuple[str, ...]) -> Dict[str, object]:
        async with self.get_session() as session:
            result = await session.execute(select(Setting).where(Setting.key.in_(keys)))
            settings = {}
            for setting in result.scalars():
                try:
                    settings[setting.key] = json.loads(setting.value)
                except json.JSONDecodeError:
                    logger.warning(f"Invalid JSON for setting '{setting.key}', skipping")
            return settings
