"""
Score Aggregation Service

Turns raw per-tournament golfer scores into per-user point totals for a
week, month or season.

A score counts towards a user's total only when:
- the golfer is in the user's squad for the season
- the golfer participated
- the tournament belongs to the season and is published or complete
- the tournament starts inside the requested period
- the tournament starts on or after the team's effective start

Users without a pick for the season never appear in the output. Scores that
point at unknown tournaments, and golfers without scores, contribute nothing.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from league.constants import ScoringConstants
from league.data_models.leaderboard import GolferBreakdown, Period, SeasonBounds, TournamentScoreLine
from league.data_models.scoring import ParticipantTotals, PickRecord, ScoreRecord, TournamentRecord
from league.utils.eligibility import effective_start, is_eligible
from league.utils.season_calendar import month_period, season_period, to_league_time

logger = logging.getLogger(__name__)

class ScoreAggregator:
    """Sums multiplied points per user for a period."""
    
    def __init__(self, timezone_name: Optional[str] = None):
        """
        Args:
            timezone_name: League timezone used to localise aware timestamps.
                Defaults to the configured league timezone.
        """
        self.timezone_name = timezone_name
    
    def aggregate(self, period: Period, season: int, picks: Iterable[PickRecord],
                  tournaments: Iterable[TournamentRecord], scores: Iterable[ScoreRecord]) -> Dict[str, float]:
        """
        Points per user for the period.
        
        Args:
            period: Period to aggregate over
            season: Season year; picks and tournaments from other seasons are ignored
            picks: All picks (one per user per season)
            tournaments: All tournaments
            scores: All score records
            
        Returns:
            Dict mapping user id to points, in pick order
        """
        totals = self.summarize(period, season, picks, tournaments, scores)
        return {total.user_id: total.points for total in totals}
    
    def summarize(self, period: Period, season: int, picks: Iterable[PickRecord],
                  tournaments: Iterable[TournamentRecord], scores: Iterable[ScoreRecord]) -> List[ParticipantTotals]:
        """Points, distinct events played and team value per user for the period."""
        tournament_dates = self._scoring_tournament_dates(season, tournaments)
        scores_by_golfer = self._index_scores(scores, tournament_dates)
        picks_by_user = self._season_picks(season, picks)
        
        results = []
        for user_id, pick in picks_by_user.items():
            team_start = effective_start(pick.created_at, self.timezone_name)
            points = 0
            events = set()
            
            # dict.fromkeys keeps squad order while dropping repeated golfer ids
            for golfer_id in dict.fromkeys(pick.golfer_ids):
                for tournament_id, score in scores_by_golfer.get(golfer_id, {}).items():
                    tournament_date = tournament_dates[tournament_id]
                    if not is_eligible(tournament_date, team_start):
                        continue
                    if not period.contains(tournament_date):
                        continue
                    points += score.multiplied_points or 0
                    events.add(tournament_id)
            
            results.append(ParticipantTotals(
                user_id=user_id,
                points=points,
                events_played=len(events),
                team_value=pick.total_spent or 0,
            ))
        
        logger.debug(
            f"Aggregated {period.period_type} '{period.label}' for season {season}: "
            f"{len(results)} teams, {len(tournament_dates)} scoring tournaments"
        )
        return results
    
    def tournament_count(self, period: Period, season: int, tournaments: Iterable[TournamentRecord]) -> int:
        """Number of scoring tournaments of the season that start inside the period."""
        tournament_dates = self._scoring_tournament_dates(season, tournaments)
        return sum(1 for start in tournament_dates.values() if period.contains(start))
    
    def tournament_points(self, tournament_id: str, season: int, picks: Iterable[PickRecord],
                          tournaments: Iterable[TournamentRecord], scores: Iterable[ScoreRecord]) -> Dict[str, float]:
        """
        Points per user from a single tournament.
        
        Returns an empty dict when the tournament is unknown, from another
        season, or not yet published. Teams not eligible at the tournament
        start get 0.
        """
        tournament_dates = self._scoring_tournament_dates(season, tournaments)
        start = tournament_dates.get(tournament_id)
        if start is None:
            return {}
        
        own_scores = (s for s in scores if s.tournament_id == tournament_id)
        scores_by_golfer = self._index_scores(own_scores, tournament_dates)
        
        points = {}
        for user_id, pick in self._season_picks(season, picks).items():
            total = 0
            if is_eligible(start, effective_start(pick.created_at, self.timezone_name)):
                for golfer_id in dict.fromkeys(pick.golfer_ids):
                    score = scores_by_golfer.get(golfer_id, {}).get(tournament_id)
                    if score is not None:
                        total += score.multiplied_points or 0
            points[user_id] = total
        return points
    
    def team_breakdown(self, pick: PickRecord, week: Period, bounds: SeasonBounds,
                       tournaments: Iterable[TournamentRecord], scores: Iterable[ScoreRecord]) -> List[GolferBreakdown]:
        """
        Per-golfer points for a team in the selected week, that week's month and the season.
        
        The same filters as ``summarize`` apply. The captain's totals are
        multiplied by ``ScoringConstants.CAPTAIN_MULTIPLIER``. Golfers are
        ordered by week points, highest first, keeping squad order for ties.
        """
        tournaments_by_id = {
            t.id: t for t in tournaments
            if t.counts_for_scoring and t.season == bounds.year
        }
        tournament_dates = {tid: to_league_time(t.start_date, self.timezone_name) for tid, t in tournaments_by_id.items()}
        scores_by_golfer = self._index_scores(scores, tournament_dates)
        team_start = effective_start(pick.created_at, self.timezone_name)
        month = month_period(week.start)
        season = season_period(bounds)
        
        breakdown = []
        for golfer_id in dict.fromkeys(pick.golfer_ids):
            lines = []
            for tournament_id, score in scores_by_golfer.get(golfer_id, {}).items():
                tournament_date = tournament_dates[tournament_id]
                if not is_eligible(tournament_date, team_start):
                    continue
                lines.append(TournamentScoreLine(
                    tournament_id=tournament_id,
                    tournament_name=tournaments_by_id[tournament_id].name,
                    tournament_date=tournament_date,
                    position=score.position,
                    multiplied_points=score.multiplied_points or 0,
                ))
            lines.sort(key=lambda line: (line.tournament_date, line.tournament_id), reverse=True)
            
            week_scores = tuple(line for line in lines if week.contains(line.tournament_date))
            month_scores = [line for line in lines if month.contains(line.tournament_date)]
            season_scores = tuple(line for line in lines if season.contains(line.tournament_date))
            
            is_captain = pick.captain_id is not None and golfer_id == pick.captain_id
            multiplier = ScoringConstants.CAPTAIN_MULTIPLIER if is_captain else 1
            breakdown.append(GolferBreakdown(
                golfer_id=golfer_id,
                is_captain=is_captain,
                week_points=sum(line.multiplied_points for line in week_scores) * multiplier,
                month_points=sum(line.multiplied_points for line in month_scores) * multiplier,
                season_points=sum(line.multiplied_points for line in season_scores) * multiplier,
                week_scores=week_scores,
                season_scores=season_scores,
            ))
        
        breakdown.sort(key=lambda golfer: -golfer.week_points)
        return breakdown
    
    def _scoring_tournament_dates(self, season: int, tournaments: Iterable[TournamentRecord]) -> Dict[str, datetime]:
        """Start dates of the season's published or complete tournaments."""
        return {
            t.id: to_league_time(t.start_date, self.timezone_name)
            for t in tournaments
            if t.counts_for_scoring and t.season == season
        }
    
    def _index_scores(self, scores: Iterable[ScoreRecord], tournament_dates: Dict[str, datetime]) -> Dict[str, Dict[str, ScoreRecord]]:
        """Participated scores on scoring tournaments, keyed by golfer then tournament."""
        index: Dict[str, Dict[str, ScoreRecord]] = {}
        skipped = 0
        for score in scores:
            if not score.participated:
                continue
            if score.tournament_id not in tournament_dates:
                skipped += 1
                continue
            index.setdefault(score.golfer_id, {})[score.tournament_id] = score
        
        if skipped:
            logger.debug(f"Ignored {skipped} participated scores on non-scoring or unknown tournaments")
        return index
    
    def _season_picks(self, season: int, picks: Iterable[PickRecord]) -> Dict[str, PickRecord]:
        picks_by_user: Dict[str, PickRecord] = {}
        for pick in picks:
            if pick.season != season:
                continue
            if pick.user_id in picks_by_user:
                logger.warning(f"User {pick.user_id} has more than one pick for season {season}, using the last one")
            picks_by_user[pick.user_id] = pick
        return picks_by_user
