"""
Shared ranking utilities for period leaderboards.

Provides one ranking policy for every leaderboard type so that current and
previous snapshots are always ordered the same way and movement between them
is meaningful.

Ranking policy:
- Points descending, ties broken by user id ascending
- Rank is the 1-based position in that order; tied users do not share a rank
- Movement compares against the previous snapshot ranked with the same policy
"""

from typing import Dict, Iterable, List, Mapping, Optional

from league.data_models.leaderboard import LeaderboardEntry, Movement
from league.data_models.scoring import ParticipantTotals


class RankingEngine:
    """Positional ranking with movement tracking."""
    
    @staticmethod
    def sort_key(user_id, points):
        return (-points, str(user_id))
    
    @staticmethod
    def positional_ranks(points_by_user: Mapping[str, float]) -> Dict[str, int]:
        """Map each user id to its 1-based position under the ranking policy."""
        ordered = sorted(
            points_by_user.items(),
            key=lambda item: RankingEngine.sort_key(item[0], item[1])
        )
        return {user_id: index + 1 for index, (user_id, _) in enumerate(ordered)}
    
    @staticmethod
    def rank(
        points_map: Mapping[str, float],
        previous_points_map: Optional[Mapping[str, float]] = None
    ) -> List[LeaderboardEntry]:
        """
        Rank users by points and compute movement against a previous snapshot.
        
        Args:
            points_map: Points per user for the current period
            previous_points_map: Points per user for the period one step earlier,
                or None when movement does not apply (season boards)
                
        Returns:
            Leaderboard entries ordered by rank
        """
        totals = [ParticipantTotals(user_id, points) for user_id, points in points_map.items()]
        return RankingEngine.rank_totals(totals, previous_points_map)
    
    @staticmethod
    def rank_totals(
        totals: Iterable[ParticipantTotals],
        previous_points_map: Optional[Mapping[str, float]] = None
    ) -> List[LeaderboardEntry]:
        """Rank aggregated totals, carrying events played and team value through."""
        totals_by_user = {t.user_id: t for t in totals}
        ranks = RankingEngine.positional_ranks({uid: t.points for uid, t in totals_by_user.items()})
        previous_ranks = (
            RankingEngine.positional_ranks(previous_points_map)
            if previous_points_map is not None else {}
        )
        
        entries = []
        for user_id, rank in sorted(ranks.items(), key=lambda item: item[1]):
            total = totals_by_user[user_id]
            previous_rank = previous_ranks.get(user_id)
            movement, amount = RankingEngine.movement(previous_rank, rank)
            entries.append(LeaderboardEntry(
                user_id=user_id,
                points=total.points,
                rank=rank,
                previous_rank=previous_rank,
                movement=movement,
                movement_amount=amount,
                events_played=total.events_played,
                team_value=total.team_value,
            ))
        return entries
    
    @staticmethod
    def movement(previous_rank: Optional[int], rank: int):
        """Movement direction and distance between two ranks."""
        if previous_rank is None:
            return Movement.NEW, 0
        if previous_rank > rank:
            return Movement.UP, previous_rank - rank
        if previous_rank < rank:
            return Movement.DOWN, rank - previous_rank
        return Movement.SAME, 0
    
    @staticmethod
    def leader(entries: List[LeaderboardEntry]) -> Optional[LeaderboardEntry]:
        """The rank 1 entry, or None for an empty board."""
        return next((entry for entry in entries if entry.rank == 1), None)
