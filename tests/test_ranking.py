"""
Unit tests for the ranking engine.
"""

from league.data_models.leaderboard import Movement
from league.data_models.scoring import ParticipantTotals
from league.utils.ranking import RankingEngine


class TestPositionalRanks:
    def test_ties_do_not_share_rank(self):
        entries = RankingEngine.rank({"A": 30, "B": 30, "C": 10})
        assert [e.user_id for e in entries] == ["A", "B", "C"]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_ties_are_broken_by_user_id(self):
        entries = RankingEngine.rank({"B": 30, "C": 10, "A": 30})
        assert [e.user_id for e in entries] == ["A", "B", "C"]

    def test_points_descending(self):
        entries = RankingEngine.rank({"A": 5, "B": 50, "C": 20})
        assert [(e.user_id, e.rank) for e in entries] == [("B", 1), ("C", 2), ("A", 3)]

    def test_empty_board(self):
        assert RankingEngine.rank({}) == []
        assert RankingEngine.leader([]) is None


class TestMovement:
    def test_up_and_down(self):
        previous = {"X": 50, "Y": 40, "Z": 30}
        current = {"Z": 100, "X": 50, "Y": 40, "W": 1}
        entries = {e.user_id: e for e in RankingEngine.rank(current, previous)}

        assert entries["Z"].movement == Movement.UP
        assert entries["Z"].movement_amount == 2
        assert entries["Z"].previous_rank == 3
        assert entries["X"].movement == Movement.DOWN
        assert entries["X"].movement_amount == 1

    def test_unchanged_rank_is_same(self):
        entries = RankingEngine.rank({"A": 10, "B": 5}, {"A": 3, "B": 1})
        assert [e.movement for e in entries] == [Movement.SAME, Movement.SAME]
        assert [e.movement_amount for e in entries] == [0, 0]

    def test_user_missing_from_previous_board_is_new(self):
        entries = {e.user_id: e for e in RankingEngine.rank({"A": 10, "B": 5}, {"A": 1})}
        assert entries["B"].movement == Movement.NEW
        assert entries["B"].previous_rank is None
        assert entries["B"].movement_amount == 0

    def test_without_previous_board_everyone_is_new(self):
        entries = RankingEngine.rank({"A": 10, "B": 5})
        assert all(e.movement == Movement.NEW for e in entries)

    def test_previous_ties_use_same_policy(self):
        # Previously tied on 0: A placed 1st and B 2nd by user id
        entries = {e.user_id: e for e in RankingEngine.rank({"A": 5, "B": 10}, {"B": 0, "A": 0})}
        assert entries["B"].movement == Movement.UP
        assert entries["A"].movement == Movement.DOWN


class TestRankTotals:
    def test_carries_events_and_team_value(self):
        totals = [
            ParticipantTotals("A", 10, events_played=2, team_value=90),
            ParticipantTotals("B", 20, events_played=1, team_value=80),
        ]
        entries = RankingEngine.rank_totals(totals)
        assert entries[0].user_id == "B"
        assert entries[0].events_played == 1
        assert entries[1].team_value == 90

    def test_leader(self):
        entries = RankingEngine.rank({"A": 10, "B": 20})
        assert RankingEngine.leader(entries).user_id == "B"
