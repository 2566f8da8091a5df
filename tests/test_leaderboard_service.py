"""
Service tests for leaderboards backed by a SQLite database.

Season 2025 runs January 1st to December 31st, so gameweek 1 starts on
Saturday January 4th.

alice (golfers g1, g2, captain g1) and bob (golfer g3) have picks created
well before the season; carol has no pick.

Week of Jan 4:  alice 30, bob 20
Week of Jan 11: bob 50, alice 10 (the Jan 13 draft tournament never counts)
"""

from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from league.data_models.leaderboard import Movement
from league.data_models.scoring import ScoreEntry
from league.database.models import Score, Tournament
from league.services.leaderboard import LeaderboardService
from league.utils.league_exceptions import InvalidPeriodError, ScoreValidationError, SeasonConfigurationError

NOW = datetime(2025, 1, 20, 12, 0)


@pytest_asyncio.fixture
async def seeded(database):
    await database.set_setting("currentSeason", 2025)
    await database.set_setting("seasonStartDate", "2025-01-01")
    await database.set_setting("seasonEndDate", "2025-12-31")

    alice = await database.create_user("alice")
    bob = await database.create_user("bob")
    carol = await database.create_user("carol")

    await database.save_pick(alice.id, 2025, ["g1", "g2"], total_spent=90, captain_id="g1",
                             created_at=datetime(2024, 12, 1))
    await database.save_pick(bob.id, 2025, ["g3"], total_spent=80, created_at=datetime(2024, 12, 1))

    t1 = await database.create_tournament("Opening", datetime(2025, 1, 5, 10, 0), datetime(2025, 1, 5, 18, 0),
                                          2025, status="published")
    t2 = await database.create_tournament("Classic", datetime(2025, 1, 12, 10, 0), datetime(2025, 1, 12, 18, 0),
                                          2025, status="complete")
    t3 = await database.create_tournament("Unreleased", datetime(2025, 1, 13, 10, 0), datetime(2025, 1, 13, 18, 0),
                                          2025, status="draft")

    await database.save_scores(t1.id, [
        ScoreEntry("g1", participated=True, position=1),
        ScoreEntry("g3", participated=True, position=2),
    ], {"g1": 30, "g3": 20})
    await database.save_scores(t2.id, [
        ScoreEntry("g3", participated=True, position=1),
        ScoreEntry("g2", participated=True, position=2),
    ], {"g3": 50, "g2": 10})
    await database.save_scores(t3.id, [
        ScoreEntry("g1", participated=True, position=1),
    ], {"g1": 100})

    service = LeaderboardService(database.async_session, "Europe/London")
    return service, {"alice": str(alice.id), "bob": str(bob.id), "carol": str(carol.id)}


async def tournament_id(database, name):
    async with database.get_session() as session:
        return await session.scalar(select(Tournament.id).where(Tournament.name == name))


class TestSeasonBounds:
    async def test_bounds_from_settings(self, seeded):
        service, _ = seeded
        bounds = await service.get_season_bounds()
        assert bounds.year == 2025
        assert bounds.start == datetime(2025, 1, 1)
        assert bounds.end.date() == datetime(2025, 12, 31).date()

    async def test_timestamped_season_dates_keep_their_calendar_day(self, database):
        await database.set_setting("currentSeason", 2025)
        await database.set_setting("seasonStartDate", "2025-01-01T00:00:00Z")
        await database.set_setting("seasonEndDate", "2025-12-31T00:00:00.000Z")
        service = LeaderboardService(database.async_session, "America/New_York")

        bounds = await service.get_season_bounds()
        assert bounds.start == datetime(2025, 1, 1)
        assert bounds.end.date() == datetime(2025, 12, 31).date()

    async def test_unparseable_start_date(self, database):
        await database.set_setting("seasonStartDate", "not-a-date")
        service = LeaderboardService(database.async_session)
        with pytest.raises(SeasonConfigurationError) as exc_info:
            await service.get_season_bounds()
        assert exc_info.value.status_code == 500

    async def test_inverted_season(self, database):
        await database.set_setting("currentSeason", 2025)
        await database.set_setting("seasonStartDate", "2025-06-01")
        await database.set_setting("seasonEndDate", "2025-01-01")
        service = LeaderboardService(database.async_session)
        with pytest.raises(SeasonConfigurationError):
            await service.get_season_bounds()


class TestPeriodLeaderboard:
    async def test_first_gameweek(self, seeded):
        service, users = seeded
        page = await service.get_period_leaderboard("week", "2025-01-06", now=NOW)

        assert page.period.gameweek_number == 1
        assert page.period.label == "Gameweek 1: Sat, Jan 4, 2025"
        assert [(e.user_id, e.points, e.rank) for e in page.entries] == [
            (users["alice"], 30, 1),
            (users["bob"], 20, 2),
        ]
        assert all(e.movement == Movement.SAME for e in page.entries)
        assert page.navigation.has_previous is False
        assert page.navigation.has_next is True

    async def test_second_gameweek_movement(self, seeded):
        service, users = seeded
        page = await service.get_period_leaderboard("week", datetime(2025, 1, 14), now=NOW)
        entries = {e.user_id: e for e in page.entries}

        assert entries[users["bob"]].rank == 1
        assert entries[users["bob"]].points == 50
        assert entries[users["bob"]].movement == Movement.UP
        assert entries[users["bob"]].movement_amount == 1
        assert entries[users["alice"]].points == 10
        assert entries[users["alice"]].movement == Movement.DOWN
        assert page.tournament_count == 1
        assert page.navigation.has_previous is True
        assert page.navigation.has_next is True

    async def test_season_leaderboard(self, seeded):
        service, users = seeded
        page = await service.get_period_leaderboard("season", now=NOW)

        assert [(e.user_id, e.points) for e in page.entries] == [(users["bob"], 70), (users["alice"], 40)]
        assert all(e.movement == Movement.NEW for e in page.entries)
        assert page.tournament_count == 2
        assert page.navigation.has_previous is False
        assert page.navigation.has_next is False

    async def test_users_without_picks_are_not_ranked(self, seeded):
        service, users = seeded
        page = await service.get_period_leaderboard("month", "2025-01-15", now=NOW)
        assert users["carol"] not in {e.user_id for e in page.entries}

    async def test_repeated_calls_agree(self, seeded):
        service, _ = seeded
        first = await service.get_period_leaderboard("month", "2025-01-15", now=NOW)
        second = await service.get_period_leaderboard("month", "2025-01-15", now=NOW)
        assert first == second

    async def test_new_scores_show_up_immediately(self, seeded, database):
        service, users = seeded
        t4 = await database.create_tournament("Late", datetime(2025, 1, 15, 9, 0), datetime(2025, 1, 15, 18, 0),
                                              2025, status="published")
        await database.save_scores(t4.id, [ScoreEntry("g1", participated=True, position=1)], {"g1": 45})

        page = await service.get_period_leaderboard("week", "2025-01-14", now=NOW)
        assert page.entries[0].user_id == users["alice"]
        assert page.entries[0].points == 55

    @pytest.mark.parametrize("period_type,reference", [("fortnight", None), ("week", "garbage"), ("week", 20250106)])
    async def test_invalid_period(self, seeded, period_type, reference):
        service, _ = seeded
        with pytest.raises(InvalidPeriodError):
            await service.get_period_leaderboard(period_type, reference, now=NOW)


class TestLeadersAndStats:
    async def test_leaders(self, seeded):
        service, users = seeded
        leaders = await service.get_leaders(now=datetime(2025, 1, 14, 9, 0))

        assert leaders.weekly_leader.user_id == users["bob"]
        assert leaders.monthly_leader.user_id == users["bob"]
        assert leaders.season_leader.user_id == users["bob"]
        assert leaders.current_week.gameweek_number == 2
        assert leaders.current_month.label == "January 2025"
        assert leaders.week_navigation.has_next is False

    async def test_stats_for_user_without_team(self, seeded):
        service, users = seeded
        stats = await service.get_user_period_stats(users["carol"], "week", now=NOW)
        assert stats.has_team is False
        assert stats.points == 0
        assert stats.events_played == 0
        assert stats.rank is None

    async def test_season_stats(self, seeded):
        service, users = seeded
        stats = await service.get_user_period_stats(int(users["alice"]), "season", now=NOW)
        assert stats.has_team is True
        assert stats.points == 40
        assert stats.rank == 2
        assert stats.events_played == 2

    async def test_period_options(self, seeded):
        service, users = seeded
        options = await service.get_period_options(users["alice"], now=NOW)
        assert [o.value for o in options["weeks"]] == ["2025-01-18", "2025-01-11", "2025-01-04"]
        assert [o.label for o in options["months"]] == ["January 2025"]


class TestScoreSubmission:
    async def test_invalid_sheet_writes_nothing(self, seeded, database):
        tournament = await database.create_tournament("Rejected", datetime(2025, 2, 1, 9, 0),
                                                      datetime(2025, 2, 1, 18, 0), 2025)
        entries = [ScoreEntry(f"g{i}", participated=True, position=1 if i == 0 else None) for i in range(12)]

        with pytest.raises(ScoreValidationError) as exc_info:
            await database.save_scores(tournament.id, entries)
        assert "both 1st and 2nd place" in exc_info.value.user_message

        async with database.get_session() as session:
            count = await session.scalar(
                select(func.count()).select_from(Score).where(Score.tournament_id == tournament.id)
            )
        assert count == 0

    async def test_resubmission_replaces_scores(self, seeded, database):
        service, users = seeded
        page = await service.get_period_leaderboard("week", "2025-01-06", now=NOW)
        assert page.entries[0].points == 30

        tournament_id = int((await service.load_snapshot(2025)).tournaments[0].id)
        await database.save_scores(tournament_id, [
            ScoreEntry("g1", participated=True, position=2),
            ScoreEntry("g3", participated=True, position=1),
        ], {"g1": 5, "g3": 60})

        page = await service.get_period_leaderboard("week", "2025-01-06", now=NOW)
        assert page.entries[0].user_id == users["bob"]
        assert page.entries[0].points == 60


class TestTournamentLeaderboard:
    async def test_ranked_by_points_in_that_tournament(self, seeded, database):
        service, users = seeded
        board = await service.get_tournament_leaderboard(await tournament_id(database, "Opening"))

        assert board.tournament.name == "Opening"
        assert [(e.user_id, e.points, e.rank) for e in board.entries] == [
            (users["alice"], 30, 1),
            (users["bob"], 20, 2),
        ]

    async def test_accepts_string_ids(self, seeded, database):
        service, users = seeded
        board = await service.get_tournament_leaderboard(str(await tournament_id(database, "Classic")))
        assert [(e.user_id, e.points) for e in board.entries] == [(users["bob"], 50), (users["alice"], 10)]

    async def test_draft_tournament_has_empty_board(self, seeded, database):
        service, _ = seeded
        board = await service.get_tournament_leaderboard(await tournament_id(database, "Unreleased"))
        assert board.tournament is None
        assert board.entries == []

    async def test_unknown_tournament(self, seeded):
        service, _ = seeded
        board = await service.get_tournament_leaderboard(9999)
        assert board.tournament is None
        assert board.entries == []


class TestTeamBreakdown:
    async def test_captain_doubles_own_points(self, seeded):
        service, users = seeded
        team = await service.get_team_breakdown(users["alice"], "2025-01-06", now=NOW)

        assert team.has_team is True
        assert team.captain_id == "g1"
        assert team.week.gameweek_number == 1
        assert team.month.label == "January 2025"

        captain, other = team.golfers
        assert captain.golfer_id == "g1"
        assert captain.is_captain
        assert (captain.week_points, captain.month_points, captain.season_points) == (60, 60, 60)
        assert [line.tournament_name for line in captain.week_scores] == ["Opening"]
        assert other.golfer_id == "g2"
        assert (other.week_points, other.month_points, other.season_points) == (0, 10, 10)

    async def test_captain_does_not_change_leaderboards(self, seeded):
        service, users = seeded
        page = await service.get_period_leaderboard("season", now=NOW)
        assert {e.user_id: e.points for e in page.entries}[users["alice"]] == 40

    async def test_user_without_team(self, seeded):
        service, users = seeded
        team = await service.get_team_breakdown(users["carol"], now=NOW)
        assert team.has_team is False
        assert team.golfers == []
        assert team.week.start == datetime(2025, 1, 18)
