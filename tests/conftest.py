"""
Pytest configuration and fixtures for the league engine tests.

Unit tests run against plain records built with the factories below.
Service tests use a throwaway SQLite file database per test.
"""

import os
import tempfile
from datetime import datetime

# Configure the environment before any league module reads it
os.environ.setdefault("LEAGUE_TIMEZONE", "Europe/London")
os.environ.setdefault("CURRENT_SEASON", "2025")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="league-logs-"))

import pytest
import pytest_asyncio

from league.data_models.scoring import PickRecord, ScoreRecord, TournamentRecord
from league.database.database import Database
from league.utils.season_calendar import season_bounds

SEASON = 2025


def make_tournament(tournament_id, start, status="published", season=SEASON, name=None):
    return TournamentRecord(
        id=tournament_id,
        name=name or f"Tournament {tournament_id}",
        start_date=start,
        end_date=start,
        status=status,
        season=season,
    )


def make_score(tournament_id, golfer_id, points, participated=True, position=None):
    return ScoreRecord(
        tournament_id=tournament_id,
        golfer_id=golfer_id,
        participated=participated,
        multiplied_points=points,
        position=position,
    )


def make_pick(user_id, golfer_ids, created_at=None, season=SEASON, total_spent=0, captain_id=None):
    return PickRecord(
        user_id=user_id,
        season=season,
        golfer_ids=tuple(golfer_ids),
        captain_id=captain_id,
        created_at=created_at,
        total_spent=total_spent,
    )


@pytest.fixture
def season_2025():
    """Season running January 1st to December 31st 2025 (starts on a Wednesday)."""
    return season_bounds(SEASON)


@pytest.fixture
def league_data():
    """
    A small season around gameweek 2 (Sat Jan 11 - Fri Jan 17 2025).
    
    alice: legacy team (no creation time), golfers g1 + g2
    bob: created Monday Jan 13, so only eligible from Sat Jan 18 08:00
    carol: empty squad
    dave: pick for the previous season only
    erin: created Monday Jan 6, eligible from Sat Jan 11 08:00, golfer g3
    """
    tournaments = [
        make_tournament("t1", datetime(2025, 1, 12, 9, 0)),
        make_tournament("t2", datetime(2025, 1, 13, 9, 0), status="draft"),
        make_tournament("t3", datetime(2025, 1, 14, 9, 0), status="complete"),
        make_tournament("t4", datetime(2025, 1, 5, 9, 0)),
        make_tournament("t5", datetime(2025, 1, 12, 9, 0), season=2024),
        make_tournament("t6", datetime(2025, 1, 11, 7, 0)),
    ]
    scores = [
        make_score("t1", "g1", 10, position=1),
        make_score("t2", "g1", 50),
        make_score("t1", "g2", 99, participated=False),
        make_score("t3", "g2", 7),
        make_score("t4", "g1", 5),
        make_score("t5", "g1", 100),
        make_score("t6", "g3", 20),
        make_score("ghost", "g1", 1000),
    ]
    picks = [
        make_pick("alice", ["g1", "g2"], total_spent=95.5),
        make_pick("bob", ["g1"], created_at=datetime(2025, 1, 13, 12, 0)),
        make_pick("carol", []),
        make_pick("dave", ["g1"], season=2024),
        make_pick("erin", ["g3"], created_at=datetime(2025, 1, 6, 10, 0)),
    ]
    return tournaments, picks, scores


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'league_test.db'}")
    await db.initialize()
    yield db
    await db.close()
