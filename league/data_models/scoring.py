"""
Scoring records consumed by the aggregation engine.

Immutable snapshots of tournaments, golfer scores and team picks. The storage
layer converts its rows into these before any leaderboard is computed.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from league.constants import ScoringConstants
from league.utils.league_exceptions import ScoreValidationError


@dataclass(frozen=True)
class TournamentRecord:
    """A tournament as seen by the scoring engine."""
    id: str
    name: str
    start_date: datetime
    end_date: datetime
    status: str
    season: int
    multiplier: float = 1.0
    scoring_format: str = ScoringConstants.FORMAT_STABLEFORD
    
    @property
    def counts_for_scoring(self) -> bool:
        return self.status in ScoringConstants.SCORING_STATUSES


@dataclass(frozen=True)
class ScoreRecord:
    """One golfer's result in one tournament."""
    tournament_id: str
    golfer_id: str
    participated: bool
    multiplied_points: float = 0
    position: Optional[int] = None
    raw_score: Optional[float] = None


@dataclass(frozen=True)
class PickRecord:
    """A user's squad for one season."""
    user_id: str
    season: int
    golfer_ids: Tuple[str, ...] = ()
    captain_id: Optional[str] = None
    created_at: Union[datetime, str, None] = None
    total_spent: float = 0


@dataclass(frozen=True)
class ParticipantTotals:
    """Aggregated points for one user over one period."""
    user_id: str
    points: float
    events_played: int = 0
    team_value: float = 0


@dataclass(frozen=True)
class ScoreEntry:
    """Single row of a bulk score submission."""
    golfer_id: str
    participated: bool = False
    position: Optional[int] = None
    scored_36_plus: bool = False


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a bulk score submission."""
    is_valid: bool
    message: Optional[str] = None
    participant_count: int = 0
    tier: Optional[str] = None
    
    @classmethod
    def ok(cls, participant_count: int, tier: str) -> 'ValidationResult':
        return cls(True, None, participant_count, tier)
    
    @classmethod
    def fail(cls, message: str, participant_count: int = 0, tier: Optional[str] = None) -> 'ValidationResult':
        return cls(False, message, participant_count, tier)
    
    def raise_if_invalid(self):
        """Raise ScoreValidationError so the HTTP layer can answer 422."""
        if not self.is_valid:
            raise ScoreValidationError(self.message)


@dataclass(frozen=True)
class LeagueSnapshot:
    """The four input collections for one season, read together."""
    season: int
    tournaments: Tuple[TournamentRecord, ...]
    picks: Tuple[PickRecord, ...]
    scores: Tuple[ScoreRecord, ...]
    user_ids: frozenset = frozenset()
