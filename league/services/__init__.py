"""
Services package for the league engine.

Pure scoring services (aggregation, navigation, score validation) plus the
database-backed leaderboard service that feeds them.
"""

from .base import BaseService
from .aggregation import ScoreAggregator
from .navigation import PeriodNavigator
from .score_validation import ScoreEntryValidator, parse_score_entries
from .leaderboard import LeaderboardService

__all__ = [
    'BaseService',
    'ScoreAggregator',
    'PeriodNavigator',
    'ScoreEntryValidator',
    'parse_score_entries',
    'LeaderboardService',
]
