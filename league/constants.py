"""
League-wide constants for the fantasy golf scoring engine.

This module contains the fixed calendar conventions, scoring rules and
validation thresholds used throughout the codebase.
"""

from datetime import datetime


class CalendarConstants:
    """Constants for period boundaries."""
    
    # datetime.weekday() value for Saturday; weeks run Saturday to Friday
    WEEK_ANCHOR_WEEKDAY = 5
    DAYS_PER_WEEK = 7
    
    # Teams become eligible at this hour on the Saturday after creation
    ELIGIBILITY_HOUR = 8
    
    # Effective start for teams with no usable creation time
    GRANDFATHERED_START = datetime(2000, 1, 1)
    
    # Period types
    PERIOD_WEEK = "week"
    PERIOD_MONTH = "month"
    PERIOD_SEASON = "season"
    PERIOD_TYPES = (PERIOD_WEEK, PERIOD_MONTH, PERIOD_SEASON)


class ScoringConstants:
    """Constants for tournament scoring."""
    
    # Tournament lifecycle
    STATUS_DRAFT = "draft"
    STATUS_PUBLISHED = "published"
    STATUS_COMPLETE = "complete"
    
    # Only these tournaments count towards leaderboards
    SCORING_STATUSES = frozenset({STATUS_PUBLISHED, STATUS_COMPLETE})
    
    # Scoring formats
    FORMAT_STABLEFORD = "stableford"
    FORMAT_MEDAL = "medal"
    
    # Team views double the captain's points
    CAPTAIN_MULTIPLIER = 2


class ValidationConstants:
    """Constants for bulk score entry validation."""
    
    MIN_POSITION = 1
    MAX_POSITION = 100
    
    # Podium positions that must be unique among participants
    PODIUM_POSITIONS = (1, 2, 3)
    
    # Participant count tiers: upper bound of the small and medium tiers
    SMALL_FIELD_MAX = 10
    MEDIUM_FIELD_MAX = 19


class SettingKeys:
    """Keys in the settings table."""
    
    CURRENT_SEASON = "currentSeason"
    SEASON_START_DATE = "seasonStartDate"
    SEASON_END_DATE = "seasonEndDate"
