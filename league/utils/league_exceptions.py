"""
Custom exceptions for the league engine with user-facing error messages.
"""

class LeagueException(Exception):
    """Base exception for league-related errors."""
    status_code = 400
    
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidPeriodError(LeagueException):
    """Raised when a leaderboard period cannot be resolved."""
    def __init__(self, period_type: str, reason: str = None):
        super().__init__(
            f"Invalid period '{period_type}': {reason or 'unknown period type'}",
            "Period must be one of week, month or season with a valid date."
        )
        self.period_type = period_type

class ScoreInputError(LeagueException):
    """Raised when a score submission payload is malformed."""
    def __init__(self, index: int, reason: str):
        super().__init__(
            f"Malformed score entry at index {index}: {reason}",
            f"Score entry {index + 1}: {reason}"
        )
        self.index = index

class ScoreValidationError(LeagueException):
    """Raised when a score submission fails validation."""
    status_code = 422
    
    def __init__(self, reason: str):
        super().__init__(
            f"Score submission rejected: {reason}",
            reason
        )
        self.reason = reason

class SeasonConfigurationError(LeagueException):
    """Raised when season settings cannot be parsed."""
    status_code = 500
    
    def __init__(self, key: str, value):
        super().__init__(
            f"Season setting '{key}' has unusable value {value!r}",
            "Season is not configured correctly. Please contact an admin."
        )
        self.key = key
