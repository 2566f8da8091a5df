"""
Fantasy golf league scoring engine.

Turns per-tournament golfer scores into week, month and season leaderboards
for the users who picked those golfers.
"""

__version__ = "1.0.0"
