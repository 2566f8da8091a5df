import os
from datetime import datetime

import pytz
from dotenv import load_dotenv

load_dotenv()

class Config:
    """League configuration settings"""
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///league.db')
    
    # Runtime settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    
    # Calendar settings - all period boundaries are computed in this timezone
    LEAGUE_TIMEZONE = os.getenv('LEAGUE_TIMEZONE', 'Europe/London')
    
    # Season fallbacks, used only when the settings table has no value
    CURRENT_SEASON = int(os.getenv('CURRENT_SEASON', datetime.now().year))
    SEASON_START_DATE = os.getenv('SEASON_START_DATE', '')  # YYYY-MM-DD, defaults to Jan 1
    SEASON_END_DATE = os.getenv('SEASON_END_DATE', '')      # YYYY-MM-DD, defaults to Dec 31
    
    @classmethod
    def get_async_database_url(cls, database_url: str = None) -> str:
        """Get the database URL (the configured one by default) with an async driver for SQLite"""
        database_url = database_url or cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url
    
    @classmethod
    def get_timezone(cls):
        """Get the pytz timezone for the league"""
        return pytz.timezone(cls.LEAGUE_TIMEZONE)
    
    @classmethod
    def validate(cls):
        """Validate that configuration values are usable"""
        try:
            pytz.timezone(cls.LEAGUE_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"LEAGUE_TIMEZONE '{cls.LEAGUE_TIMEZONE}' is not a known timezone")
        
        for name in ('SEASON_START_DATE', 'SEASON_END_DATE'):
            value = getattr(cls, name)
            if value:
                try:
                    datetime.strptime(value, '%Y-%m-%d')
                except ValueError:
                    raise ValueError(f"{name} must be formatted as YYYY-MM-DD, got '{value}'")
