import json
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from league.config import Config
from league.data_models.scoring import ScoreEntry
from league.database.models import Base, Pick, Score, Setting, Tournament, User
from league.services.score_validation import ScoreEntryValidator, raise_if_repeated_golfer
from league.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url
        self.engine = None
        self.async_session = None
        
    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")
        
        database_url = Config.get_async_database_url(self.database_url)
        
        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
        )
        
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
        
        # Create all tables
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            
        self.logger.info("Database initialized successfully")
    
    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.async_session() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
    
    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.
        
        All operations within the context are committed together on success,
        or rolled back together on failure.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
    
    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")
    
    # User operations
    async def create_user(self, username: str, first_name: str = None, last_name: str = None) -> User:
        """Create a new user"""
        async with self.transaction() as session:
            user = User(username=username, first_name=first_name, last_name=last_name)
            session.add(user)
            await session.flush()
            await session.refresh(user)
            return user
    
    # Tournament operations
    async def create_tournament(self, name: str, start_date: datetime, end_date: datetime,
                                season: int, status: str = 'draft', multiplier: float = 1.0,
                                scoring_format: str = 'stableford') -> Tournament:
        """Create a tournament. Dates are league-local."""
        async with self.transaction() as session:
            tournament = Tournament(
                name=name,
                start_date=start_date,
                end_date=end_date,
                season=season,
                status=status,
                multiplier=multiplier,
                scoring_format=scoring_format,
            )
            session.add(tournament)
            await session.flush()
            await session.refresh(tournament)
            return tournament
    
    # Pick operations
    async def save_pick(self, user_id: int, season: int, golfer_ids: Iterable[str],
                        total_spent: float = 0, captain_id: str = None,
                        created_at: Optional[datetime] = None) -> Pick:
        """
        Create or replace a user's pick for a season.
        
        ``created_at`` is naive UTC; an existing pick keeps its original creation time.
        """
        async with self.transaction() as session:
            result = await session.execute(
                select(Pick).where(Pick.user_id == user_id, Pick.season == season)
            )
            pick = result.scalar_one_or_none()
            
            if pick is None:
                pick = Pick(user_id=user_id, season=season)
                if created_at is not None:
                    pick.created_at = created_at
                session.add(pick)
            
            pick.golfer_ids = [str(golfer_id) for golfer_id in golfer_ids]
            pick.captain_id = captain_id
            pick.total_spent = total_spent
            await session.flush()
            await session.refresh(pick)
            return pick
    
    # Score operations
    async def save_scores(self, tournament_id: int, entries: List[ScoreEntry],
                          multiplied_points: Optional[Mapping[str, float]] = None) -> int:
        """
        Validate and store a tournament's score sheet.
        
        Args:
            tournament_id: Tournament the sheet belongs to
            entries: One row per golfer
            multiplied_points: Points per golfer id, already scaled by the tournament multiplier
            
        Returns:
            Number of score rows written
            
        Raises:
            ScoreInputError: If a golfer appears more than once; nothing is written
            ScoreValidationError: If the sheet fails validation; nothing is written
        """
        raise_if_repeated_golfer(entries)
        ScoreEntryValidator.validate(entries).raise_if_invalid()
        multiplied_points = multiplied_points or {}
        
        async with self.transaction() as session:
            result = await session.execute(
                select(Score).where(Score.tournament_id == tournament_id)
            )
            existing = {score.golfer_id: score for score in result.scalars()}
            
            for entry in entries:
                score = existing.get(entry.golfer_id)
                if score is None:
                    score = Score(tournament_id=tournament_id, golfer_id=entry.golfer_id)
                    session.add(score)
                score.participated = entry.participated
                score.position = entry.position if entry.participated else None
                score.scored_36_plus = entry.scored_36_plus
                score.multiplied_points = multiplied_points.get(entry.golfer_id, 0) if entry.participated else 0
        
        self.logger.info(f"Saved {len(entries)} scores for tournament {tournament_id}")
        return len(entries)
    
    # Setting operations
    async def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a JSON-decoded setting value"""
        async with self.get_session() as session:
            result = await session.execute(select(Setting).where(Setting.key == key))
            setting = result.scalar_one_or_none()
            if setting is None:
                return default
            try:
                return json.loads(setting.value)
            except json.JSONDecodeError:
                self.logger.warning(f"Invalid JSON for setting '{key}', using default")
                return default
    
    async def set_setting(self, key: str, value: Any):
        """Create or update a setting"""
        async with self.transaction() as session:
            result = await session.execute(select(Setting).where(Setting.key == key))
            setting = result.scalar_one_or_none()
            if setting is None:
                session.add(Setting(key=key, value=json.dumps(value)))
            else:
                setting.value = json.dumps(value)
