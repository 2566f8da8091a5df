from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Text, Float, JSON,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone
import pytz

from league.constants import ScoringConstants
from league.data_models.scoring import PickRecord, ScoreRecord, TournamentRecord

Base = declarative_base()

def utc_now() -> datetime:
    """Naive UTC timestamp; all *_at columns are stored in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def _as_utc(value):
    return pytz.utc.localize(value) if value is not None else None

class User(Base):
    __tablename__ = 'users'
    
    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    
    # Metadata
    created_at = Column(DateTime, default=utc_now)
    
    picks = relationship("Pick", back_populates="user", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"

class Tournament(Base):
    __tablename__ = 'tournaments'
    
    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    
    # Tournament dates are league-local calendar times, not UTC
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    
    status = Column(String(20), nullable=False, default=ScoringConstants.STATUS_DRAFT)
    season = Column(Integer, nullable=False, index=True)
    multiplier = Column(Float, nullable=False, default=1.0)
    scoring_format = Column(String(20), nullable=False, default=ScoringConstants.FORMAT_STABLEFORD)
    
    # Metadata
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    
    scores = relationship("Score", back_populates="tournament", cascade="all, delete-orphan")
    
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'complete')", name='ck_tournament_status'),
        CheckConstraint("scoring_format IN ('stableford', 'medal')", name='ck_tournament_format'),
    )
    
    def to_record(self) -> TournamentRecord:
        return TournamentRecord(
            id=str(self.id),
            name=self.name,
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
            season=self.season,
            multiplier=self.multiplier,
            scoring_format=self.scoring_format,
        )
    
    def __repr__(self):
        return f"<Tournament(name='{self.name}', season={self.season}, status='{self.status}')>"

class Score(Base):
    __tablename__ = 'scores'
    
    id = Column(Integer, primary_key=True)
    tournament_id = Column(Integer, ForeignKey('tournaments.id'), nullable=False, index=True)
    golfer_id = Column(String(64), nullable=False, index=True)
    
    participated = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=True)
    raw_score = Column(Float, nullable=True)
    scored_36_plus = Column(Boolean, nullable=False, default=False)
    
    # Points are calculated upstream and already include the tournament multiplier
    multiplied_points = Column(Float, nullable=False, default=0)
    
    # Metadata
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    
    tournament = relationship("Tournament", back_populates="scores")
    
    __table_args__ = (
        UniqueConstraint('tournament_id', 'golfer_id', name='uq_score_tournament_golfer'),
        CheckConstraint('position IS NULL OR (position >= 1 AND position <= 100)', name='ck_score_position'),
    )
    
    def to_record(self) -> ScoreRecord:
        return ScoreRecord(
            tournament_id=str(self.tournament_id),
            golfer_id=self.golfer_id,
            participated=bool(self.participated),
            multiplied_points=self.multiplied_points or 0,
            position=self.position,
            raw_score=self.raw_score,
        )
    
    def __repr__(self):
        return f"<Score(tournament_id={self.tournament_id}, golfer_id='{self.golfer_id}', points={self.multiplied_points})>"

class Pick(Base):
    __tablename__ = 'picks'
    
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    season = Column(Integer, nullable=False, index=True)
    
    # Ordered squad of golfer ids
    golfer_ids = Column(JSON, nullable=False, default=list)
    captain_id = Column(String(64), nullable=True)
    total_spent = Column(Float, nullable=False, default=0)
    
    # Legacy teams have no creation time and are grandfathered in
    created_at = Column(DateTime, nullable=True, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    
    user = relationship("User", back_populates="picks")
    
    __table_args__ = (UniqueConstraint('user_id', 'season', name='uq_pick_user_season'),)
    
    def to_record(self) -> PickRecord:
        return PickRecord(
            user_id=str(self.user_id),
            season=self.season,
            golfer_ids=tuple(str(golfer_id) for golfer_id in (self.golfer_ids or [])),
            captain_id=self.captain_id,
            created_at=_as_utc(self.created_at),
            total_spent=self.total_spent or 0,
        )
    
    def __repr__(self):
        return f"<Pick(user_id={self.user_id}, season={self.season}, golfers={len(self.golfer_ids or [])})>"

class Setting(Base):
    __tablename__ = 'settings'
    
    id = Column(Integer, primary_key=True)
    key = Column(String(100), nullable=False, unique=True)
    value = Column(Text, nullable=False)  # JSON-encoded
    
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    
    def __repr__(self):
        return f"<Setting(key='{self.key}', value={self.value})>"
