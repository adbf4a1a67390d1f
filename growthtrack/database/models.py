"""SQLAlchemy ORM models for GrowthTrack."""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class SessionLog(Base):
    """One finished timer session (rest, meditation or PT exercise)."""

    __tablename__ = "session_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(20), nullable=False)  # rest | meditation | pt_exercise
    started_at = Column(DateTime, nullable=True)
    ended_at = Column(DateTime, nullable=False, default=datetime.now)
    sets_completed = Column(Integer, nullable=False, default=0)
    total_sets = Column(Integer, nullable=False, default=1)
    elapsed_seconds = Column(Integer, nullable=False, default=0)
    skipped_early = Column(Boolean, nullable=False, default=False)
    difficulty = Column(Integer, nullable=True)
    pain_level = Column(String(20), nullable=True)
    synced = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return (
            f"<SessionLog id={self.id} kind={self.kind} "
            f"sets={self.sets_completed}/{self.total_sets} synced={self.synced}>"
        )
