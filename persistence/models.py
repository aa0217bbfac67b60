"""SQLAlchemy models for persistent run history."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Run(Base):
    __tablename__ = "runs"

    id = Column(String(36), primary_key=True)
    mode = Column(String(16), nullable=False)  # run | regenerate
    target_url = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="running")  # running | completed | failed
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime, nullable=True)
    pages = Column(Integer, nullable=False, default=0)
    components = Column(Integer, nullable=False, default=0)
    artifacts = Column(Integer, nullable=False, default=0)
    defects = Column(Integer, nullable=False, default=0)
    placeholders = Column(Integer, nullable=False, default=0)
    total_tokens = Column(Integer, nullable=False, default=0)
    cost_usd = Column(Float, nullable=False, default=0.0)
    error = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Run {self.id} mode={self.mode} status={self.status} cost=${self.cost_usd:.6f}>"
