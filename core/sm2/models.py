"""
SQLAlchemy ORM Models for SM-2 Progress

Defines ItemProgress and ReviewEvent models for Postgres persistence.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ItemProgressRow(Base):
    """
    Persistent SM-2 state for a single (learner, item) pair.

    The composite primary key allows at most one row per pair.
    """
    __tablename__ = 'item_progress'

    learner_id = Column(String(255), primary_key=True, nullable=False)
    item_id = Column(String(255), primary_key=True, nullable=False)

    state = Column(String(20), nullable=False)
    easiness_factor = Column(Float, nullable=False)
    interval_days = Column(Integer, nullable=False)
    repetitions = Column(Integer, nullable=False, default=0)
    lapses = Column(Integer, nullable=False, default=0)
    learning_step = Column(Integer, nullable=False, default=0)
    is_leech = Column(Boolean, nullable=False, default=False)

    next_review_date = Column(DateTime(timezone=True), nullable=False, index=True)
    last_reviewed_date = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ItemProgressRow({self.learner_id}, {self.item_id}, {self.state})>"


class ReviewEvent(Base):
    """
    Log entry for a single rating of an item.

    Append-only; captures the rating and the state it produced.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)

    learner_id = Column(String(255), nullable=False, index=True)
    item_id = Column(String(255), nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False)
    rating = Column(Integer, nullable=False)  # 0=AGAIN, 1=HARD, 2=GOOD, 3=EASY

    state_before = Column(String(20), nullable=False)
    state_after = Column(String(20), nullable=False)
    easiness_factor_after = Column(Float, nullable=False)
    interval_days_after = Column(Integer, nullable=False)
    interval_minutes_after = Column(Integer, nullable=False)
    lapses_after = Column(Integer, nullable=False)
    is_leech = Column(Boolean, nullable=False)

    session_id = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<ReviewEvent(id={self.id}, {self.item_id}, rating={self.rating})>"
