"""
SQLAlchemy ORM Models for the SRS Database

Defines the review_state and review_events tables.
"""

from sqlalchemy import Column, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ReviewStateRow(Base):
    """
    Persistent SM-2 state for a single vocabulary item of one user.
    """
    __tablename__ = 'review_state'
    __table_args__ = (
        UniqueConstraint('user_id', 'item_id', name='uq_review_state_user_item'),
    )

    # Surrogate key; also records insertion order for due-queue tie breaks
    seq = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(String(255), nullable=False)
    item_id = Column(String(255), nullable=False)

    # SM-2 parameters
    level = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False)
    interval = Column(Integer, nullable=False)

    # ISO-8601 timestamps (UTC)
    next_review_at = Column(String(64), nullable=False)
    last_reviewed_at = Column(String(64), nullable=False)

    # Review tracking
    review_count = Column(Integer, nullable=False, default=0)
    correct_count = Column(Integer, nullable=False, default=0)
    incorrect_count = Column(Integer, nullable=False, default=0)

    # Bumped on every write; the ORM rejects an UPDATE whose row changed since it was read
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<ReviewStateRow({self.user_id}, {self.item_id}, level={self.level})>"


class ReviewEventRow(Base):
    """
    Log entry for a single recorded review.
    """
    __tablename__ = 'review_events'
    __table_args__ = (
        Index('idx_review_events_user_item', 'user_id', 'item_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(String(255), nullable=False)
    item_id = Column(String(255), nullable=False)

    reviewed_at = Column(String(64), nullable=False)
    quality = Column(Integer, nullable=False)  # 0-5

    # State before review
    level_before = Column(Integer, nullable=False)
    ease_before = Column(Float, nullable=False)
    interval_before = Column(Integer, nullable=False)

    # State after review
    level_after = Column(Integer, nullable=False)
    ease_after = Column(Float, nullable=False)
    interval_after = Column(Integer, nullable=False)

    is_new_item = Column(Integer, nullable=False, default=0)  # 1 if bootstrapped by this review

    def __repr__(self):
        return f"<ReviewEventRow(id={self.id}, {self.item_id}, quality={self.quality})>"
