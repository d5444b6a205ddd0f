from sqlalchemy import Column, Integer, String, Float, Text, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from app.db import Base
from app.models.snapshot import MovieSnapshotMixin


class EmailWatchlistEntry(MovieSnapshotMixin, Base):
    """Flat per-user watchlist that predates multi-list watchlists"""
    __tablename__ = "email_watchlist"
    __table_args__ = (
        UniqueConstraint("movie_id", "user_email", name="email_movie_id_idx"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class WatchedMovie(MovieSnapshotMixin, Base):
    __tablename__ = "watched_movies"
    __table_args__ = (
        UniqueConstraint("movie_id", "user_email", name="watched_movie_id_user_idx"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    watched_at = Column(DateTime(timezone=True), server_default=func.now())
    comment = Column(Text, nullable=True)
    rating = Column(Float, nullable=True)
