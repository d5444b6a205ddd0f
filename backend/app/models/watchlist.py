from sqlalchemy import Column, Integer, ForeignKey, String, Text, Boolean, DateTime, Index, UniqueConstraint, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db import Base
from app.models.snapshot import MovieSnapshotMixin

DEFAULT_WATCHLIST_NAME = "Невідсортоване"
DEFAULT_WATCHLIST_DESCRIPTION = "Фільми без категорії"
DEFAULT_COLOR = "#3b82f6"
DEFAULT_ICON = "inbox"
LIST_ICON = "list"


class Watchlist(Base):
    __tablename__ = "watchlists"
    __table_args__ = (
        UniqueConstraint("user_email", "name", name="uq_watchlist_user_name"),
        # one default list per user
        Index(
            "uq_watchlist_user_default",
            "user_email",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True, default="")
    is_default = Column(Boolean, nullable=False, default=False)
    color = Column(String, nullable=False, default=DEFAULT_COLOR)
    icon = Column(String, nullable=False, default=LIST_ICON)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    movies = relationship(
        "WatchlistMovie",
        back_populates="watchlist",
        cascade="all, delete-orphan",
    )


class WatchlistMovie(MovieSnapshotMixin, Base):
    __tablename__ = "watchlist_movies"
    __table_args__ = (
        UniqueConstraint("watchlist_id", "movie_id", name="uq_watchlist_movie"),
    )

    id = Column(Integer, primary_key=True, index=True)
    watchlist_id = Column(Integer, ForeignKey("watchlists.id", ondelete="CASCADE"), nullable=False, index=True)
    user_email = Column(String, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    priority = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    watchlist = relationship("Watchlist", back_populates="movies")
