from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class MovieSnapshotIn(BaseModel):
    """Movie as sent by the client: TMDB id plus the fields we keep locally"""
    id: int = Field(..., gt=0, description="TMDB movie ID")
    title: str = Field(..., min_length=1)
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None

    def snapshot(self) -> dict:
        return {
            "title": self.title,
            "poster_path": self.poster_path or None,
            "release_date": self.release_date or None,
            "overview": self.overview or None,
            "vote_average": self.vote_average,
            "vote_count": self.vote_count,
        }


class MovieSnapshotOut(BaseModel):
    id: int
    movie_id: int
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None

    class Config:
        from_attributes = True


class LegacyWatchlistEntryResponse(MovieSnapshotOut):
    created_at: Optional[datetime] = None


class WatchedMovieCreate(MovieSnapshotIn):
    comment: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=10)
    removeFromWatchlist: bool = True


class WatchedMovieResponse(MovieSnapshotOut):
    watched_at: Optional[datetime] = None
    comment: Optional[str] = None
    rating: Optional[float] = None


class FriendWhoWatched(BaseModel):
    email: str
    display_name: str
    watched_at: Optional[datetime] = None
    rating: Optional[float] = None
