from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.schemas.common import CamelModel
from app.schemas.movie import MovieSnapshotIn, MovieSnapshotOut


class WatchlistCreate(CamelModel):
    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class WatchlistUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class WatchlistResponse(CamelModel):
    id: int
    user_email: str
    name: str
    description: Optional[str] = None
    is_default: bool
    color: str
    icon: str
    sort_order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    movie_count: int = 0


class WatchlistMovieResponse(MovieSnapshotOut):
    created_at: Optional[datetime] = None
    notes: Optional[str] = None
    priority: int = 0


class WatchlistDetailResponse(WatchlistResponse):
    movies: List[WatchlistMovieResponse] = Field(default_factory=list)


class WatchlistMovieCreate(MovieSnapshotIn):
    notes: Optional[str] = None
    priority: Optional[int] = None


class WatchlistMovieUpdate(BaseModel):
    notes: Optional[str] = None
    priority: Optional[int] = None


class WatchlistMovieActionResponse(BaseModel):
    success: bool = True
    message: str
    movie: WatchlistMovieResponse


class WatchlistDeleteResponse(BaseModel):
    success: bool = True
    message: str
    watchlistDeleted: bool = True
    movedMovies: int
    skippedMovies: int
    failedMovies: int
    failedMovieIds: List[int] = Field(default_factory=list)


class MigrationStats(BaseModel):
    totalMovies: int
    migratedMovies: int
    skippedMovies: int
    errors: int
    failedMovieIds: List[int] = Field(default_factory=list)


class MigrationResponse(BaseModel):
    success: bool = True
    message: str
    watchlistId: int
    stats: MigrationStats
