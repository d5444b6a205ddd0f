import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.exceptions import handle_exception
from app.db import get_db
from app.schemas.common import MessageResponse
from app.schemas.watchlist import (
    MigrationResponse, WatchlistCreate, WatchlistDeleteResponse, WatchlistDetailResponse,
    WatchlistMovieActionResponse, WatchlistMovieCreate, WatchlistMovieResponse,
    WatchlistMovieUpdate, WatchlistResponse, WatchlistUpdate
)
from app.services.watchlist_service import WatchlistService

router = APIRouter(prefix="/api", tags=["watchlists"])
logger = logging.getLogger(__name__)


@router.get("/watchlists", response_model=List[WatchlistResponse])
def list_watchlists(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """List the caller's watchlists, creating the default one on first use"""
    try:
        return WatchlistService(db).list_watchlists(current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch watchlists")


@router.post("/watchlists", response_model=WatchlistResponse)
def create_watchlist(
    request: WatchlistCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return WatchlistService(db).create_watchlist(
            current_user.email,
            name=request.name,
            description=request.description,
            color=request.color,
            icon=request.icon,
        )
    except Exception as e:
        raise handle_exception(e, "Failed to create watchlist")


@router.get("/watchlists/{watchlist_id}", response_model=WatchlistDetailResponse)
def get_watchlist(
    watchlist_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return WatchlistService(db).get_watchlist(watchlist_id, current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch watchlist details")


@router.patch("/watchlists/{watchlist_id}", response_model=WatchlistResponse)
def update_watchlist(
    watchlist_id: int,
    request: WatchlistUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        patch = request.model_dump(exclude_unset=True)
        return WatchlistService(db).update_watchlist(watchlist_id, current_user.email, patch)
    except Exception as e:
        raise handle_exception(e, "Failed to update watchlist")


@router.delete("/watchlists/{watchlist_id}", response_model=WatchlistDeleteResponse)
def delete_watchlist(
    watchlist_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Delete a watchlist, moving its movies into the default one"""
    try:
        outcome = WatchlistService(db).delete_watchlist(watchlist_id, current_user.email)
        message = "Watchlist deleted and movies moved to default watchlist"
        if not outcome.complete:
            message = f"Watchlist kept; {outcome.failed} movies could not be moved to default watchlist"
        return {
            "success": outcome.complete,
            "message": message,
            "watchlistDeleted": outcome.complete,
            "movedMovies": outcome.succeeded,
            "skippedMovies": outcome.skipped,
            "failedMovies": outcome.failed,
            "failedMovieIds": outcome.failed_ids,
        }
    except Exception as e:
        raise handle_exception(e, "Failed to delete watchlist")


@router.get("/watchlists/{watchlist_id}/movies", response_model=List[WatchlistMovieResponse])
def list_watchlist_movies(
    watchlist_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return WatchlistService(db).list_movies(watchlist_id, current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch movies from watchlist")


@router.post("/watchlists/{watchlist_id}/movies", response_model=WatchlistMovieActionResponse)
def add_watchlist_movie(
    watchlist_id: int,
    movie: WatchlistMovieCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Add a movie, or refresh it when the list already holds it"""
    try:
        record, created = WatchlistService(db).add_movie(
            watchlist_id,
            current_user.email,
            movie.id,
            movie.snapshot(),
            notes=movie.notes,
            priority=movie.priority,
        )
        message = "Movie added to watchlist" if created else "Movie updated in watchlist"
        return {"success": True, "message": message, "movie": record}
    except Exception as e:
        raise handle_exception(e, "Failed to add movie to watchlist")


@router.patch("/watchlists/{watchlist_id}/movies/{movie_id}", response_model=WatchlistMovieActionResponse)
def update_watchlist_movie(
    watchlist_id: int,
    movie_id: int,
    request: WatchlistMovieUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        record = WatchlistService(db).update_movie(
            watchlist_id, movie_id, current_user.email, notes=request.notes, priority=request.priority
        )
        return {"success": True, "message": "Movie details updated", "movie": record}
    except Exception as e:
        raise handle_exception(e, "Failed to update movie details")


@router.delete("/watchlists/{watchlist_id}/movies/{movie_id}", response_model=MessageResponse)
def remove_watchlist_movie(
    watchlist_id: int,
    movie_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        WatchlistService(db).remove_movie(watchlist_id, movie_id, current_user.email)
        return {"success": True, "message": "Movie removed from watchlist"}
    except Exception as e:
        raise handle_exception(e, "Failed to remove movie from watchlist")


@router.post("/migrate-watchlist", response_model=MigrationResponse)
def migrate_watchlist(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Copy the legacy flat watchlist into the default watchlist"""
    try:
        result = WatchlistService(db).migrate_legacy_watchlist(current_user.email)
        return {"success": True, "message": "Migration completed", **result}
    except Exception as e:
        raise handle_exception(e, "Failed to migrate watchlist")
