import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.exceptions import handle_exception
from app.db import get_db
from app.schemas.common import MessageResponse
from app.schemas.movie import FriendWhoWatched, WatchedMovieCreate, WatchedMovieResponse
from app.services.friendship_service import FriendshipService
from app.services.watched_service import WatchedMovieService

router = APIRouter(prefix="/api/watched", tags=["watched"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[WatchedMovieResponse])
def list_watched_movies(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return WatchedMovieService(db).list(current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch watched movies")


@router.post("", response_model=WatchedMovieResponse)
def mark_movie_watched(
    movie: WatchedMovieCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Record a watched movie; it leaves the watchlist unless removeFromWatchlist is false"""
    try:
        return WatchedMovieService(db).mark_watched(
            current_user.email,
            movie.id,
            movie.snapshot(),
            comment=movie.comment,
            rating=movie.rating,
            remove_from_watchlist=movie.removeFromWatchlist,
        )
    except Exception as e:
        raise handle_exception(e, "Failed to mark movie as watched")


@router.delete("/{movie_id}", response_model=MessageResponse)
def remove_watched_movie(
    movie_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        WatchedMovieService(db).remove(current_user.email, movie_id)
        return {"success": True, "message": "Movie removed from watched list"}
    except Exception as e:
        raise handle_exception(e, "Failed to remove movie from watched list")


@router.get("/{movie_id}/friends", response_model=List[FriendWhoWatched])
def list_friends_who_watched(
    movie_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return FriendshipService(db).friends_who_watched(current_user.email, movie_id)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch friends who watched this movie")
