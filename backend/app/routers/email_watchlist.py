from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.exceptions import handle_exception
from app.db import get_db
from app.schemas.common import MessageResponse
from app.schemas.movie import LegacyWatchlistEntryResponse, MovieSnapshotIn
from app.services.watched_service import LegacyWatchlistService

router = APIRouter(prefix="/api/email-watchlist", tags=["watchlists"])


@router.get("", response_model=List[LegacyWatchlistEntryResponse])
def list_legacy_watchlist(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return LegacyWatchlistService(db).list(current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch watchlist")


@router.post("", response_model=LegacyWatchlistEntryResponse)
def add_to_legacy_watchlist(
    movie: MovieSnapshotIn,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return LegacyWatchlistService(db).add(current_user.email, movie.id, movie.snapshot())
    except Exception as e:
        raise handle_exception(e, "Failed to add movie to watchlist")


@router.delete("/{movie_id}", response_model=MessageResponse)
def remove_from_legacy_watchlist(
    movie_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        LegacyWatchlistService(db).remove(current_user.email, movie_id)
        return {"success": True, "message": "Movie removed from watchlist"}
    except Exception as e:
        raise handle_exception(e, "Failed to remove movie from watchlist")
