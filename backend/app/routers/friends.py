import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.exceptions import handle_exception
from app.db import get_db
from app.schemas.common import MessageResponse
from app.schemas.friendship import (
    FriendRequestCreate, FriendRequestRespond, FriendshipActionResponse,
    FriendshipResponse, FriendWatchlistResponse
)
from app.services.friendship_service import FriendshipService, friendship_view

router = APIRouter(prefix="/api/friends", tags=["friends"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[FriendshipResponse])
def list_friends(
    status: Optional[str] = Query("accepted", description="accepted, pending, sent or all"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return FriendshipService(db).list_friendships(current_user.email, status)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch friends")


@router.post("", response_model=FriendshipActionResponse)
def send_friend_request(
    request: FriendRequestCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Send a friend request, or accept the one the target already sent"""
    try:
        friendship, message = FriendshipService(db).send_request(current_user.email, request.friend_email)
        return {
            "success": True,
            "message": message,
            "friendship": friendship_view(friendship, current_user.email),
        }
    except Exception as e:
        raise handle_exception(e, "Failed to add friend")


@router.patch("/{friendship_id}", response_model=FriendshipActionResponse)
def respond_to_friend_request(
    friendship_id: int,
    request: FriendRequestRespond,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        friendship = FriendshipService(db).respond(friendship_id, current_user.email, request.status)
        return {
            "success": True,
            "message": f"Friend request {friendship.status}",
            "friendship": friendship_view(friendship, current_user.email),
        }
    except Exception as e:
        raise handle_exception(e, "Failed to update friendship")


@router.delete("/{friendship_id}", response_model=MessageResponse)
def delete_friendship(
    friendship_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        FriendshipService(db).remove(friendship_id, current_user.email)
        return {"success": True, "message": "Friendship deleted"}
    except Exception as e:
        raise handle_exception(e, "Failed to delete friendship")


@router.get("/{friend_email}/watchlist", response_model=FriendWatchlistResponse)
def get_friend_watchlist(
    friend_email: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Read-only view of an accepted friend's watchlists"""
    try:
        return FriendshipService(db).get_friend_watchlist(current_user.email, friend_email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch friend watchlist")
