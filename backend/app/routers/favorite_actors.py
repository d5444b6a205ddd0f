from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.exceptions import handle_exception
from app.db import get_db
from app.schemas.actor import FavoriteActorCreate, FavoriteActorResponse
from app.schemas.common import MessageResponse
from app.services.favorite_actor_service import FavoriteActorService

router = APIRouter(prefix="/api/favorite-actors", tags=["actors"])


@router.get("", response_model=List[FavoriteActorResponse])
def list_favorite_actors(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return FavoriteActorService(db).list(current_user.email)
    except Exception as e:
        raise handle_exception(e, "Failed to fetch favorite actors")


@router.post("", response_model=FavoriteActorResponse)
def add_favorite_actor(
    actor: FavoriteActorCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return FavoriteActorService(db).add(current_user.email, actor.id, {
            "actor_name": actor.name,
            "profile_path": actor.profile_path,
            "known_for_department": actor.known_for_department,
            "popularity": actor.popularity,
        })
    except Exception as e:
        raise handle_exception(e, "Failed to add actor to favorites")


@router.delete("/{actor_id}", response_model=MessageResponse)
def remove_favorite_actor(
    actor_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        FavoriteActorService(db).remove(current_user.email, actor_id)
        return {"success": True, "message": "Actor removed from favorites"}
    except Exception as e:
        raise handle_exception(e, "Failed to remove actor from favorites")
