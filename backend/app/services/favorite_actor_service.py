import logging
from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import ActorNotFoundException
from app.models.favorite_actor import FavoriteActor
from app.repositories.favorite_actor_repository import FavoriteActorRepository

logger = logging.getLogger(__name__)


class FavoriteActorService:
    def __init__(self, db: Session):
        self.db = db
        self.actor_repository = FavoriteActorRepository(db)

    def list(self, owner_email: str) -> List[FavoriteActor]:
        return self.actor_repository.list_for_user(owner_email)

    def add(self, owner_email: str, actor_id: int, fields: dict) -> FavoriteActor:
        """Add an actor to favourites or refresh the stored details"""
        existing = self.actor_repository.get_for_user(owner_email, actor_id)
        if existing:
            return self.actor_repository.update(existing, fields)
        try:
            actor = self.actor_repository.create({"user_email": owner_email, "actor_id": actor_id, **fields})
        except IntegrityError:
            existing = self.actor_repository.get_for_user(owner_email, actor_id)
            if existing is None:
                raise
            return self.actor_repository.update(existing, fields)
        logger.info(f"{owner_email} added actor {actor_id} to favourites")
        return actor

    def remove(self, owner_email: str, actor_id: int) -> None:
        actor = self.actor_repository.get_for_user(owner_email, actor_id)
        if not actor:
            raise ActorNotFoundException()
        self.actor_repository.delete(actor)
