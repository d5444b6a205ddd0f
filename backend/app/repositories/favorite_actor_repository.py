from typing import List, Optional
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.favorite_actor import FavoriteActor

class FavoriteActorRepository(BaseRepository[FavoriteActor]):
    """Repository for favourite actors"""

    def __init__(self, db: Session):
        super().__init__(FavoriteActor, db)

    def list_for_user(self, user_email: str) -> List[FavoriteActor]:
        return self.filter_by(
            order_by=(FavoriteActor.created_at, FavoriteActor.id),
            user_email=user_email,
        )

    def get_for_user(self, user_email: str, actor_id: int) -> Optional[FavoriteActor]:
        return self.filter_one_by(user_email=user_email, actor_id=actor_id)
