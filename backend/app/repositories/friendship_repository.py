from typing import List, Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.friendship import Friendship, FriendshipStatus

class FriendshipRepository(BaseRepository[Friendship]):
    """Friend requests keyed by the two parties' emails"""

    def __init__(self, db: Session):
        super().__init__(Friendship, db)

    def _ordered(self, query):
        return query.order_by(Friendship.created_at, Friendship.id)

    def list_involving(self, email: str, status: Optional[str] = None) -> List[Friendship]:
        """Rows where the email is either party, optionally filtered by status"""
        query = self.db.query(Friendship).filter(
            or_(Friendship.user_email == email, Friendship.friend_email == email)
        )
        if status:
            query = query.filter(Friendship.status == status)
        return self._ordered(query).all()

    def list_incoming_pending(self, email: str) -> List[Friendship]:
        query = self.db.query(Friendship).filter(
            Friendship.friend_email == email,
            Friendship.status == FriendshipStatus.PENDING.value,
        )
        return self._ordered(query).all()

    def list_outgoing_pending(self, email: str) -> List[Friendship]:
        query = self.db.query(Friendship).filter(
            Friendship.user_email == email,
            Friendship.status == FriendshipStatus.PENDING.value,
        )
        return self._ordered(query).all()

    def get_between(self, first_email: str, second_email: str) -> Optional[Friendship]:
        """Row for the unordered pair, in either direction"""
        return self.db.query(Friendship).filter(
            or_(
                and_(Friendship.user_email == first_email, Friendship.friend_email == second_email),
                and_(Friendship.user_email == second_email, Friendship.friend_email == first_email),
            )
        ).first()

    def get_accepted_between(self, first_email: str, second_email: str) -> Optional[Friendship]:
        friendship = self.get_between(first_email, second_email)
        if friendship and friendship.status == FriendshipStatus.ACCEPTED.value:
            return friendship
        return None

    def accepted_friend_emails(self, email: str) -> List[str]:
        return [
            friendship.other_party(email)
            for friendship in self.list_involving(email, FriendshipStatus.ACCEPTED.value)
        ]
