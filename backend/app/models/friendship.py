import enum
from sqlalchemy import Column, Integer, String, DateTime, Index, case
from sqlalchemy.sql import func
from app.db import Base


class FriendshipStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Friendship(Base):
    """Directional friend request: `user_email` asked `friend_email`"""
    __tablename__ = "friends"

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    friend_email = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default=FriendshipStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def involves(self, email: str) -> bool:
        return email in (self.user_email, self.friend_email)

    def other_party(self, email: str) -> str:
        return self.friend_email if self.user_email == email else self.user_email

    def direction_for(self, email: str) -> str:
        return "outgoing" if self.user_email == email else "incoming"

    @property
    def is_pending(self) -> bool:
        return self.status == FriendshipStatus.PENDING.value


# One row per unordered pair: a->b and b->a collide
Index(
    "uq_friends_user_email_friend_email",
    case((Friendship.user_email < Friendship.friend_email, Friendship.user_email), else_=Friendship.friend_email),
    case((Friendship.user_email < Friendship.friend_email, Friendship.friend_email), else_=Friendship.user_email),
    unique=True,
)
