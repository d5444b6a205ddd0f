import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.auth import display_name, normalize_email
from app.core.exceptions import (
    FriendshipNotFoundException, FriendRequestException,
    ForbiddenException, NotFriendsException, ValidationException
)
from app.models.friendship import Friendship, FriendshipStatus
from app.repositories.friendship_repository import FriendshipRepository
from app.repositories.legacy_repository import EmailWatchlistRepository, WatchedMovieRepository
from app.services.watchlist_service import WatchlistService

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("accepted", "pending", "sent", "all")


def friend_info(email: str) -> dict:
    # the identity provider is not queried, so the email doubles as the id
    return {"id": email, "email": email, "display_name": display_name(email)}


def friendship_view(friendship: Friendship, caller_email: str) -> dict:
    """Friendship row annotated from the caller's point of view"""
    return {
        "id": friendship.id,
        "user_email": friendship.user_email,
        "friend_email": friendship.friend_email,
        "status": friendship.status,
        "created_at": friendship.created_at,
        "updated_at": friendship.updated_at,
        "direction": friendship.direction_for(caller_email),
        "friend": friend_info(friendship.other_party(caller_email)),
    }


class FriendshipService:
    """Friend requests and the views friends get of each other"""

    def __init__(self, db: Session):
        self.db = db
        self.friendship_repository = FriendshipRepository(db)
        self.watched_repository = WatchedMovieRepository(db)
        self.email_watchlist_repository = EmailWatchlistRepository(db)

    def list_friendships(self, caller_email: str, status_filter: Optional[str] = "accepted") -> List[dict]:
        """List friendships for one of the filters: accepted, pending (incoming), sent (outgoing), all"""
        status_filter = status_filter or "accepted"
        if status_filter not in STATUS_FILTERS:
            raise ValidationException(
                f"Invalid status filter. Must be one of: {', '.join(STATUS_FILTERS)}"
            )

        if status_filter == "all":
            rows = self.friendship_repository.list_involving(caller_email)
        elif status_filter == "pending":
            rows = self.friendship_repository.list_incoming_pending(caller_email)
        elif status_filter == "sent":
            rows = self.friendship_repository.list_outgoing_pending(caller_email)
        else:
            rows = self.friendship_repository.list_involving(caller_email, FriendshipStatus.ACCEPTED.value)

        return [friendship_view(row, caller_email) for row in rows]

    def send_request(self, caller_email: str, target_email: str) -> tuple:
        """Create a friend request, or accept the reverse one if it exists.

        Returns the friendship and a human readable message.
        """
        target_email = normalize_email(target_email)
        if not target_email:
            raise FriendRequestException("Friend email is required")
        if target_email == caller_email:
            raise FriendRequestException("You cannot add yourself as a friend")

        existing = self.friendship_repository.get_between(caller_email, target_email)
        if existing:
            if existing.status == FriendshipStatus.ACCEPTED.value:
                raise FriendRequestException("You are already friends with this user")

            if existing.is_pending and existing.friend_email == caller_email:
                friendship = self.friendship_repository.update(
                    existing, {"status": FriendshipStatus.ACCEPTED.value}
                )
                logger.info(f"{caller_email} accepted pending request from {target_email}")
                return friendship, "Friend request accepted"

            if existing.is_pending:
                raise FriendRequestException("Friend request already sent")

            # A rejected request is re-opened from the new requester
            friendship = self.friendship_repository.update(existing, {
                "user_email": caller_email,
                "friend_email": target_email,
                "status": FriendshipStatus.PENDING.value,
            })
            logger.info(f"{caller_email} re-sent a friend request to {target_email}")
            return friendship, "Friend request sent"

        try:
            friendship = self.friendship_repository.create({
                "user_email": caller_email,
                "friend_email": target_email,
                "status": FriendshipStatus.PENDING.value,
            })
        except IntegrityError:
            raise FriendRequestException("Friend request already sent")

        logger.info(f"{caller_email} sent a friend request to {target_email}")
        return friendship, "Friend request sent"

    def respond(self, friendship_id: int, caller_email: str, decision: str) -> Friendship:
        """Accept or reject an incoming request"""
        if decision not in (FriendshipStatus.ACCEPTED.value, FriendshipStatus.REJECTED.value):
            raise ValidationException('Invalid status. Must be "accepted" or "rejected"')

        friendship = self.friendship_repository.get(friendship_id)
        if not friendship:
            raise FriendshipNotFoundException()
        if friendship.friend_email != caller_email:
            raise ForbiddenException("You are not authorized to update this friendship")
        if not friendship.is_pending:
            raise FriendRequestException("This friendship is not pending")

        friendship = self.friendship_repository.update(friendship, {"status": decision})
        logger.info(f"Friendship {friendship_id} {decision} by {caller_email}")
        return friendship

    def remove(self, friendship_id: int, caller_email: str) -> None:
        friendship = self.friendship_repository.get(friendship_id)
        if not friendship:
            raise FriendshipNotFoundException()
        if not friendship.involves(caller_email):
            raise ForbiddenException("You are not authorized to delete this friendship")

        self.friendship_repository.delete(friendship)
        logger.info(f"Friendship {friendship_id} deleted by {caller_email}")

    def are_friends(self, first_email: str, second_email: str) -> bool:
        return self.friendship_repository.get_accepted_between(first_email, second_email) is not None

    def friend_emails(self, caller_email: str) -> List[str]:
        return self.friendship_repository.accepted_friend_emails(caller_email)

    def get_friend_watchlist(self, caller_email: str, friend_email: str) -> dict:
        """Read-only view of a friend's legacy list and named watchlists"""
        friend_email = normalize_email(friend_email)
        if not friend_email:
            raise ValidationException("Friend email is required")
        if not self.are_friends(caller_email, friend_email):
            raise NotFriendsException()

        watchlist_service = WatchlistService(self.db)
        return {
            "friend": friend_info(friend_email),
            "watchlist": self.email_watchlist_repository.list_for_user(friend_email),
            "watchlists": watchlist_service.list_with_movies(friend_email),
        }

    def friends_who_watched(self, caller_email: str, movie_id: int) -> List[dict]:
        friend_emails = self.friend_emails(caller_email)
        return [
            {
                "email": record.user_email,
                "display_name": display_name(record.user_email),
                "watched_at": record.watched_at,
                "rating": record.rating,
            }
            for record in self.watched_repository.watched_by_any(movie_id, friend_emails)
        ]
