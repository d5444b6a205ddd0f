from typing import List, Optional
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.legacy import EmailWatchlistEntry, WatchedMovie

class SnapshotRepository(BaseRepository):
    """Per-user movie records unique on (user_email, movie_id)"""

    def get_for_user(self, user_email: str, movie_id: int) -> Optional[object]:
        return self.filter_one_by(user_email=user_email, movie_id=movie_id)

    def upsert(self, user_email: str, movie_id: int, fields: dict):
        """Update the existing record or insert a new one"""
        existing = self.get_for_user(user_email, movie_id)
        if existing:
            return self.update(existing, fields), False
        return self.create({"user_email": user_email, "movie_id": movie_id, **fields}), True

    def remove(self, user_email: str, movie_id: int) -> int:
        return self.delete_by(user_email=user_email, movie_id=movie_id)


class EmailWatchlistRepository(SnapshotRepository):
    """Repository for the legacy flat watchlist"""

    def __init__(self, db: Session):
        super().__init__(EmailWatchlistEntry, db)

    def list_for_user(self, user_email: str) -> List[EmailWatchlistEntry]:
        return self.filter_by(
            order_by=(EmailWatchlistEntry.created_at, EmailWatchlistEntry.id),
            user_email=user_email,
        )


class WatchedMovieRepository(SnapshotRepository):
    """Repository for watched movies"""

    def __init__(self, db: Session):
        super().__init__(WatchedMovie, db)

    def list_for_user(self, user_email: str) -> List[WatchedMovie]:
        return self.filter_by(
            order_by=(WatchedMovie.watched_at, WatchedMovie.id),
            user_email=user_email,
        )

    def watched_by_any(self, movie_id: int, user_emails: List[str]) -> List[WatchedMovie]:
        if not user_emails:
            return []
        return (
            self.db.query(WatchedMovie)
            .filter(WatchedMovie.movie_id == movie_id, WatchedMovie.user_email.in_(user_emails))
            .order_by(WatchedMovie.watched_at.desc())
            .all()
        )
