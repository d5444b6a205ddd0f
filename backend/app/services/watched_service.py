import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.exceptions import NotFoundException
from app.models.legacy import EmailWatchlistEntry, WatchedMovie
from app.repositories.legacy_repository import EmailWatchlistRepository, WatchedMovieRepository

logger = logging.getLogger(__name__)


def _upsert(repository, owner_email: str, movie_id: int, fields: dict):
    """Upsert that treats a concurrent insert of the same row as an update"""
    try:
        return repository.upsert(owner_email, movie_id, fields)
    except IntegrityError:
        existing = repository.get_for_user(owner_email, movie_id)
        if existing is None:
            raise
        return repository.update(existing, fields), False


class WatchedMovieService:
    """Movies a user has already seen"""

    def __init__(self, db: Session):
        self.db = db
        self.watched_repository = WatchedMovieRepository(db)
        self.legacy_repository = EmailWatchlistRepository(db)

    def list(self, owner_email: str) -> List[WatchedMovie]:
        return self.watched_repository.list_for_user(owner_email)

    def mark_watched(
        self,
        owner_email: str,
        movie_id: int,
        snapshot: dict,
        comment: Optional[str] = None,
        rating: Optional[float] = None,
        remove_from_watchlist: bool = True,
    ) -> WatchedMovie:
        fields = {
            **snapshot,
            "watched_at": datetime.now(timezone.utc),
            "comment": comment or None,
            "rating": rating,
        }
        record, created = _upsert(self.watched_repository, owner_email, movie_id, fields)
        logger.info(f"{owner_email} marked movie {movie_id} as watched (new: {created})")

        # Separate step: a failure here leaves the watched record in place
        if remove_from_watchlist:
            removed = self.legacy_repository.remove(owner_email, movie_id)
            if removed:
                logger.info(f"Removed movie {movie_id} from the watchlist of {owner_email}")
        return record

    def remove(self, owner_email: str, movie_id: int) -> int:
        return self.watched_repository.remove(owner_email, movie_id)


class LegacyWatchlistService:
    """The flat single-list watchlist kept for older clients"""

    def __init__(self, db: Session):
        self.db = db
        self.legacy_repository = EmailWatchlistRepository(db)

    def list(self, owner_email: str) -> List[EmailWatchlistEntry]:
        return self.legacy_repository.list_for_user(owner_email)

    def add(self, owner_email: str, movie_id: int, snapshot: dict) -> EmailWatchlistEntry:
        entry, _ = _upsert(self.legacy_repository, owner_email, movie_id, snapshot)
        return entry

    def remove(self, owner_email: str, movie_id: int) -> None:
        if not self.legacy_repository.remove(owner_email, movie_id):
            raise NotFoundException("Movie not found in watchlist")
