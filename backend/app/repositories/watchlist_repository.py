from typing import Dict, List, Optional, Sequence
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.repositories.base_repository import BaseRepository
from app.models.watchlist import Watchlist, WatchlistMovie

class WatchlistRepository(BaseRepository[Watchlist]):
    """Repository for named watchlists"""

    def __init__(self, db: Session):
        super().__init__(Watchlist, db)

    def get_owned(self, watchlist_id: int, user_email: str) -> Optional[Watchlist]:
        """Get a list only when it belongs to the given user"""
        return self.filter_one_by(id=watchlist_id, user_email=user_email)

    def list_for_user(self, user_email: str) -> List[Watchlist]:
        return (
            self.db.query(Watchlist)
            .filter(Watchlist.user_email == user_email)
            .order_by(Watchlist.sort_order.asc(), Watchlist.created_at.desc(), Watchlist.id.desc())
            .all()
        )

    def get_default(self, user_email: str) -> Optional[Watchlist]:
        return self.filter_one_by(user_email=user_email, is_default=True)

    def name_taken(self, user_email: str, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Watchlist).filter(
            Watchlist.user_email == user_email,
            Watchlist.name == name,
        )
        if exclude_id is not None:
            query = query.filter(Watchlist.id != exclude_id)
        return query.first() is not None

    def max_sort_order(self, user_email: str) -> Optional[int]:
        return (
            self.db.query(func.max(Watchlist.sort_order))
            .filter(Watchlist.user_email == user_email)
            .scalar()
        )

    def movie_counts(self, watchlist_ids: List[int]) -> Dict[int, int]:
        if not watchlist_ids:
            return {}
        rows = (
            self.db.query(WatchlistMovie.watchlist_id, func.count(WatchlistMovie.id))
            .filter(WatchlistMovie.watchlist_id.in_(watchlist_ids))
            .group_by(WatchlistMovie.watchlist_id)
            .all()
        )
        return {watchlist_id: count for watchlist_id, count in rows}


class WatchlistMovieRepository(BaseRepository[WatchlistMovie]):
    """Repository for movie memberships of a watchlist"""

    def __init__(self, db: Session):
        super().__init__(WatchlistMovie, db)

    def list_for_watchlist(self, watchlist_id: int, user_email: str) -> List[WatchlistMovie]:
        return self.filter_by(
            order_by=(WatchlistMovie.created_at, WatchlistMovie.id),
            watchlist_id=watchlist_id,
            user_email=user_email,
        )

    def get_membership(self, watchlist_id: int, movie_id: int, user_email: str) -> Optional[WatchlistMovie]:
        return self.filter_one_by(watchlist_id=watchlist_id, movie_id=movie_id, user_email=user_email)

    def contains(self, watchlist_id: int, movie_id: int, user_email: str) -> bool:
        return self.exists(watchlist_id=watchlist_id, movie_id=movie_id, user_email=user_email)

    def copy_into(self, watchlist_id: int, source, notes: Optional[str] = None, priority: int = 0) -> WatchlistMovie:
        """Insert a snapshot taken from another movie record into a list"""
        return self.create({
            "watchlist_id": watchlist_id,
            "user_email": source.user_email,
            "movie_id": source.movie_id,
            "title": source.title,
            "poster_path": source.poster_path,
            "release_date": source.release_date,
            "overview": source.overview,
            "vote_average": source.vote_average,
            "vote_count": source.vote_count,
            "notes": notes,
            "priority": priority,
        })

    def delete_from_watchlist(self, watchlist_id: int, user_email: str, keep_movie_ids: Sequence[int] = ()) -> int:
        """Bulk delete a list's memberships except the given movies"""
        query = self.db.query(WatchlistMovie).filter(
            WatchlistMovie.watchlist_id == watchlist_id,
            WatchlistMovie.user_email == user_email,
        )
        if keep_movie_ids:
            query = query.filter(WatchlistMovie.movie_id.notin_(list(keep_movie_ids)))
        deleted = query.delete(synchronize_session=False)
        self._commit()
        return deleted
