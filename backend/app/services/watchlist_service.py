import logging
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core.batch import BatchOutcome, run_batch
from app.core.exceptions import (
    DefaultWatchlistLockedException, MovieNotFoundException, ValidationException,
    WatchlistNameTakenException, WatchlistNotFoundException
)
from app.models.watchlist import (
    Watchlist, WatchlistMovie, DEFAULT_WATCHLIST_NAME, DEFAULT_WATCHLIST_DESCRIPTION,
    DEFAULT_COLOR, DEFAULT_ICON, LIST_ICON
)
from app.repositories.legacy_repository import EmailWatchlistRepository
from app.repositories.watchlist_repository import WatchlistRepository, WatchlistMovieRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "color", "icon", "sort_order")


def watchlist_view(watchlist: Watchlist, movie_count: int, movies: Optional[List[WatchlistMovie]] = None) -> dict:
    view = {
        "id": watchlist.id,
        "user_email": watchlist.user_email,
        "name": watchlist.name,
        "description": watchlist.description,
        "is_default": watchlist.is_default,
        "color": watchlist.color,
        "icon": watchlist.icon,
        "sort_order": watchlist.sort_order,
        "created_at": watchlist.created_at,
        "updated_at": watchlist.updated_at,
        "movie_count": movie_count,
    }
    if movies is not None:
        view["movies"] = movies
    return view


class WatchlistService:
    """Named watchlists with one undeletable default list per user"""

    def __init__(self, db: Session):
        self.db = db
        self.watchlist_repository = WatchlistRepository(db)
        self.movie_repository = WatchlistMovieRepository(db)
        self.legacy_repository = EmailWatchlistRepository(db)

    # Lists

    def ensure_default(self, owner_email: str) -> Watchlist:
        """Return the owner's default list, creating it when missing"""
        default = self.watchlist_repository.get_default(owner_email)
        if default:
            return default

        try:
            default = self.watchlist_repository.create({
                "user_email": owner_email,
                "name": DEFAULT_WATCHLIST_NAME,
                "description": DEFAULT_WATCHLIST_DESCRIPTION,
                "is_default": True,
                "color": DEFAULT_COLOR,
                "icon": DEFAULT_ICON,
                "sort_order": 0,
            })
            logger.info(f"Created default watchlist {default.id} for {owner_email}")
            return default
        except IntegrityError:
            # Another request created it first
            default = self.watchlist_repository.get_default(owner_email)
            if default is None:
                raise
            return default

    def list_watchlists(self, owner_email: str) -> List[dict]:
        self.ensure_default(owner_email)
        watchlists = self.watchlist_repository.list_for_user(owner_email)
        counts = self.watchlist_repository.movie_counts([w.id for w in watchlists])
        return [watchlist_view(w, counts.get(w.id, 0)) for w in watchlists]

    def list_with_movies(self, owner_email: str) -> List[dict]:
        """All lists of a user with their movies, without repairing anything"""
        views = []
        for watchlist in self.watchlist_repository.list_for_user(owner_email):
            movies = self.movie_repository.list_for_watchlist(watchlist.id, owner_email)
            views.append(watchlist_view(watchlist, len(movies), movies))
        return views

    def get_owned(self, watchlist_id: int, owner_email: str) -> Watchlist:
        watchlist = self.watchlist_repository.get_owned(watchlist_id, owner_email)
        if not watchlist:
            raise WatchlistNotFoundException()
        return watchlist

    def get_watchlist(self, watchlist_id: int, owner_email: str) -> dict:
        watchlist = self.get_owned(watchlist_id, owner_email)
        movies = self.movie_repository.list_for_watchlist(watchlist.id, owner_email)
        return watchlist_view(watchlist, len(movies), movies)

    def create_watchlist(
        self,
        owner_email: str,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> dict:
        name = (name or "").strip()
        if not name:
            raise ValidationException("Name is required")
        if self.watchlist_repository.name_taken(owner_email, name):
            raise WatchlistNameTakenException()

        max_order = self.watchlist_repository.max_sort_order(owner_email)
        try:
            watchlist = self.watchlist_repository.create({
                "user_email": owner_email,
                "name": name,
                "description": description or "",
                "is_default": False,
                "color": color or DEFAULT_COLOR,
                "icon": icon or LIST_ICON,
                "sort_order": 0 if max_order is None else max_order + 1,
            })
        except IntegrityError:
            raise WatchlistNameTakenException()

        logger.info(f"Created watchlist {watchlist.id} '{name}' for {owner_email}")
        return watchlist_view(watchlist, 0)

    def update_watchlist(self, watchlist_id: int, owner_email: str, patch: dict) -> dict:
        """Apply only the fields present in `patch`"""
        watchlist = self.get_owned(watchlist_id, owner_email)
        changes = {
            field: value for field, value in patch.items()
            if field in UPDATABLE_FIELDS and value is not None
        }

        if "name" in changes:
            changes["name"] = changes["name"].strip()
            if watchlist.is_default:
                if changes["name"] != watchlist.name:
                    raise DefaultWatchlistLockedException("Cannot change name of default watchlist")
                del changes["name"]
            elif not changes["name"]:
                raise ValidationException("Name is required")
            elif self.watchlist_repository.name_taken(owner_email, changes["name"], exclude_id=watchlist.id):
                raise WatchlistNameTakenException()

        if changes:
            try:
                watchlist = self.watchlist_repository.update(watchlist, changes)
            except IntegrityError:
                raise WatchlistNameTakenException()

        count = self.watchlist_repository.movie_counts([watchlist.id]).get(watchlist.id, 0)
        return watchlist_view(watchlist, count)

    def delete_watchlist(self, watchlist_id: int, owner_email: str) -> BatchOutcome:
        """Delete a list after moving its movies into the default list.

        Movies the default list already holds are skipped. When some movie
        cannot be moved, the list is kept with just those movies and the
        outcome reports them.
        """
        watchlist = self.get_owned(watchlist_id, owner_email)
        if watchlist.is_default:
            raise DefaultWatchlistLockedException("Cannot delete default watchlist")

        default = self.ensure_default(owner_email)
        movies = self.movie_repository.list_for_watchlist(watchlist.id, owner_email)

        def move(movie: WatchlistMovie) -> bool:
            if self.movie_repository.contains(default.id, movie.movie_id, owner_email):
                return False
            self.movie_repository.copy_into(default.id, movie, notes=movie.notes, priority=movie.priority)
            return True

        outcome = run_batch(movies, move, key=lambda movie: movie.movie_id, on_error=lambda _: self.db.rollback())

        # Movies that could not be moved stay where they are, and so does the list
        self.movie_repository.delete_from_watchlist(watchlist.id, owner_email, keep_movie_ids=outcome.failed_ids)
        if not outcome.complete:
            logger.warning(
                f"Kept watchlist {watchlist_id} of {owner_email}: {outcome.failed} movies could not be moved "
                f"({outcome.failed_ids})"
            )
            return outcome

        self.watchlist_repository.delete(watchlist)
        logger.info(
            f"Deleted watchlist {watchlist_id} of {owner_email}: moved {outcome.succeeded}, "
            f"skipped {outcome.skipped}"
        )
        return outcome

    # Movies

    def list_movies(self, watchlist_id: int, owner_email: str) -> List[WatchlistMovie]:
        watchlist = self.get_owned(watchlist_id, owner_email)
        return self.movie_repository.list_for_watchlist(watchlist.id, owner_email)

    def add_movie(
        self,
        watchlist_id: int,
        owner_email: str,
        movie_id: int,
        snapshot: dict,
        notes: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> tuple:
        """Insert the movie or refresh its snapshot. Returns (movie, created)"""
        watchlist = self.get_owned(watchlist_id, owner_email)
        existing = self.movie_repository.get_membership(watchlist.id, movie_id, owner_email)
        if existing:
            fields = dict(snapshot)
            if notes:
                fields["notes"] = notes
            if priority is not None:
                fields["priority"] = priority
            return self.movie_repository.update(existing, fields), False

        try:
            movie = self.movie_repository.create({
                "watchlist_id": watchlist.id,
                "user_email": owner_email,
                "movie_id": movie_id,
                **snapshot,
                "notes": notes or None,
                "priority": priority if priority is not None else 0,
            })
        except IntegrityError:
            # Lost a race with a concurrent insert of the same movie
            existing = self.movie_repository.get_membership(watchlist.id, movie_id, owner_email)
            if existing is None:
                raise
            return self.movie_repository.update(existing, dict(snapshot)), False
        return movie, True

    def remove_movie(self, watchlist_id: int, movie_id: int, owner_email: str) -> None:
        watchlist = self.get_owned(watchlist_id, owner_email)
        self.movie_repository.delete_by(watchlist_id=watchlist.id, movie_id=movie_id, user_email=owner_email)

    def update_movie(
        self,
        watchlist_id: int,
        movie_id: int,
        owner_email: str,
        notes: Optional[str] = None,
        priority: Optional[int] = None,
    ) -> WatchlistMovie:
        watchlist = self.get_owned(watchlist_id, owner_email)
        movie = self.movie_repository.get_membership(watchlist.id, movie_id, owner_email)
        if not movie:
            raise MovieNotFoundException()

        changes = {}
        if notes is not None:
            changes["notes"] = notes
        if priority is not None:
            changes["priority"] = priority
        if not changes:
            return movie
        return self.movie_repository.update(movie, changes)

    # Legacy migration

    def migrate_legacy_watchlist(self, owner_email: str) -> dict:
        """Copy the legacy flat list into the default list, safe to re-run"""
        default = self.ensure_default(owner_email)
        legacy_movies = self.legacy_repository.list_for_user(owner_email)

        def migrate(entry) -> bool:
            if self.movie_repository.contains(default.id, entry.movie_id, owner_email):
                return False
            self.movie_repository.copy_into(default.id, entry)
            return True

        outcome = run_batch(legacy_movies, migrate, key=lambda entry: entry.movie_id, on_error=lambda _: self.db.rollback())
        logger.info(
            f"Migrated legacy watchlist of {owner_email}: total {outcome.total}, "
            f"migrated {outcome.succeeded}, skipped {outcome.skipped}, errors {outcome.failed}"
        )
        return {
            "watchlistId": default.id,
            "stats": {
                "totalMovies": outcome.total,
                "migratedMovies": outcome.succeeded,
                "skippedMovies": outcome.skipped,
                "errors": outcome.failed,
                "failedMovieIds": outcome.failed_ids,
            },
        }
