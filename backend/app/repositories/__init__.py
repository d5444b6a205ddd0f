from .base_repository import BaseRepository
from .friendship_repository import FriendshipRepository
from .watchlist_repository import WatchlistRepository, WatchlistMovieRepository
from .legacy_repository import EmailWatchlistRepository, WatchedMovieRepository
from .favorite_actor_repository import FavoriteActorRepository

__all__ = [
    "BaseRepository",
    "FriendshipRepository",
    "WatchlistRepository",
    "WatchlistMovieRepository",
    "EmailWatchlistRepository",
    "WatchedMovieRepository",
    "FavoriteActorRepository",
]
