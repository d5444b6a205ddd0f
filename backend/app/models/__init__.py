from app.db import Base
from .friendship import Friendship, FriendshipStatus
from .watchlist import Watchlist, WatchlistMovie
from .legacy import EmailWatchlistEntry, WatchedMovie
from .favorite_actor import FavoriteActor

__all__ = [
    'Friendship', 'FriendshipStatus', 'Watchlist', 'WatchlistMovie',
    'EmailWatchlistEntry', 'WatchedMovie', 'FavoriteActor'
]
