import logging
import random
from datetime import date
from typing import Dict, Optional
from ..interfaces import MovieServiceInterface, TMDBResponse, TMDBClientInterface, TMDBError
from ..cache import CacheService

logger = logging.getLogger(__name__)

RANDOM_SORT_OPTIONS = [
    "popularity.desc", "popularity.asc",
    "vote_average.desc", "vote_average.asc",
    "primary_release_date.desc", "primary_release_date.asc",
    "revenue.desc", "revenue.asc",
    "original_title.asc", "original_title.desc",
]

class MovieService(MovieServiceInterface):
    """Service class for movie-related operations"""
    
    def __init__(self, client: TMDBClientInterface, cache: Optional[CacheService] = None):
        self.client = client
        self.cache = cache or CacheService()
    
    def _cached(self, cache_key: str, endpoint: str, params: Dict = None, localized: bool = True) -> TMDBResponse:
        cached = self.cache.get_json(cache_key)
        if cached is not None:
            return TMDBResponse(cached, 200, True)
        resp = self.client.make_request(endpoint, params, localized=localized)
        if resp.success:
            self.cache.set_json(cache_key, resp.data)
        return resp
    
    def search_movies(self, query: str, page: int = 1) -> TMDBResponse:
        """Search movies by query"""
        params = {"query": query, "page": page}
        return self.client.make_request("search/movie", params)
    
    def get_popular_movies(self, page: int = 1) -> TMDBResponse:
        return self._cached(f"tmdb:movie:popular:p{page}", "movie/popular", {"page": page})
    
    def get_now_playing(self, page: int = 1) -> TMDBResponse:
        return self._cached(f"tmdb:movie:now_playing:p{page}", "movie/now_playing", {"page": page})
    
    def get_movie_details(self, movie_id: int) -> TMDBResponse:
        return self._cached(f"tmdb:movie:{movie_id}:details", f"movie/{movie_id}")
    
    def get_movie_credits(self, movie_id: int) -> TMDBResponse:
        return self._cached(f"tmdb:movie:{movie_id}:credits", f"movie/{movie_id}/credits", localized=False)
    
    def get_movie_images(self, movie_id: int) -> TMDBResponse:
        return self._cached(f"tmdb:movie:{movie_id}:images", f"movie/{movie_id}/images", localized=False)
    
    def get_movie_videos(self, movie_id: int) -> TMDBResponse:
        """Trailers and clips in the configured language"""
        return self._cached(f"tmdb:movie:{movie_id}:videos", f"movie/{movie_id}/videos")
    
    def get_movie_watch_providers(self, movie_id: int, region: Optional[str] = None) -> TMDBResponse:
        """Watch providers per country, or only the given region's entry"""
        resp = self._cached(
            f"tmdb:movie:{movie_id}:watch_providers", f"movie/{movie_id}/watch/providers", localized=False
        )
        if not resp.success or not region:
            return resp
        region = region.upper()
        results = resp.data.get("results") or {}
        narrowed = {region: results[region]} if region in results else {}
        return TMDBResponse({"id": resp.data.get("id", movie_id), "results": narrowed}, resp.status_code, True)
    
    def get_movie_translations(self, movie_id: int) -> TMDBResponse:
        return self._cached(
            f"tmdb:movie:{movie_id}:translations", f"movie/{movie_id}/translations", localized=False
        )
    
    def discover_movies(self, page: int = 1, **filters) -> TMDBResponse:
        """Discover movies with filters (genre, year, etc.)"""
        params = {"page": page}
        params.update(filters)
        parts = [f"{k}={v}" for k, v in sorted(filters.items())]
        key_suffix = ":".join(parts) if parts else "none"
        return self._cached(f"tmdb:movie:discover:{key_suffix}:p{page}", "discover/movie", params)
    
    def get_random_movie(
        self,
        min_rating: float = 0,
        max_rating: float = 10,
        min_year: int = 1900,
        max_year: Optional[int] = None,
        language: Optional[str] = None,
        include_adult: bool = False,
        genre: Optional[str] = None,
    ) -> Dict:
        """Pick a random movie with a poster, loosening the filters when nothing matches"""
        max_year = max_year or date.today().year
        filters = {
            "sort_by": random.choice(RANDOM_SORT_OPTIONS),
            "vote_average.gte": min_rating,
            "vote_average.lte": max_rating,
            "primary_release_date.gte": f"{min_year}-01-01",
            "primary_release_date.lte": f"{max_year}-12-31",
            "include_adult": str(include_adult).lower(),
            "with_runtime.gte": 30,
        }
        if language:
            filters["with_original_language"] = language
        if genre:
            filters["with_genres"] = genre

        attempts = [
            ("discover/movie", {**filters, "page": random.randint(1, 500)}),
            ("discover/movie", {
                "sort_by": "popularity.desc",
                "vote_average.gte": 0,
                "with_runtime.gte": 30,
                "include_adult": str(include_adult).lower(),
                "page": random.randint(1, 20),
            }),
            ("movie/popular", {"page": 1}),
        ]
        for endpoint, params in attempts:
            resp = self.client.make_request(endpoint, params)
            candidates = [m for m in resp.data.get("results", []) if m.get("poster_path")] if resp.success else []
            if candidates:
                movie = random.choice(candidates)
                logger.info(f"Random movie picked: {movie.get('id')} {movie.get('title')}")
                return movie
            logger.info(f"No random movie candidates from {endpoint}, loosening filters")
        raise TMDBError("No movies found", 404)
