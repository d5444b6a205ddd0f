from abc import ABC, abstractmethod
from typing import Dict, Optional
from dataclasses import dataclass

@dataclass
class TMDBConfig:
    """Connection settings for the TMDB v3 API"""
    api_key: Optional[str] = None
    read_token: Optional[str] = None  # v4 bearer token, wins over api_key
    base_url: str = "https://api.themoviedb.org/3"
    language: str = "uk-UA"
    region: str = "UA"
    timeout: int = 30

    @classmethod
    def from_settings(cls, settings) -> "TMDBConfig":
        return cls(
            api_key=settings.TMDB_API_KEY,
            read_token=settings.TMDB_READ_TOKEN,
            language=settings.TMDB_LANGUAGE,
            region=settings.TMDB_REGION,
            timeout=settings.TMDB_TIMEOUT,
        )

class TMDBResponse:
    """Payload and status of one TMDB call; `success` is False for non-200 answers"""
    def __init__(self, data: Dict, status_code: int, success: bool):
        self.data = data
        self.status_code = status_code
        self.success = success

class TMDBError(Exception):
    """Raised when TMDB cannot be reached or nothing usable comes back"""
    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class TMDBClientInterface(ABC):

    @abstractmethod
    def make_request(self, endpoint: str, params: Dict = None, localized: bool = True) -> TMDBResponse:
        """GET `endpoint`; `localized` adds the configured language"""

class MovieServiceInterface(ABC):
    """Movie lookups used by the metadata routes and the recommender"""

    @abstractmethod
    def search_movies(self, query: str, page: int = 1) -> TMDBResponse:
        pass

    @abstractmethod
    def get_popular_movies(self, page: int = 1) -> TMDBResponse:
        pass

    @abstractmethod
    def get_now_playing(self, page: int = 1) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_details(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_credits(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_images(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_videos(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_watch_providers(self, movie_id: int, region: Optional[str] = None) -> TMDBResponse:
        pass

    @abstractmethod
    def get_movie_translations(self, movie_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def discover_movies(self, page: int = 1, **filters) -> TMDBResponse:
        pass

    @abstractmethod
    def get_random_movie(self, **filters) -> Dict:
        """One movie dict, raising TMDBError when nothing matches"""

class PersonServiceInterface(ABC):
    """Actor and crew lookups"""

    @abstractmethod
    def get_person_details(self, person_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_person_movie_credits(self, person_id: int) -> TMDBResponse:
        pass

    @abstractmethod
    def get_popular_people(self, page: int = 1) -> TMDBResponse:
        pass

    @abstractmethod
    def search_people(self, query: str, page: int = 1) -> TMDBResponse:
        pass
