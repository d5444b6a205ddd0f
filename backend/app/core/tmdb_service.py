import logging
from typing import Optional
from .config import get_settings
from .cache import CacheService
from .exceptions import BaseAppException, NotFoundException, UpstreamServiceException
from .interfaces import TMDBConfig, TMDBError, TMDBResponse
from .tmdb_client import TMDBClient
from .services import MovieService, PersonService

logger = logging.getLogger(__name__)

class TMDBServiceFactory:
    """Factory class for creating TMDB services"""
    
    @staticmethod
    def create_client(config: Optional[TMDBConfig] = None) -> TMDBClient:
        if config is None:
            config = TMDBConfig.from_settings(get_settings())
        return TMDBClient(config)
    
    @staticmethod
    def create_movie_service(config: Optional[TMDBConfig] = None) -> MovieService:
        """Create a new movie service instance"""
        return MovieService(TMDBServiceFactory.create_client(config), CacheService())
    
    @staticmethod
    def create_person_service(config: Optional[TMDBConfig] = None) -> PersonService:
        """Create a new person service instance"""
        return PersonService(TMDBServiceFactory.create_client(config), CacheService())


def get_movie_service() -> MovieService:
    """FastAPI dependency"""
    return TMDBServiceFactory.create_movie_service()


def get_person_service() -> PersonService:
    """FastAPI dependency"""
    return TMDBServiceFactory.create_person_service()


def unwrap(resp: TMDBResponse, not_found_message: str = "Not found") -> dict:
    """Return the payload of a TMDB response or raise the matching domain error"""
    if resp.success:
        return resp.data
    if resp.status_code == 404:
        raise NotFoundException(not_found_message)
    raise UpstreamServiceException(f"TMDB request failed with status {resp.status_code}")


def as_app_exception(e: TMDBError) -> BaseAppException:
    if e.status_code == 404:
        return NotFoundException(e.message)
    return UpstreamServiceException(e.message)
