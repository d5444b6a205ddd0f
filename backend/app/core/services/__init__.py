from .movie_service import MovieService
from .person_service import PersonService

__all__ = ["MovieService", "PersonService"]
